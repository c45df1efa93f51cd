"""
backend/lotato/services/bet_catalog.py

Purpose:
    Bet catalog: typed view over config_games plus the point-of-sale validation
    rules (digit pattern, repdigit constraint, option selection, stake).
    Invalid lines are rejected here, before the payout engine ever sees them.

Dependencies:
    - lotato.config_games
    - lotato.models.ticket
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from lotato.config_games import BET_TYPES, LOTTO_OPTIONS, MARRIAGE_SEPARATOR
from lotato.errors import ValidationError
from lotato.models.ticket import BetLine, BetLineIn
from lotato.utils import is_repdigit


@dataclass(frozen=True)
class BetType:
    game_id: str
    name: str
    category: str
    digits: int
    tier_multipliers: tuple[int, ...] = ()
    option_multipliers: Mapping[str, int] = field(default_factory=dict)
    repdigit: bool = False
    pair: bool = False
    auto: bool = False
    description: str = ""

    @property
    def has_options(self) -> bool:
        return bool(self.option_multipliers)

    @property
    def headline_multiplier(self) -> int:
        if self.has_options:
            return self.option_multipliers[LOTTO_OPTIONS[0]]
        return self.tier_multipliers[0]

    @property
    def number_pattern(self) -> re.Pattern[str]:
        if self.pair:
            sep = re.escape(MARRIAGE_SEPARATOR)
            return re.compile(rf"^[0-9]{{{self.digits}}}{sep}[0-9]{{{self.digits}}}$")
        return re.compile(rf"^[0-9]{{{self.digits}}}$")

    def to_public(self) -> dict:
        return {
            "game_id": self.game_id,
            "name": self.name,
            "category": self.category,
            "digits": self.digits,
            "multipliers": list(self.tier_multipliers),
            "option_multipliers": dict(self.option_multipliers),
            "auto": self.auto,
            "description": self.description,
        }


class BetCatalog:
    """Static game definitions and bet-line validation."""

    def __init__(self, definitions: Mapping[str, dict] = BET_TYPES) -> None:
        self._types: dict[str, BetType] = {}
        for game_id, spec in definitions.items():
            self._types[game_id] = BetType(
                game_id=game_id,
                name=spec["name"],
                category=spec["category"],
                digits=spec["digits"],
                tier_multipliers=tuple(spec.get("tier_multipliers", ())),
                option_multipliers=dict(spec.get("option_multipliers", {})),
                repdigit=bool(spec.get("repdigit")),
                pair=bool(spec.get("pair")),
                auto=bool(spec.get("auto")),
                description=spec.get("description", ""),
            )

    def get(self, game_id: str) -> BetType | None:
        return self._types.get(game_id)

    def all(self) -> list[BetType]:
        return list(self._types.values())

    def validate(self, raw: BetLineIn) -> BetLine:
        """Validate one raw line. Raises ValidationError with field details."""
        bet_type = self.get(raw.type)
        if bet_type is None:
            raise ValidationError(
                f"Unknown game '{raw.type}'.",
                details={"type": "unknown game"},
            )

        number = raw.number.strip()
        if not bet_type.number_pattern.match(number):
            if bet_type.pair:
                expected = f"two {bet_type.digits}-digit balls joined by '{MARRIAGE_SEPARATOR}'"
            else:
                expected = f"{bet_type.digits} digits"
            raise ValidationError(
                f"{bet_type.name}: number must be {expected}.",
                details={"number": f"expected {expected}"},
            )
        if bet_type.repdigit and not is_repdigit(number):
            raise ValidationError(
                f"{bet_type.name}: all digits must be identical.",
                details={"number": "expected identical digits"},
            )

        if not math.isfinite(raw.amount) or raw.amount <= 0:
            raise ValidationError(
                "Amount must be positive.",
                details={"amount": "must be > 0"},
            )

        options = self._validate_options(bet_type, raw.options)
        return BetLine(
            type=bet_type.game_id,
            name=bet_type.name,
            number=number,
            amount=raw.amount,
            options=options,
            multiplier=bet_type.headline_multiplier,
        )

    def validate_lines(self, lines: Iterable[BetLineIn]) -> list[BetLine]:
        """Validate every line, reporting the first failing index."""
        validated: list[BetLine] = []
        for index, raw in enumerate(lines):
            try:
                validated.append(self.validate(raw))
            except ValidationError as exc:
                details = {
                    f"lineItems.{index}.{key}": msg
                    for key, msg in (exc.details or {}).items()
                }
                raise ValidationError(exc.message, details=details) from exc
        return validated

    @staticmethod
    def _validate_options(bet_type: BetType, options: list[str]) -> tuple[str, ...]:
        if not bet_type.has_options:
            if options:
                raise ValidationError(
                    f"{bet_type.name} does not take options.",
                    details={"options": "unsupported option"},
                )
            return ()

        unknown = [opt for opt in options if opt not in bet_type.option_multipliers]
        if unknown:
            raise ValidationError(
                f"Unsupported option(s): {', '.join(unknown)}.",
                details={"options": "unsupported option"},
            )
        selected = tuple(opt for opt in LOTTO_OPTIONS if opt in set(options))
        if not selected:
            raise ValidationError(
                f"{bet_type.name}: select at least one option.",
                details={"options": "at least one option required"},
            )
        return selected
