"""Draw result models and the derived winning records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LOT1_RE = re.compile(r"^[0-9]{2,3}$")
_LOT_RE = re.compile(r"^[0-9]{2}$")


class DrawResult(BaseModel):
    """Published winning numbers for one draw, slot and day."""

    model_config = ConfigDict(frozen=True)

    draw_id: str
    draw_time: str
    draw_date: str
    lot1: str                       # 3 digits when the draw publishes a pick-3
    lot2: Optional[str] = None
    lot3: Optional[str] = None
    published_at: Optional[datetime] = None
    published_by: Optional[str] = None

    @property
    def borlette_lot1(self) -> str:
        """Last two digits of lot1, the first borlette lot."""
        return self.lot1[-2:]

    @classmethod
    def from_doc(cls, doc: Mapping[str, Any]) -> "DrawResult":
        return cls(**{k: v for k, v in doc.items() if k != "_id"})


class ResultPublish(BaseModel):
    """Request body for publishing a draw result."""

    model_config = ConfigDict(populate_by_name=True)

    draw: str
    draw_time: str = Field(alias="drawTime")
    draw_date: Optional[date] = Field(default=None, alias="date")
    lot1: str
    lot2: Optional[str] = None
    lot3: Optional[str] = None

    @field_validator("lot1")
    @classmethod
    def lot1_format(cls, v: str) -> str:
        v = v.strip()
        if not _LOT1_RE.match(v):
            raise ValueError("lot1 must have 2 or 3 digits.")
        return v

    @field_validator("lot2", "lot3")
    @classmethod
    def lot_format(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        v = v.strip()
        if not _LOT_RE.match(v):
            raise ValueError("lot2 and lot3 must have 2 digits.")
        return v


class CheckWinnersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    draw: str
    draw_time: str = Field(alias="drawTime")
    draw_date: Optional[date] = Field(default=None, alias="date")


@dataclass(frozen=True)
class WinOutcome:
    """A winning bet line: which tiers matched and what it pays."""

    bet_type: str
    number: str
    matched: tuple[str, ...]        # e.g. ("lot2",) or ("option1", "option3")
    multiplier: int                 # Sum of the matched tier multipliers
    payout: float
    line_index: int = -1


@dataclass(frozen=True)
class TicketEvaluation:
    ticket_id: Optional[str]
    total_winnings: float
    winning_lines: tuple[WinOutcome, ...] = field(default_factory=tuple)

    @property
    def is_winner(self) -> bool:
        return bool(self.winning_lines)
