"""
backend/lotato/services/payout_service.py

Purpose:
    Payout evaluation engine. Matches recorded bet lines against a published
    draw result and computes winnings per game type. Pure and deterministic:
    no I/O, no clock, no randomness, and it never raises on well-formed input.

    Lot conventions:
        lot1 may carry 3 digits (pick-3); its last two digits are the first
        borlette lot. lot2 and lot3 carry 2 digits and may be missing.

Dependencies:
    - lotato.services.bet_catalog
    - lotato.models.result
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Callable, Optional

from lotato.config_games import LOT_TIERS, MARRIAGE_SEPARATOR
from lotato.models.result import DrawResult, TicketEvaluation, WinOutcome
from lotato.models.ticket import BetLine, Ticket
from lotato.services.bet_catalog import BetCatalog, BetType

# (matched tier names, summed multiplier) or None when the line loses
Match = Optional[tuple[tuple[str, ...], int]]
Rule = Callable[[BetLine, BetType, DrawResult], Match]


def _borlette_lots(result: DrawResult) -> list[tuple[str, Optional[str]]]:
    return list(zip(LOT_TIERS, (result.borlette_lot1, result.lot2, result.lot3)))


def _match_tiers(bet: BetLine, bet_type: BetType, result: DrawResult) -> Match:
    # Best tier only: lot1 before lot2 before lot3.
    for (tier, lot), multiplier in zip(_borlette_lots(result), bet_type.tier_multipliers):
        if lot is not None and bet.number == lot:
            return (tier,), multiplier
    return None


def _match_exact_lot1(bet: BetLine, bet_type: BetType, result: DrawResult) -> Match:
    if bet.number == result.lot1:
        return ("lot1",), bet_type.tier_multipliers[0]
    return None


def _match_pair(bet: BetLine, bet_type: BetType, result: DrawResult) -> Match:
    first, second = bet.number.split(MARRIAGE_SEPARATOR)
    remaining = [lot for _, lot in _borlette_lots(result) if lot is not None]
    # Each ball must land on its own lot position.
    for ball in (first, second):
        if ball not in remaining:
            return None
        remaining.remove(ball)
    return ("pair",), bet_type.tier_multipliers[0]


def _any_order(number: str, *lots: Optional[str]) -> bool:
    if any(lot is None for lot in lots):
        return False
    return Counter(number) == Counter("".join(lots))


def _accumulate(digits: int, *lots: Optional[str]) -> Optional[str]:
    """First ``digits`` characters of the lots joined in order."""
    joined = "".join(lot for lot in lots if lot is not None)
    if len(joined) < digits:
        return None
    return joined[:digits]


def _sum_options(bet: BetLine, bet_type: BetType, hits: dict[str, bool]) -> Match:
    matched = tuple(opt for opt in bet.options if hits.get(opt))
    if not matched:
        return None
    return matched, sum(bet_type.option_multipliers[opt] for opt in matched)


def _match_lotto4(bet: BetLine, bet_type: BetType, result: DrawResult) -> Match:
    lot1, lot2, lot3 = result.borlette_lot1, result.lot2, result.lot3
    hits = {
        "option1": lot2 is not None and bet.number == lot1 + lot2,
        "option2": lot2 is not None and lot3 is not None and bet.number == lot2 + lot3,
        "option3": _any_order(bet.number, lot2, lot3),
    }
    return _sum_options(bet, bet_type, hits)


def _match_lotto5(bet: BetLine, bet_type: BetType, result: DrawResult) -> Match:
    lot1, lot2, lot3 = result.lot1, result.lot2, result.lot3
    pool = Counter(lot1 + (lot2 or "") + (lot3 or ""))
    hits = {
        "option1": bet.number == _accumulate(5, lot1, lot2, lot3),
        "option2": lot3 is not None and bet.number == _accumulate(5, lot1, lot3, lot2),
        "option3": Counter(bet.number) <= pool,
    }
    return _sum_options(bet, bet_type, hits)


def _match_auto_lotto4(bet: BetLine, bet_type: BetType, result: DrawResult) -> Match:
    if _any_order(bet.number, result.lot2, result.lot3):
        return ("any_order",), bet_type.tier_multipliers[0]
    return None


_RULES: dict[str, Rule] = {
    "borlette": _match_tiers,
    "boulpe": _match_tiers,
    "lotto3": _match_exact_lot1,
    "grap": _match_exact_lot1,
    "lotto4": _match_lotto4,
    "lotto5": _match_lotto5,
    "marriage": _match_pair,
    "auto-marriage": _match_pair,
    "auto-lotto4": _match_auto_lotto4,
}


class PayoutEngine:
    """Stateless evaluator bound to a bet catalog."""

    def __init__(self, catalog: BetCatalog) -> None:
        self._catalog = catalog

    def evaluate(self, bet: BetLine, result: DrawResult) -> WinOutcome | None:
        """Return the winning outcome of one line, or None if it loses."""
        bet_type = self._catalog.get(bet.type)
        rule = _RULES.get(bet.type)
        if bet_type is None or rule is None:
            return None
        match = rule(bet, bet_type, result)
        if match is None:
            return None
        matched, multiplier = match
        return WinOutcome(
            bet_type=bet.type,
            number=bet.number,
            matched=matched,
            multiplier=multiplier,
            payout=bet.amount * multiplier,
        )

    def evaluate_ticket(self, ticket: Ticket, result: DrawResult) -> TicketEvaluation:
        """Evaluate every line of a ticket that plays the result's draw and slot."""
        if result.draw_id not in ticket.draws or result.draw_time != ticket.draw_time:
            return TicketEvaluation(ticket_id=ticket.id, total_winnings=0.0)

        winning: list[WinOutcome] = []
        for index, bet in enumerate(ticket.bets):
            outcome = self.evaluate(bet, result)
            if outcome is not None:
                winning.append(replace(outcome, line_index=index))

        return TicketEvaluation(
            ticket_id=ticket.id,
            total_winnings=sum(w.payout for w in winning),
            winning_lines=tuple(winning),
        )
