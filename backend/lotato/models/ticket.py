"""
backend/lotato/models/ticket.py

Purpose:
    Ticket and bet line-item models. A ticket carries an immutable snapshot of
    the issuing agent's ancestry taken at creation time, so later agent
    re-assignment never changes historical attribution.

Dependencies:
    - pydantic
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class TicketStatus(str, Enum):
    pending = "pending"        # Sold, awaiting supervisor review
    validated = "validated"    # Reviewed by a supervisor (terminal)


class BetLineIn(BaseModel):
    """One bet as entered at the point of sale."""

    type: str
    number: str
    amount: float
    options: List[str] = []


class BetLine(BaseModel):
    """A catalog-validated bet line. Immutable once on a ticket."""

    model_config = ConfigDict(frozen=True)

    type: str
    name: str
    number: str
    amount: float                    # Stake per option for lotto4/lotto5
    options: tuple[str, ...] = ()
    multiplier: int                  # Headline multiplier snapshot (tier 1 / option1)

    @property
    def stake(self) -> float:
        return self.amount * max(1, len(self.options))


class AncestrySnapshot(BaseModel):
    """Supervisory chain of an agent, frozen onto the ticket at sale time."""

    model_config = ConfigDict(frozen=True)

    supervisor1_id: Optional[str] = None
    supervisor2_id: Optional[str] = None
    subsystem_id: Optional[str] = None


class Ticket(BaseModel):
    """Full ticket document as stored in MongoDB."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    ticket_number: str
    agent_id: str
    agent_name: str
    draw_id: str
    draws: List[str]
    is_multi_draw: bool = False
    draw_time: str
    draw_date: str                  # Draw-local YYYY-MM-DD
    bets: List[BetLine]
    total_amount: float
    commission: float = 0.0
    status: TicketStatus = TicketStatus.pending

    # Ancestry snapshot, flattened so scope filters hit plain fields
    supervisor1_id: Optional[str] = None
    supervisor2_id: Optional[str] = None
    subsystem_id: Optional[str] = None

    validated_by: Optional[str] = None
    validated_at: Optional[datetime] = None
    paid: bool = False              # Display-only; payouts are settled outside this service
    created_at: datetime

    @classmethod
    def issue(
        cls,
        *,
        ticket_number: str,
        agent_id: str,
        agent_name: str,
        ancestry: AncestrySnapshot,
        draws: list[str],
        draw_time: str,
        draw_date: str,
        bets: list[BetLine],
        commission_rate: float,
        created_at: datetime,
    ) -> "Ticket":
        """Build a new pending ticket, computing totals and copying ancestry."""
        line_total = sum(bet.stake for bet in bets)
        is_multi_draw = len(draws) > 1
        total = line_total * len(draws) if is_multi_draw else line_total
        return cls(
            ticket_number=ticket_number,
            agent_id=agent_id,
            agent_name=agent_name,
            draw_id=draws[0],
            draws=list(draws),
            is_multi_draw=is_multi_draw,
            draw_time=draw_time,
            draw_date=draw_date,
            bets=list(bets),
            total_amount=total,
            commission=round(total * commission_rate / 100.0, 2),
            status=TicketStatus.pending,
            supervisor1_id=ancestry.supervisor1_id,
            supervisor2_id=ancestry.supervisor2_id,
            subsystem_id=ancestry.subsystem_id,
            created_at=created_at,
        )

    @property
    def ancestry(self) -> AncestrySnapshot:
        return AncestrySnapshot(
            supervisor1_id=self.supervisor1_id,
            supervisor2_id=self.supervisor2_id,
            subsystem_id=self.subsystem_id,
        )

    def to_doc(self) -> dict[str, Any]:
        doc = self.model_dump(exclude={"id"})
        doc["status"] = self.status.value
        doc["bets"] = [
            {**bet.model_dump(), "options": list(bet.options)} for bet in self.bets
        ]
        return doc

    @classmethod
    def from_doc(cls, doc: Mapping[str, Any]) -> "Ticket":
        data = {k: v for k, v in doc.items() if k != "_id"}
        return cls(id=str(doc["_id"]), **data)


class TicketCreate(BaseModel):
    """Request body for a single-draw ticket."""

    model_config = ConfigDict(populate_by_name=True)

    draw: str
    draw_time: str = Field(alias="drawTime")
    line_items: List[BetLineIn] = Field(alias="lineItems")


class MultiDrawTicketCreate(BaseModel):
    """Request body for one set of bets played on several draws."""

    model_config = ConfigDict(populate_by_name=True)

    draws: List[str] = Field(min_length=2)
    draw_time: str = Field(alias="drawTime")
    line_items: List[BetLineIn] = Field(alias="lineItems")


class ValidateTicketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ticket_id: str = Field(alias="ticketId")


class TicketFilters(BaseModel):
    """Optional narrowing applied after the scope predicate."""

    draw_id: Optional[str] = None
    draw_time: Optional[str] = None
    draw_date: Optional[str] = None
    status: Optional[TicketStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    period: Optional[Literal["today", "week", "month"]] = None
    limit: int = 100
