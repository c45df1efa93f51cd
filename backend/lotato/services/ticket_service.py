"""
backend/lotato/services/ticket_service.py

Purpose:
    Ticket lifecycle: sale by an agent (pending), review by a supervisor
    (validated), scoped listing, and winner checks against a published result.

    Every read and the validate transition go through the caller's scope, so a
    ticket outside it is reported exactly like a missing one.

Dependencies:
    - lotato.services.scope_service
    - lotato.services.bet_catalog
    - lotato.services.payout_service
    - lotato.services.draw_service
    - lotato.repositories.base
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from lotato.errors import AuthError, NotFoundError, PermissionDeniedError, ValidationError
from lotato.models.principal import Principal, Role
from lotato.models.ticket import (
    BetLineIn,
    MultiDrawTicketCreate,
    Ticket,
    TicketCreate,
    TicketFilters,
    TicketStatus,
)
from lotato.repositories.base import (
    IdentityStore,
    ResultRepository,
    TicketCounter,
    TicketRepository,
)
from lotato.services.activity_service import ActivityService
from lotato.services.bet_catalog import BetCatalog
from lotato.services.draw_service import DrawService
from lotato.services.payout_service import PayoutEngine
from lotato.services.scope_service import may_validate, resolve_scope
from lotato.utils import utcnow

logger = logging.getLogger("lotato.tickets")

_NOT_FOUND = "Ticket not found."


def _combine(*clauses: dict[str, Any]) -> dict[str, Any]:
    parts = [c for c in clauses if c]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}


class TicketService:
    def __init__(
        self,
        *,
        tickets: TicketRepository,
        results: ResultRepository,
        counter: TicketCounter,
        identity: IdentityStore,
        catalog: BetCatalog,
        payout: PayoutEngine,
        draws: DrawService,
        activity: ActivityService,
        default_commission_rate: float,
        list_max: int,
    ) -> None:
        self._tickets = tickets
        self._results = results
        self._counter = counter
        self._identity = identity
        self._catalog = catalog
        self._payout = payout
        self._draws = draws
        self._activity = activity
        self._default_commission_rate = default_commission_rate
        self._list_max = list_max

    # ---- Sale ----

    async def create(
        self, principal: Principal, draft: TicketCreate, now: Optional[datetime] = None
    ) -> Ticket:
        return await self._issue(principal, [draft.draw], draft.draw_time, draft.line_items, now)

    async def create_multi_draw(
        self, principal: Principal, draft: MultiDrawTicketCreate, now: Optional[datetime] = None
    ) -> Ticket:
        if len(set(draft.draws)) != len(draft.draws):
            raise ValidationError("Each draw may be selected once.", details={"draws": "duplicate draw"})
        return await self._issue(principal, draft.draws, draft.draw_time, draft.line_items, now)

    async def _issue(
        self,
        principal: Principal,
        draw_ids: list[str],
        draw_time: str,
        line_items: list[BetLineIn],
        now: Optional[datetime],
    ) -> Ticket:
        if principal.role is not Role.agent:
            raise PermissionDeniedError("Only agents can sell tickets.")

        agent = await self._identity.get(Role.agent, principal.id)
        if agent is None:
            raise AuthError("Unknown agent.")
        if not agent.get("is_active", True):
            raise PermissionDeniedError("Agent account is disabled.")

        if not line_items:
            raise ValidationError("A ticket needs at least one bet.", details={"lineItems": "empty"})
        bets = self._catalog.validate_lines(line_items)

        now = now or utcnow()
        draw_dates = {self._draws.open_draw_date(draw_id, draw_time, now) for draw_id in draw_ids}
        draw_date = min(draw_dates)

        # Chain as stored now; never recomputed for this ticket afterwards.
        ancestry = await self._identity.ancestry_of(agent)

        rate = agent.get("commission_rate")
        if rate is None:
            rate = self._default_commission_rate

        day_key = draw_date.replace("-", "")
        seq = await self._counter.next_value(f"tickets:{day_key}")

        ticket = Ticket.issue(
            ticket_number=f"T{day_key}{seq:04d}",
            agent_id=principal.id,
            agent_name=agent.get("full_name") or agent["username"],
            ancestry=ancestry,
            draws=draw_ids,
            draw_time=draw_time,
            draw_date=draw_date,
            bets=bets,
            commission_rate=rate,
            created_at=now,
        )
        if ticket.total_amount <= 0:
            raise ValidationError("Ticket total must be positive.")

        ticket = await self._tickets.insert(ticket)
        await self._activity.record(
            actor_id=principal.id,
            actor_role=principal.role.value,
            action="TICKET_CREATED",
            target_id=ticket.id,
            metadata={"ticket_number": ticket.ticket_number, "total": ticket.total_amount},
        )
        logger.info(
            "Ticket %s sold by %s: %s/%s total=%.2f",
            ticket.ticket_number, principal.username, ",".join(draw_ids), draw_time,
            ticket.total_amount,
        )
        return ticket

    # ---- Review ----

    async def validate(
        self, principal: Principal, ticket_id: str, now: Optional[datetime] = None
    ) -> Ticket:
        if not may_validate(principal):
            logger.warning("Validation refused for %s (%s)", principal.username, principal.role)
            raise PermissionDeniedError("This role cannot validate tickets.")

        scope = resolve_scope(principal)
        ticket = await self._tickets.mark_validated(
            ticket_id, scope.to_filter(), principal.id, now or utcnow()
        )
        if ticket is None:
            raise NotFoundError(_NOT_FOUND)

        await self._activity.record(
            actor_id=principal.id,
            actor_role=principal.role.value,
            action="TICKET_VALIDATED",
            target_id=ticket.id,
        )
        logger.info("Ticket %s validated by %s", ticket.ticket_number, principal.username)
        return ticket

    # ---- Reads ----

    def _period_start(self, period: str, now: datetime) -> datetime:
        today = self._draws.local_date(now)
        if period == "today":
            first = today
        elif period == "week":
            first = today - timedelta(days=6)
        else:
            first = today.replace(day=1)
        return self._draws.day_bounds(first)[0]

    def _filter_query(self, filters: TicketFilters, now: datetime) -> dict[str, Any]:
        query: dict[str, Any] = {}
        if filters.draw_id:
            query["draws"] = filters.draw_id
        if filters.draw_time:
            query["draw_time"] = filters.draw_time
        if filters.draw_date:
            query["draw_date"] = filters.draw_date
        if filters.status is not None:
            query["status"] = filters.status.value

        created: dict[str, datetime] = {}
        if filters.period:
            created["$gte"] = self._period_start(filters.period, now)
        if filters.date_from:
            start = self._draws.day_bounds(filters.date_from)[0]
            created["$gte"] = max(created["$gte"], start) if "$gte" in created else start
        if filters.date_to:
            created["$lt"] = self._draws.day_bounds(filters.date_to)[1]
        if created:
            query["created_at"] = created
        return query

    async def list_scoped(
        self, principal: Principal, filters: TicketFilters, now: Optional[datetime] = None
    ) -> list[Ticket]:
        now = now or utcnow()
        scope = resolve_scope(principal)
        query = _combine(scope.to_filter(), self._filter_query(filters, now))
        limit = max(1, min(filters.limit, self._list_max))
        return await self._tickets.find(query, limit)

    async def list_pending(self, principal: Principal, limit: int = 100) -> list[Ticket]:
        filters = TicketFilters(status=TicketStatus.pending, limit=limit)
        return await self.list_scoped(principal, filters)

    async def get_scoped(self, principal: Principal, ticket_id: str) -> Ticket:
        ticket = await self._tickets.get(ticket_id, resolve_scope(principal).to_filter())
        if ticket is None:
            raise NotFoundError(_NOT_FOUND)
        return ticket

    # ---- Winners ----

    async def check_winners(
        self,
        principal: Principal,
        draw_id: str,
        draw_time: str,
        draw_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Evaluate the caller's tickets for one draw, slot and day."""
        self._draws.ensure_exists(draw_id, draw_time)
        day = (draw_date or self._draws.local_date(now)).isoformat()

        result = await self._results.get(draw_id, draw_time, day)
        if result is None:
            raise NotFoundError("No result published for this draw.")

        query = _combine(
            resolve_scope(principal).to_filter(),
            {"draws": draw_id, "draw_time": draw_time, "draw_date": day},
        )
        tickets = await self._tickets.find(query)

        winners = []
        for ticket in tickets:
            evaluation = self._payout.evaluate_ticket(ticket, result)
            if evaluation.is_winner:
                winners.append((ticket, evaluation))

        total = sum(evaluation.total_winnings for _, evaluation in winners)
        logger.info(
            "Winner check %s/%s/%s by %s: %d of %d tickets win %.2f",
            draw_id, draw_time, day, principal.username, len(winners), len(tickets), total,
        )
        return {
            "result": result,
            "checked": len(tickets),
            "winners": winners,
            "count": len(winners),
            "total_winnings": total,
        }
