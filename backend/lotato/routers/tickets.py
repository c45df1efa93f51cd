"""
backend/lotato/routers/tickets.py

Purpose:
    Ticket sale, review, scoped listing and winner checks over HTTP.

Dependencies:
    - lotato.services.ticket_service
"""

from dataclasses import asdict
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from lotato.dependencies import Services, get_current_principal, get_services
from lotato.models.principal import Principal
from lotato.models.result import CheckWinnersRequest
from lotato.models.ticket import (
    MultiDrawTicketCreate,
    TicketCreate,
    TicketFilters,
    TicketStatus,
    ValidateTicketRequest,
)

router = APIRouter(prefix="/api", tags=["tickets"])


@router.post("/tickets", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    body: TicketCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    ticket = await services.tickets.create(principal, body)
    return {"success": True, "ticket": ticket}


@router.post("/tickets/multi-draw", status_code=status.HTTP_201_CREATED)
async def create_multi_draw_ticket(
    body: MultiDrawTicketCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    ticket = await services.tickets.create_multi_draw(principal, body)
    return {"success": True, "ticket": ticket}


@router.post("/tickets/validate")
async def validate_ticket(
    body: ValidateTicketRequest,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    ticket = await services.tickets.validate(principal, body.ticket_id)
    return {"success": True, "ticket": ticket}


@router.get("/tickets/pending")
async def list_pending(
    limit: int = Query(100, ge=1),
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    tickets = await services.tickets.list_pending(principal, limit)
    return {"tickets": tickets, "count": len(tickets)}


@router.get("/tickets")
async def list_tickets(
    period: Optional[Literal["today", "week", "month"]] = Query(None),
    draw: Optional[str] = Query(None),
    draw_time: Optional[str] = Query(None, alias="drawTime"),
    draw_date: Optional[date] = Query(None, alias="date"),
    ticket_status: Optional[TicketStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    limit: int = Query(100, ge=1),
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    filters = TicketFilters(
        draw_id=draw,
        draw_time=draw_time,
        draw_date=draw_date.isoformat() if draw_date else None,
        status=ticket_status,
        date_from=date_from,
        date_to=date_to,
        period=period,
        limit=limit,
    )
    tickets = await services.tickets.list_scoped(principal, filters)
    return {"tickets": tickets, "count": len(tickets)}


@router.get("/tickets/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return await services.tickets.get_scoped(principal, ticket_id)


@router.post("/check-winners")
async def check_winners(
    body: CheckWinnersRequest,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    report = await services.tickets.check_winners(
        principal, body.draw, body.draw_time, body.draw_date
    )
    return {
        "result": report["result"],
        "checked": report["checked"],
        "count": report["count"],
        "total_winnings": report["total_winnings"],
        "winners": [
            {
                "ticket": ticket,
                "winnings": evaluation.total_winnings,
                "winning_lines": [asdict(line) for line in evaluation.winning_lines],
            }
            for ticket, evaluation in report["winners"]
        ],
    }
