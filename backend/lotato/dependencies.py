"""
backend/lotato/dependencies.py

Purpose:
    Service container and FastAPI dependencies. Everything is built once in
    the app lifespan and stored on app.state.services; handlers receive it
    through Depends, never through module globals.

Dependencies:
    - fastapi
    - lotato.services.*
    - lotato.repositories.*
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from lotato.config import Settings
from lotato.errors import AuthError, PermissionDeniedError
from lotato.models.principal import Principal, Role
from lotato.repositories.base import IdentityStore
from lotato.repositories.counter_repository import MongoTicketCounter
from lotato.repositories.identity_repository import MongoIdentityRepository
from lotato.repositories.result_repository import MongoResultRepository
from lotato.repositories.ticket_repository import MongoTicketRepository
from lotato.services.activity_service import ActivityService
from lotato.services.auth_service import AuthService
from lotato.services.bet_catalog import BetCatalog
from lotato.services.draw_service import DrawService
from lotato.services.payout_service import PayoutEngine
from lotato.services.result_service import ResultService
from lotato.services.ticket_service import TicketService
from lotato.services.token_service import TokenService
from lotato.services.user_service import UserService

logger = logging.getLogger("lotato.auth")


@dataclass
class Services:
    db: AsyncIOMotorDatabase
    identity: IdentityStore
    catalog: BetCatalog
    draws: DrawService
    tokens: TokenService
    activity: ActivityService
    auth: AuthService
    tickets: TicketService
    results: ResultService
    users: UserService


def build_services(db: AsyncIOMotorDatabase, settings: Settings) -> Services:
    tokens = TokenService(
        settings.JWT_SECRET,
        settings.JWT_SECRET_OLD,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    identity = MongoIdentityRepository(db)
    catalog = BetCatalog()
    draws = DrawService(settings.DRAW_TIMEZONE, settings.BET_CUTOFF_MINUTES)
    activity = ActivityService(db)
    results = MongoResultRepository(db)
    return Services(
        db=db,
        identity=identity,
        catalog=catalog,
        draws=draws,
        tokens=tokens,
        activity=activity,
        auth=AuthService(identity, tokens, activity),
        tickets=TicketService(
            tickets=MongoTicketRepository(db),
            results=results,
            counter=MongoTicketCounter(db),
            identity=identity,
            catalog=catalog,
            payout=PayoutEngine(catalog),
            draws=draws,
            activity=activity,
            default_commission_rate=settings.DEFAULT_COMMISSION_RATE,
            list_max=settings.TICKET_LIST_MAX,
        ),
        results=ResultService(results, draws, activity, settings.TICKET_LIST_MAX),
        users=UserService(
            identity,
            activity,
            settings.DEFAULT_COMMISSION_RATE,
            settings.TICKET_LIST_MAX,
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_current_principal(
    request: Request, services: Services = Depends(get_services)
) -> Principal:
    """Authenticate the Bearer token. Raises AuthError before the handler runs."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Not authenticated.")
    return services.tokens.verify(token.strip())


def require_roles(*roles: Role):
    allowed = frozenset(roles)

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            logger.warning(
                "Role %s refused on %s", principal.role.value, sorted(r.value for r in allowed)
            )
            raise PermissionDeniedError()
        return principal

    return dependency
