"""
backend/lotato/services/user_service.py

Purpose:
    Agent administration for supervisors: listing, creation, soft
    deactivation and re-assignment, all bounded by the caller's agent scope.
    Re-assignment changes the agent record only; tickets keep the ancestry
    captured when they were sold.

Dependencies:
    - lotato.services.scope_service
    - lotato.services.auth_service (password hashing)
"""

from __future__ import annotations

import logging
from typing import Optional

from lotato.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from lotato.models.principal import (
    SUPERVISOR_ROLES,
    AgentCreate,
    Principal,
    PrincipalResponse,
    Role,
)
from lotato.repositories.base import IdentityStore
from lotato.services.activity_service import ActivityService
from lotato.services.auth_service import hash_password
from lotato.services.scope_service import Scope, resolve_agent_scope
from lotato.utils import utcnow

logger = logging.getLogger("lotato.users")


class UserService:
    def __init__(
        self,
        identity: IdentityStore,
        activity: ActivityService,
        default_commission_rate: float,
        list_max: int = 500,
    ) -> None:
        self._identity = identity
        self._activity = activity
        self._default_commission_rate = default_commission_rate
        self._list_max = list_max

    async def _agent_scope(self, principal: Principal) -> Scope:
        if principal.role not in SUPERVISOR_ROLES:
            raise PermissionDeniedError("Only supervisors manage agents.")
        return await resolve_agent_scope(principal, self._identity)

    async def _agent_in_scope(self, scope: Scope, agent_id: str) -> dict:
        agent = await self._identity.get(Role.agent, agent_id)
        if agent is None or not scope.contains(agent):
            raise NotFoundError("Agent not found.")
        return agent

    async def _supervisor_in_scope(self, scope: Scope, supervisor1_id: str) -> dict:
        if not scope.contains({"supervisor1_id": supervisor1_id}):
            raise NotFoundError("Supervisor not found.")
        supervisor = await self._identity.get(Role.supervisor1, supervisor1_id)
        if supervisor is None:
            raise NotFoundError("Supervisor not found.")
        return supervisor

    async def list_agents(self, principal: Principal, limit: int = 100) -> list[PrincipalResponse]:
        scope = await self._agent_scope(principal)
        docs = await self._identity.list_agents(
            scope.to_filter(), max(1, min(limit, self._list_max))
        )
        return [PrincipalResponse.from_record(Role.agent, doc) for doc in docs]

    async def create_agent(self, principal: Principal, payload: AgentCreate) -> PrincipalResponse:
        scope = await self._agent_scope(principal)

        target = payload.supervisor1_id
        if target is None and principal.role is Role.supervisor1:
            target = principal.id
        if not target:
            raise ValidationError(
                "supervisor1_id is required.", details={"supervisor1_id": "required"}
            )
        await self._supervisor_in_scope(scope, target)

        if await self._identity.find_by_username(Role.agent, payload.username):
            raise ConflictError("Username already taken.")

        ancestry = await self._identity.ancestry_of({"supervisor1_id": target})
        rate = payload.commission_rate
        now = utcnow()
        doc = {
            "username": payload.username,
            "password_hash": hash_password(payload.password),
            "full_name": payload.full_name,
            "phone": payload.phone,
            **ancestry.model_dump(),
            "commission_rate": self._default_commission_rate if rate is None else rate,
            "is_active": True,
            "last_login": None,
            "created_by": principal.id,
            "created_at": now,
            "updated_at": now,
        }
        agent_id = await self._identity.insert(Role.agent, doc)

        await self._activity.record(
            actor_id=principal.id,
            actor_role=principal.role.value,
            action="AGENT_CREATED",
            target_id=agent_id,
        )
        logger.info("Agent %s created under %s by %s", payload.username, target, principal.username)
        return PrincipalResponse.from_record(Role.agent, {**doc, "_id": agent_id})

    async def set_agent_active(
        self, principal: Principal, agent_id: str, active: bool
    ) -> PrincipalResponse:
        scope = await self._agent_scope(principal)
        agent = await self._agent_in_scope(scope, agent_id)

        fields = {"is_active": active, "updated_at": utcnow()}
        await self._identity.update(Role.agent, agent_id, fields)
        await self._activity.record(
            actor_id=principal.id,
            actor_role=principal.role.value,
            action="AGENT_ACTIVATED" if active else "AGENT_DEACTIVATED",
            target_id=agent_id,
        )
        logger.info("Agent %s active=%s by %s", agent["username"], active, principal.username)
        return PrincipalResponse.from_record(Role.agent, {**agent, **fields})

    async def reassign_agent(
        self, principal: Principal, agent_id: str, supervisor1_id: str
    ) -> PrincipalResponse:
        scope = await self._agent_scope(principal)
        agent = await self._agent_in_scope(scope, agent_id)
        await self._supervisor_in_scope(scope, supervisor1_id)

        ancestry = await self._identity.ancestry_of({"supervisor1_id": supervisor1_id})
        fields = {**ancestry.model_dump(), "updated_at": utcnow()}
        await self._identity.update(Role.agent, agent_id, fields)
        await self._activity.record(
            actor_id=principal.id,
            actor_role=principal.role.value,
            action="AGENT_REASSIGNED",
            target_id=agent_id,
            metadata={"from": agent.get("supervisor1_id"), "to": supervisor1_id},
        )
        logger.info(
            "Agent %s moved from %s to %s by %s",
            agent["username"], agent.get("supervisor1_id"), supervisor1_id, principal.username,
        )
        return PrincipalResponse.from_record(Role.agent, {**agent, **fields})

    async def profile(self, principal: Principal) -> PrincipalResponse:
        doc: Optional[dict] = await self._identity.get(principal.role, principal.id)
        if doc is None:
            raise NotFoundError("User not found.")
        return PrincipalResponse.from_record(principal.role, doc)
