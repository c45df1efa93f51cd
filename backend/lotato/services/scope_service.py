"""
backend/lotato/services/scope_service.py

Purpose:
    Authorization scope resolver. Turns an authenticated principal into the
    row-visibility predicate used to narrow ticket and agent queries, and
    decides whether a principal may validate a given ticket.

    The same Scope value renders to a Mongo filter (query narrowing) and
    evaluates a row in memory (single-row guards), so both paths share one
    definition of "in scope". Anything not recognised resolves to deny-all.

Dependencies:
    - lotato.models.principal
    - lotato.repositories.base
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from lotato.errors import PermissionDeniedError
from lotato.models.principal import SUPERVISOR_ROLES, Principal, Role
from lotato.repositories.base import IdentityStore

logger = logging.getLogger("lotato.scope")

_DENY_FIELD = "_id"


@dataclass(frozen=True)
class Scope:
    """Row predicate: unrestricted, or ``field`` must be one of ``values``."""

    field: Optional[str]
    values: frozenset[str] = frozenset()

    @classmethod
    def unrestricted(cls) -> "Scope":
        return cls(field=None)

    @classmethod
    def deny(cls) -> "Scope":
        return cls(field=_DENY_FIELD, values=frozenset())

    @classmethod
    def equals(cls, field: str, value: Optional[str]) -> "Scope":
        if not value:
            return cls.deny()
        return cls(field=field, values=frozenset({str(value)}))

    @classmethod
    def any_of(cls, field: str, values: Iterable[str]) -> "Scope":
        return cls(field=field, values=frozenset(str(v) for v in values))

    @property
    def is_unrestricted(self) -> bool:
        return self.field is None

    def to_filter(self) -> dict[str, Any]:
        if self.field is None:
            return {}
        if len(self.values) == 1:
            (value,) = self.values
            return {self.field: value}
        return {self.field: {"$in": sorted(self.values)}}

    def contains(self, row: Any) -> bool:
        if self.field is None:
            return True
        if isinstance(row, Mapping):
            value = row.get(self.field)
        else:
            value = getattr(row, self.field, None)
        return value is not None and str(value) in self.values


def resolve_scope(principal: Principal) -> Scope:
    """Ticket visibility for ``principal``."""
    role = principal.role
    if role is Role.master:
        return Scope.unrestricted()
    if role is Role.subsystem:
        return Scope.equals("subsystem_id", principal.subsystem_id)
    if role is Role.supervisor2:
        return Scope.equals("supervisor2_id", principal.id)
    if role is Role.supervisor1:
        return Scope.equals("supervisor1_id", principal.id)
    if role is Role.agent:
        return Scope.equals("agent_id", principal.id)
    logger.warning("Unrecognised role %r for principal %s; denying", role, principal.id)
    return Scope.deny()


async def resolve_agent_scope(principal: Principal, identity: IdentityStore) -> Scope:
    """Agent-row visibility for ``principal``.

    Agents only point at their supervisor1, so roles higher up resolve the
    supervisor1 ids beneath them first and filter on that set.
    """
    role = principal.role
    if role is Role.master:
        return Scope.unrestricted()
    if role is Role.supervisor1:
        return Scope.equals("supervisor1_id", principal.id)
    if role is Role.supervisor2:
        sup1_ids = await identity.child_ids(Role.supervisor1, "supervisor2_id", [principal.id])
        return Scope.any_of("supervisor1_id", sup1_ids)
    if role is Role.subsystem:
        if not principal.subsystem_id:
            return Scope.deny()
        sup2_ids = await identity.child_ids(
            Role.supervisor2, "subsystem_id", [principal.subsystem_id]
        )
        sup1_ids = await identity.child_ids(Role.supervisor1, "supervisor2_id", sup2_ids)
        return Scope.any_of("supervisor1_id", sup1_ids)
    if role is Role.agent:
        raise PermissionDeniedError("Agents cannot list agents.")
    logger.warning("Unrecognised role %r for principal %s; denying", role, principal.id)
    return Scope.deny()


def may_validate(principal: Principal) -> bool:
    """Role gate for validation, checked before any ticket is touched."""
    return principal.role in SUPERVISOR_ROLES


def can_validate(principal: Principal, ticket: Any) -> bool:
    """True iff the role may validate at all and the ticket is in its scope.

    In-memory twin of the predicate ``TicketRepository.mark_validated``
    applies atomically (``may_validate`` plus the scope filter), for
    callers that already hold the ticket row.
    """
    if not may_validate(principal):
        return False
    return resolve_scope(principal).contains(ticket)
