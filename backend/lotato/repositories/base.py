"""
backend/lotato/repositories/base.py

Purpose:
    Storage interfaces consumed by the services. The Mongo implementations live
    next to this module; tests substitute in-memory collections.

Dependencies:
    - typing
    - lotato.models
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from lotato.models.principal import Role
from lotato.models.result import DrawResult
from lotato.models.ticket import AncestrySnapshot, Ticket


class IdentityStore(Protocol):
    async def find_by_username(self, role: Role, username: str) -> Optional[dict]:
        ...

    async def get(self, role: Role, principal_id: str) -> Optional[dict]:
        ...

    async def touch_last_login(self, role: Role, principal_id: str, when: datetime) -> None:
        ...

    async def child_ids(self, role: Role, parent_field: str, parent_ids: list[str]) -> list[str]:
        """Ids of ``role`` records whose ``parent_field`` is in ``parent_ids``."""
        ...

    async def list_agents(self, query: dict[str, Any], limit: int) -> list[dict]:
        ...

    async def insert(self, role: Role, doc: dict[str, Any]) -> str:
        ...

    async def update(self, role: Role, principal_id: str, fields: dict[str, Any]) -> bool:
        ...

    async def ancestry_of(self, agent: dict) -> AncestrySnapshot:
        ...


class TicketRepository(Protocol):
    async def insert(self, ticket: Ticket) -> Ticket:
        ...

    async def get(self, ticket_id: str, scope_filter: dict[str, Any]) -> Optional[Ticket]:
        ...

    async def find(self, query: dict[str, Any], limit: Optional[int] = None) -> list[Ticket]:
        ...

    async def mark_validated(
        self,
        ticket_id: str,
        scope_filter: dict[str, Any],
        validated_by: str,
        when: datetime,
    ) -> Optional[Ticket]:
        """Atomically move a pending in-scope ticket to validated."""
        ...


class ResultRepository(Protocol):
    async def insert(self, result: DrawResult) -> DrawResult:
        ...

    async def get(self, draw_id: str, draw_time: str, draw_date: str) -> Optional[DrawResult]:
        ...

    async def find(self, query: dict[str, Any], limit: int) -> list[DrawResult]:
        ...


class TicketCounter(Protocol):
    async def next_value(self, key: str) -> int:
        ...
