"""
backend/lotato/repositories/ticket_repository.py

Purpose:
    Mongo-backed ticket storage. Every read and the validate transition take
    the caller's scope filter, so out-of-scope rows behave as missing rows.

Dependencies:
    - motor.motor_asyncio
    - pymongo.ReturnDocument
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from lotato.models.ticket import Ticket, TicketStatus


def _scoped(base: dict[str, Any], scope_filter: dict[str, Any]) -> dict[str, Any]:
    if not scope_filter:
        return base
    return {"$and": [base, scope_filter]}


class MongoTicketRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._tickets = db["tickets"]

    async def insert(self, ticket: Ticket) -> Ticket:
        result = await self._tickets.insert_one(ticket.to_doc())
        return ticket.model_copy(update={"id": str(result.inserted_id)})

    async def get(self, ticket_id: str, scope_filter: dict[str, Any]) -> Optional[Ticket]:
        if not ObjectId.is_valid(ticket_id):
            return None
        doc = await self._tickets.find_one(_scoped({"_id": ObjectId(ticket_id)}, scope_filter))
        return Ticket.from_doc(doc) if doc else None

    async def find(self, query: dict[str, Any], limit: Optional[int] = None) -> list[Ticket]:
        cursor = self._tickets.find(query).sort("created_at", -1)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [Ticket.from_doc(doc) for doc in await cursor.to_list(length=limit)]

    async def mark_validated(
        self,
        ticket_id: str,
        scope_filter: dict[str, Any],
        validated_by: str,
        when: datetime,
    ) -> Optional[Ticket]:
        if not ObjectId.is_valid(ticket_id):
            return None
        # Single conditional update: of two concurrent calls only one can
        # still see status == pending.
        doc = await self._tickets.find_one_and_update(
            _scoped(
                {"_id": ObjectId(ticket_id), "status": TicketStatus.pending.value},
                scope_filter,
            ),
            {"$set": {
                "status": TicketStatus.validated.value,
                "validated_by": validated_by,
                "validated_at": when,
            }},
            return_document=ReturnDocument.AFTER,
        )
        return Ticket.from_doc(doc) if doc else None
