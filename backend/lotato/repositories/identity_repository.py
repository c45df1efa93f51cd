"""
backend/lotato/repositories/identity_repository.py

Purpose:
    Mongo-backed identity store. Principals live in one collection per role
    (see models.principal.partition_for); records are never deleted.

Dependencies:
    - motor.motor_asyncio
    - bson.ObjectId
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from lotato.models.principal import Role, partition_for
from lotato.models.ticket import AncestrySnapshot

logger = logging.getLogger("lotato.identity")


def _oid(value: str) -> Optional[ObjectId]:
    return ObjectId(value) if ObjectId.is_valid(value) else None


class MongoIdentityRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    def _collection(self, role: Role):
        return self._db[partition_for(role)]

    async def find_by_username(self, role: Role, username: str) -> Optional[dict]:
        return await self._collection(role).find_one({"username": username})

    async def get(self, role: Role, principal_id: str) -> Optional[dict]:
        oid = _oid(principal_id)
        if oid is None:
            return None
        return await self._collection(role).find_one({"_id": oid})

    async def touch_last_login(self, role: Role, principal_id: str, when: datetime) -> None:
        oid = _oid(principal_id)
        if oid is None:
            return
        await self._collection(role).update_one({"_id": oid}, {"$set": {"last_login": when}})

    async def child_ids(self, role: Role, parent_field: str, parent_ids: list[str]) -> list[str]:
        if not parent_ids:
            return []
        cursor = self._collection(role).find(
            {parent_field: {"$in": list(parent_ids)}}, {"_id": 1}
        )
        return [str(doc["_id"]) async for doc in cursor]

    async def list_agents(self, query: dict[str, Any], limit: int) -> list[dict]:
        cursor = self._collection(Role.agent).find(query).sort("created_at", -1).limit(limit)
        return await cursor.to_list(length=limit)

    async def insert(self, role: Role, doc: dict[str, Any]) -> str:
        result = await self._collection(role).insert_one(doc)
        return str(result.inserted_id)

    async def update(self, role: Role, principal_id: str, fields: dict[str, Any]) -> bool:
        oid = _oid(principal_id)
        if oid is None:
            return False
        result = await self._collection(role).update_one({"_id": oid}, {"$set": fields})
        return result.matched_count > 0

    async def ancestry_of(self, agent: dict) -> AncestrySnapshot:
        """Walk agent -> supervisor1 -> supervisor2 -> subsystem as stored now."""
        sup1_id = agent.get("supervisor1_id")
        sup2_id = agent.get("supervisor2_id")
        subsystem_id = agent.get("subsystem_id")

        if sup1_id:
            sup1 = await self.get(Role.supervisor1, sup1_id)
            if sup1 is not None:
                sup2_id = sup1.get("supervisor2_id") or sup2_id
            else:
                logger.warning("Agent %s points at missing supervisor1 %s", agent.get("_id"), sup1_id)
        if sup2_id:
            sup2 = await self.get(Role.supervisor2, sup2_id)
            if sup2 is not None:
                subsystem_id = sup2.get("subsystem_id") or subsystem_id

        return AncestrySnapshot(
            supervisor1_id=sup1_id,
            supervisor2_id=sup2_id,
            subsystem_id=subsystem_id,
        )
