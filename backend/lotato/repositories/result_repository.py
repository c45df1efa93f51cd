"""Mongo-backed draw result storage. Insert-only: a published result is final."""

from __future__ import annotations

from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from lotato.errors import ConflictError
from lotato.models.result import DrawResult


class MongoResultRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._results = db["results"]

    async def insert(self, result: DrawResult) -> DrawResult:
        existing = await self.get(result.draw_id, result.draw_time, result.draw_date)
        if existing is not None:
            raise ConflictError("Result already published for this draw.")
        try:
            await self._results.insert_one(result.model_dump())
        except DuplicateKeyError as exc:
            # Lost a race against a concurrent publication.
            raise ConflictError("Result already published for this draw.") from exc
        return result

    async def get(self, draw_id: str, draw_time: str, draw_date: str) -> Optional[DrawResult]:
        doc = await self._results.find_one(
            {"draw_id": draw_id, "draw_time": draw_time, "draw_date": draw_date}
        )
        return DrawResult.from_doc(doc) if doc else None

    async def find(self, query: dict[str, Any], limit: int) -> list[DrawResult]:
        cursor = self._results.find(query).sort("draw_date", -1).limit(limit)
        return [DrawResult.from_doc(doc) for doc in await cursor.to_list(length=limit)]
