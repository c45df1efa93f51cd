from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument


class MongoTicketCounter:
    """Monotonic per-key sequence backed by an atomic $inc upsert."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._counters = db["counters"]

    async def next_value(self, key: str) -> int:
        doc = await self._counters.find_one_and_update(
            {"_id": key},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["seq"])
