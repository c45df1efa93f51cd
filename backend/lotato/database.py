"""
backend/lotato/database.py

Purpose:
    MongoDB connection bootstrap and index management. The client and
    database handles are returned to the caller (the app lifespan) rather
    than kept in module state.

Dependencies:
    - motor.motor_asyncio
    - pymongo
    - lotato.config
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from lotato.config import Settings
from lotato.errors import ConfigError
from lotato.models.principal import Role, partition_for

logger = logging.getLogger("lotato.database")


def connect(settings: Settings) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    if not settings.MONGO_URI:
        raise ConfigError("MONGO_URI is not configured.")
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        maxPoolSize=25,
        minPoolSize=5,
    )
    return client, client[settings.MONGO_DB]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create indexes on startup. Idempotent."""

    # ---- Principals (one collection per role) ----
    for role in Role:
        await db[partition_for(role)].create_index("username", unique=True)
    await db[partition_for(Role.agent)].create_index("supervisor1_id")
    await db[partition_for(Role.supervisor1)].create_index("supervisor2_id")
    await db[partition_for(Role.supervisor2)].create_index("subsystem_id")

    # ---- Tickets ----
    await db.tickets.create_index("ticket_number", unique=True)
    await db.tickets.create_index([("agent_id", ASCENDING), ("created_at", DESCENDING)])
    await db.tickets.create_index([("supervisor1_id", ASCENDING), ("created_at", DESCENDING)])
    await db.tickets.create_index([("supervisor2_id", ASCENDING), ("created_at", DESCENDING)])
    await db.tickets.create_index([("subsystem_id", ASCENDING), ("created_at", DESCENDING)])
    await db.tickets.create_index([("draws", ASCENDING), ("draw_time", ASCENDING), ("draw_date", ASCENDING)])
    await db.tickets.create_index([("status", ASCENDING), ("created_at", DESCENDING)])

    # ---- Results: one per draw, slot and day ----
    await db.results.create_index(
        [("draw_id", ASCENDING), ("draw_time", ASCENDING), ("draw_date", ASCENDING)],
        unique=True,
    )

    # ---- Activity log ----
    await db.activities.create_index([("actor_id", ASCENDING), ("timestamp", DESCENDING)])
    await db.activities.create_index("action")

    logger.info("Indexes ensured")
