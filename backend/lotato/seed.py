import logging

from lotato.config import Settings
from lotato.models.principal import Role
from lotato.repositories.base import IdentityStore
from lotato.services.auth_service import hash_password
from lotato.utils import utcnow

logger = logging.getLogger("lotato.seed")


async def seed_master_user(identity: IdentityStore, settings: Settings) -> None:
    """Create the bootstrap master account if configured via env."""
    if not settings.SEED_MASTER_USERNAME or not settings.SEED_MASTER_PASSWORD:
        logger.debug("SEED_MASTER_USERNAME not set, skipping seed")
        return

    existing = await identity.find_by_username(Role.master, settings.SEED_MASTER_USERNAME)
    if existing:
        logger.info("Seed master already exists, skipping")
        return

    now = utcnow()
    master_id = await identity.insert(Role.master, {
        "username": settings.SEED_MASTER_USERNAME,
        "password_hash": hash_password(settings.SEED_MASTER_PASSWORD),
        "full_name": "Master",
        "is_active": True,
        "last_login": None,
        "created_at": now,
        "updated_at": now,
    })
    logger.info("Seed master created: %s", master_id)
