"""Insert-only activity log (logins, sales, validations, publications).

Entries are never updated or deleted. A failed write is logged and never
fails the request that caused it.
"""

import logging
from typing import Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from lotato.utils import utcnow

logger = logging.getLogger("lotato.activity")


def truncate_ip(ip: str) -> str:
    """Drop the last segment of an IP address.

    IPv4: 192.168.1.42  -> 192.168.1.xxx
    IPv6: 2001:db8::1   -> 2001:db8::xxx
    """
    if not ip:
        return ""
    if "." in ip:
        parts = ip.split(".")
        if len(parts) == 4:
            parts[-1] = "xxx"
            return ".".join(parts)
        return ip
    if ":" in ip:
        head, _, _ = ip.rpartition(":")
        return f"{head}:xxx"
    return ip


def client_ip(request: Optional[Request]) -> str:
    """Client IP, preferring X-Forwarded-For when behind a proxy."""
    if request is None:
        return ""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return ""


class ActivityService:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._activities = db["activities"]

    async def record(
        self,
        *,
        actor_id: str,
        actor_role: str,
        action: str,
        target_id: Optional[str] = None,
        metadata: Optional[dict] = None,
        ip: str = "",
    ) -> None:
        """Write one activity entry.

        Args:
            actor_id: Principal that performed the action.
            actor_role: Its role value.
            action: Identifier such as "LOGIN", "TICKET_CREATED".
            target_id: Affected ticket, agent or result, when there is one.
            metadata: Extra context.
            ip: Raw client IP; stored truncated.
        """
        doc = {
            "timestamp": utcnow(),
            "actor_id": actor_id,
            "actor_role": actor_role,
            "action": action,
            "target_id": target_id,
            "metadata": metadata or {},
            "ip_truncated": truncate_ip(ip),
        }
        try:
            await self._activities.insert_one(doc)
        except Exception:
            logger.exception("Failed to write activity: action=%s actor=%s", action, actor_id)
