import logging
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from lotato.errors import AuthError
from lotato.models.principal import Principal, PrincipalResponse, Role
from lotato.repositories.base import IdentityStore
from lotato.services.activity_service import ActivityService
from lotato.services.token_service import TokenService
from lotato.utils import utcnow

logger = logging.getLogger("lotato.auth")
ph = PasswordHasher()

_BAD_CREDENTIALS = "Invalid username or password."


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return ph.verify(hashed, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


class AuthService:
    """Credential check against the partition of the requested role."""

    def __init__(
        self,
        identity: IdentityStore,
        tokens: TokenService,
        activity: ActivityService,
    ) -> None:
        self._identity = identity
        self._tokens = tokens
        self._activity = activity

    async def principal_for(self, role: Role, doc: dict) -> Principal:
        if role is Role.agent:
            # Agents only store their supervisor1; resolve the rest of the chain.
            ancestry = await self._identity.ancestry_of(doc)
            return Principal(
                id=str(doc["_id"]),
                username=doc["username"],
                role=role,
                **ancestry.model_dump(),
            )
        return Principal.from_record(role, doc)

    async def login(self, username: str, password: str, role: Role, ip: str = "") -> dict:
        doc = await self._identity.find_by_username(role, username)
        if doc is None or not verify_password(password, doc.get("password_hash")):
            logger.warning("Failed login for %s as %s", username, role.value)
            raise AuthError(_BAD_CREDENTIALS)
        if not doc.get("is_active", True):
            logger.warning("Login refused for inactive %s %s", role.value, username)
            raise AuthError("Account is disabled.")

        principal = await self.principal_for(role, doc)
        now = utcnow()
        await self._identity.touch_last_login(role, principal.id, now)
        await self._activity.record(
            actor_id=principal.id,
            actor_role=role.value,
            action="LOGIN",
            ip=ip,
        )
        logger.info("Login %s as %s", username, role.value)

        user = PrincipalResponse.from_record(role, {**doc, "last_login": now})
        return {"token": self._tokens.issue(principal, now=now), "user": user}
