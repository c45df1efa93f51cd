"""
backend/lotato/services/token_service.py

Purpose:
    Stateless access tokens. A token carries the principal's id, role and
    ancestry pointers, so verification needs no storage lookup. There is no
    revocation list: tokens stay valid until they expire.

Dependencies:
    - PyJWT (HS256)
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError as JWTError

from lotato.errors import AuthError, ConfigError
from lotato.models.principal import Principal, Role
from lotato.utils import utcnow

logger = logging.getLogger("lotato.auth")

ALGORITHM = "HS256"


class TokenService:
    def __init__(self, secret: str, old_secret: str = "", expire_minutes: int = 1440) -> None:
        if not secret:
            raise ConfigError("JWT_SECRET is not configured.")
        self._secret = secret
        self._old_secret = old_secret
        self._expire = timedelta(minutes=expire_minutes)

    def issue(self, principal: Principal, now: Optional[datetime] = None) -> str:
        expire = (now or utcnow()) + self._expire
        payload = {
            "sub": principal.id,
            "username": principal.username,
            "role": principal.role.value,
            "supervisor1_id": principal.supervisor1_id,
            "supervisor2_id": principal.supervisor2_id,
            "subsystem_id": principal.subsystem_id,
            "exp": expire,
            "type": "access",
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def _decode(self, token: str) -> dict:
        """Decode with the current secret first, then the old one.

        Rotation: set JWT_SECRET to the new value and JWT_SECRET_OLD to the
        previous one; drop JWT_SECRET_OLD once ACCESS_TOKEN_EXPIRE_MINUTES
        have passed.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise
        except JWTError:
            if self._old_secret:
                return jwt.decode(token, self._old_secret, algorithms=[ALGORITHM])
            raise

    def verify(self, token: str) -> Principal:
        if not token:
            raise AuthError("Missing token.")
        try:
            payload = self._decode(token)
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired.")
        except JWTError:
            raise AuthError("Invalid token.")

        if payload.get("type") != "access":
            raise AuthError("Invalid token type.")
        try:
            role = Role(payload.get("role"))
        except ValueError:
            logger.warning("Token with unknown role %r rejected", payload.get("role"))
            raise AuthError("Invalid token.")
        if not payload.get("sub") or not payload.get("username"):
            raise AuthError("Invalid token.")

        return Principal(
            id=payload["sub"],
            username=payload["username"],
            role=role,
            supervisor1_id=payload.get("supervisor1_id"),
            supervisor2_id=payload.get("supervisor2_id"),
            subsystem_id=payload.get("subsystem_id"),
        )
