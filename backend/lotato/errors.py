"""Domain error taxonomy, translated to HTTP responses in lotato.main."""

from __future__ import annotations

from typing import Any


class LotatoError(Exception):
    """Base application error."""

    code = "error"
    status_code = 500
    default_message = "An internal error occurred."

    def __init__(self, message: str | None = None, details: Any | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(LotatoError):
    """Malformed bet, unsupported option, non-positive amount."""

    code = "validation_error"
    status_code = 400
    default_message = "Validation error."


class AuthError(LotatoError):
    """Missing, invalid or expired token; bad credentials."""

    code = "auth_error"
    status_code = 401
    default_message = "Authentication required."


class PermissionDeniedError(LotatoError):
    """Role lacks the capability for the requested action."""

    code = "permission_denied"
    status_code = 403
    default_message = "Permission denied."


class NotFoundError(LotatoError):
    """Missing, out of scope, or not in the expected state.

    The three cases share one message so callers cannot probe rows that
    belong to another tenant.
    """

    code = "not_found"
    status_code = 404
    default_message = "Not found."


class ConflictError(LotatoError):
    code = "conflict"
    status_code = 409
    default_message = "Conflict."


class ConfigError(LotatoError):
    """Missing signing secret or storage credentials."""

    code = "config_error"
    status_code = 500
    default_message = "Server configuration error."
