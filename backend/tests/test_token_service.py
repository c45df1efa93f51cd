from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from lotato.errors import AuthError, ConfigError
from lotato.models.principal import Principal, Role
from lotato.services.token_service import ALGORITHM, TokenService
from lotato.utils import utcnow

PRINCIPAL = Principal(
    id="agent-1",
    username="agent",
    role=Role.agent,
    supervisor1_id="sup1",
    supervisor2_id="sup2",
    subsystem_id="sub-north",
)


def test_issue_then_verify_returns_same_principal():
    tokens = TokenService("secret")
    assert tokens.verify(tokens.issue(PRINCIPAL)) == PRINCIPAL


def test_missing_secret_is_a_config_error():
    with pytest.raises(ConfigError):
        TokenService("")


def test_tampered_token_rejected():
    tokens = TokenService("secret")
    token = tokens.issue(PRINCIPAL)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])
    with pytest.raises(AuthError):
        tokens.verify(tampered)


def test_token_signed_with_other_secret_rejected():
    with pytest.raises(AuthError):
        TokenService("secret").verify(TokenService("other").issue(PRINCIPAL))


def test_expired_token_rejected():
    tokens = TokenService("secret", expire_minutes=10)
    token = tokens.issue(PRINCIPAL, now=utcnow() - timedelta(hours=1))
    with pytest.raises(AuthError) as exc:
        tokens.verify(token)
    assert exc.value.message == "Token expired."


def test_old_secret_accepted_during_rotation():
    old_token = TokenService("old-secret").issue(PRINCIPAL)
    rotated = TokenService("new-secret", old_secret="old-secret")
    assert rotated.verify(old_token).id == PRINCIPAL.id


def test_unknown_role_in_token_rejected():
    token = jwt.encode(
        {"sub": "x", "username": "x", "role": "auditor", "type": "access",
         "exp": utcnow() + timedelta(minutes=5)},
        "secret",
        algorithm=ALGORITHM,
    )
    with pytest.raises(AuthError):
        TokenService("secret").verify(token)


def test_non_access_token_rejected():
    token = jwt.encode(
        {"sub": "x", "username": "x", "role": "master", "type": "refresh",
         "exp": utcnow() + timedelta(minutes=5)},
        "secret",
        algorithm=ALGORITHM,
    )
    with pytest.raises(AuthError):
        TokenService("secret").verify(token)


def test_empty_token_rejected():
    with pytest.raises(AuthError):
        TokenService("secret").verify("")
