from __future__ import annotations

import pytest

from factories import PASSWORD
from lotato.errors import AuthError
from lotato.models.principal import Role
from lotato.seed import seed_master_user


@pytest.mark.asyncio
async def test_login_returns_token_for_partition(services, hierarchy, db):
    session = await services.auth.login("agent", PASSWORD, Role.agent, ip="10.1.2.3")

    principal = services.tokens.verify(session["token"])
    assert principal == hierarchy.agent
    assert session["user"].username == "agent"
    assert db.agents.docs[0]["last_login"] is not None
    assert db.activities.docs[-1]["action"] == "LOGIN"
    assert db.activities.docs[-1]["ip_truncated"] == "10.1.2.xxx"


@pytest.mark.asyncio
async def test_login_checks_requested_partition_only(services, hierarchy):
    with pytest.raises(AuthError):
        await services.auth.login("agent", PASSWORD, Role.supervisor1)


@pytest.mark.asyncio
async def test_wrong_password_rejected(services, hierarchy):
    with pytest.raises(AuthError) as exc:
        await services.auth.login("sup1", "wrong-password", Role.supervisor1)
    assert exc.value.message == "Invalid username or password."


@pytest.mark.asyncio
async def test_inactive_account_rejected(services, hierarchy, db):
    db.supervisors_level1.docs[0]["is_active"] = False
    with pytest.raises(AuthError):
        await services.auth.login("sup1", PASSWORD, Role.supervisor1)


@pytest.mark.asyncio
async def test_subsystem_token_carries_subsystem_id(services, hierarchy):
    session = await services.auth.login("north_admin", PASSWORD, Role.subsystem)
    assert services.tokens.verify(session["token"]).subsystem_id == "sub-north"


@pytest.mark.asyncio
async def test_seed_master_once(services, settings, db):
    configured = settings.model_copy(
        update={"SEED_MASTER_USERNAME": "root", "SEED_MASTER_PASSWORD": "bootstrap-pw"}
    )
    await seed_master_user(services.identity, configured)
    await seed_master_user(services.identity, configured)
    assert [doc["username"] for doc in db.master_users.docs] == ["root"]

    session = await services.auth.login("root", "bootstrap-pw", Role.master)
    assert services.tokens.verify(session["token"]).role is Role.master


@pytest.mark.asyncio
async def test_seed_skipped_without_credentials(services, settings, db):
    await seed_master_user(services.identity, settings)
    assert db.master_users.docs == []
