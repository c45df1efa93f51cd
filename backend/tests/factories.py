"""
backend/tests/factories.py

Purpose:
    Test data: a two-subsystem supervisory tree stored in a FakeDatabase, the
    matching principals, and request-body builders.

    master
    ├── subsystem "sub-north"
    │   └── supervisor2 north_sup2
    │       ├── supervisor1 sup1        -> agent
    │       └── supervisor1 sibling_sup1 -> sibling_agent
    └── subsystem "sub-south"
        └── supervisor2 south_sup2
            └── supervisor1 other_sup1  -> other_agent
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId

from lotato.models.principal import Principal, Role, partition_for
from lotato.models.result import ResultPublish
from lotato.models.ticket import BetLineIn, TicketCreate
from lotato.services.auth_service import hash_password

PASSWORD = "correct-horse"
PASSWORD_HASH = hash_password(PASSWORD)

# 12:00 UTC is 08:00 in New York: every draw slot is still open.
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
TODAY = "2026-03-10"


@dataclass
class Hierarchy:
    master: Principal
    subsystem: Principal
    other_subsystem: Principal
    north_sup2: Principal
    south_sup2: Principal
    sup1: Principal
    sibling_sup1: Principal
    other_sup1: Principal
    agent: Principal
    sibling_agent: Principal
    other_agent: Principal

    def all(self) -> list[Principal]:
        return list(vars(self).values())


def _store(db, role: Role, username: str, **fields) -> dict:
    doc = {
        "_id": ObjectId(),
        "username": username,
        "password_hash": PASSWORD_HASH,
        "full_name": username.replace("_", " ").title(),
        "is_active": True,
        "last_login": None,
        "created_at": NOW,
        "updated_at": NOW,
        **fields,
    }
    db[partition_for(role)].add(doc)
    return doc


def _principal(role: Role, doc: dict, **ancestry) -> Principal:
    return Principal(id=str(doc["_id"]), username=doc["username"], role=role, **ancestry)


def build_hierarchy(db) -> Hierarchy:
    master = _store(db, Role.master, "master")
    north = _store(db, Role.subsystem, "north_admin", subsystem_id="sub-north")
    south = _store(db, Role.subsystem, "south_admin", subsystem_id="sub-south")

    north_sup2 = _store(db, Role.supervisor2, "north_sup2", subsystem_id="sub-north")
    south_sup2 = _store(db, Role.supervisor2, "south_sup2", subsystem_id="sub-south")

    def sup1_doc(username: str, sup2: dict) -> dict:
        return _store(
            db, Role.supervisor1, username,
            supervisor2_id=str(sup2["_id"]), subsystem_id=sup2["subsystem_id"],
        )

    sup1 = sup1_doc("sup1", north_sup2)
    sibling_sup1 = sup1_doc("sibling_sup1", north_sup2)
    other_sup1 = sup1_doc("other_sup1", south_sup2)

    def agent_doc(username: str, parent: dict) -> dict:
        return _store(
            db, Role.agent, username,
            supervisor1_id=str(parent["_id"]), commission_rate=10.0,
        )

    def agent_principal(doc: dict, parent: dict) -> Principal:
        return _principal(
            Role.agent, doc,
            supervisor1_id=str(parent["_id"]),
            supervisor2_id=parent["supervisor2_id"],
            subsystem_id=parent["subsystem_id"],
        )

    agent = agent_doc("agent", sup1)
    sibling_agent = agent_doc("sibling_agent", sibling_sup1)
    other_agent = agent_doc("other_agent", other_sup1)

    return Hierarchy(
        master=_principal(Role.master, master),
        subsystem=_principal(Role.subsystem, north, subsystem_id="sub-north"),
        other_subsystem=_principal(Role.subsystem, south, subsystem_id="sub-south"),
        north_sup2=_principal(Role.supervisor2, north_sup2, subsystem_id="sub-north"),
        south_sup2=_principal(Role.supervisor2, south_sup2, subsystem_id="sub-south"),
        sup1=_principal(
            Role.supervisor1, sup1,
            supervisor2_id=str(north_sup2["_id"]), subsystem_id="sub-north",
        ),
        sibling_sup1=_principal(
            Role.supervisor1, sibling_sup1,
            supervisor2_id=str(north_sup2["_id"]), subsystem_id="sub-north",
        ),
        other_sup1=_principal(
            Role.supervisor1, other_sup1,
            supervisor2_id=str(south_sup2["_id"]), subsystem_id="sub-south",
        ),
        agent=agent_principal(agent, sup1),
        sibling_agent=agent_principal(sibling_agent, sibling_sup1),
        other_agent=agent_principal(other_agent, other_sup1),
    )


def line(game: str, number: str, amount: float = 10.0, options: Optional[list[str]] = None) -> BetLineIn:
    return BetLineIn(type=game, number=number, amount=amount, options=options or [])


def ticket_draft(*lines: BetLineIn, draw: str = "miami", draw_time: str = "morning") -> TicketCreate:
    return TicketCreate(draw=draw, draw_time=draw_time, line_items=list(lines))


def result_payload(
    lot1: str,
    lot2: Optional[str] = None,
    lot3: Optional[str] = None,
    draw: str = "miami",
    draw_time: str = "morning",
    day: str = TODAY,
) -> ResultPublish:
    return ResultPublish.model_validate(
        {"draw": draw, "drawTime": draw_time, "date": day, "lot1": lot1, "lot2": lot2, "lot3": lot3}
    )
