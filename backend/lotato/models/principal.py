"""
backend/lotato/models/principal.py

Purpose:
    Role enumeration, authenticated principal value object, and request/response
    schemas for the five-partition identity store.

Dependencies:
    - pydantic
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, assert_never

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    agent = "agent"
    supervisor1 = "supervisor1"
    supervisor2 = "supervisor2"
    subsystem = "subsystem"
    master = "master"


# Every role above agent: validates tickets and manages agents in scope.
SUPERVISOR_ROLES = frozenset({Role.supervisor1, Role.supervisor2, Role.subsystem, Role.master})


def partition_for(role: Role) -> str:
    """Return the collection that stores principals of ``role``."""
    if role is Role.agent:
        return "agents"
    if role is Role.supervisor1:
        return "supervisors_level1"
    if role is Role.supervisor2:
        return "supervisors_level2"
    if role is Role.subsystem:
        return "subsystem_admins"
    if role is Role.master:
        return "master_users"
    assert_never(role)


class Principal(BaseModel):
    """An authenticated actor with its hierarchy pointers."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    role: Role
    supervisor1_id: Optional[str] = None
    supervisor2_id: Optional[str] = None
    subsystem_id: Optional[str] = None

    @classmethod
    def from_record(cls, role: Role, doc: Mapping[str, Any]) -> "Principal":
        return cls(
            id=str(doc["_id"]),
            username=doc["username"],
            role=role,
            supervisor1_id=doc.get("supervisor1_id"),
            supervisor2_id=doc.get("supervisor2_id"),
            subsystem_id=doc.get("subsystem_id"),
        )


def _check_password(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters long.")
    return v


class LoginRequest(BaseModel):
    """Request body for login."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    user_type: Role = Field(alias="userType")


class AgentCreate(BaseModel):
    """Request body for creating an agent under a supervisor1."""

    username: str = Field(min_length=3, max_length=64)
    password: str
    full_name: str = ""
    phone: Optional[str] = None
    supervisor1_id: Optional[str] = None
    commission_rate: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password(v)


class AgentStatusUpdate(BaseModel):
    is_active: bool


class AgentReassign(BaseModel):
    supervisor1_id: str


class PrincipalResponse(BaseModel):
    """Public principal data returned to the client (never the hash)."""

    id: str
    username: str
    role: Role
    full_name: str = ""
    supervisor1_id: Optional[str] = None
    supervisor2_id: Optional[str] = None
    subsystem_id: Optional[str] = None
    is_active: bool = True
    commission_rate: Optional[float] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, role: Role, doc: Mapping[str, Any]) -> "PrincipalResponse":
        return cls(
            id=str(doc["_id"]),
            username=doc["username"],
            role=role,
            full_name=doc.get("full_name") or "",
            supervisor1_id=doc.get("supervisor1_id"),
            supervisor2_id=doc.get("supervisor2_id"),
            subsystem_id=doc.get("subsystem_id"),
            is_active=doc.get("is_active", True),
            commission_rate=doc.get("commission_rate"),
            last_login=doc.get("last_login"),
            created_at=doc.get("created_at"),
        )
