"""
backend/tests/conftest.py

Purpose:
    Shared pytest bootstrap: import path for the backend package and fixtures
    wiring the real services onto an in-memory database.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_THIS_FILE = Path(__file__).resolve()
_BACKEND_DIR = _THIS_FILE.parents[1]
_TESTS_DIR = _THIS_FILE.parent

for candidate in (str(_BACKEND_DIR), str(_TESTS_DIR)):
    if candidate not in sys.path:
        sys.path.insert(0, candidate)

from fake_mongo import FakeDatabase  # noqa: E402
from factories import build_hierarchy  # noqa: E402
from lotato.config import Settings  # noqa: E402
from lotato.dependencies import build_services  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        MONGO_URI="mongodb://fake",
        JWT_SECRET="test-secret",
        JWT_SECRET_OLD="",
        DRAW_TIMEZONE="America/New_York",
        BET_CUTOFF_MINUTES=5,
        DEFAULT_COMMISSION_RATE=10.0,
        TICKET_LIST_MAX=500,
    )


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def services(db, settings):
    return build_services(db, settings)


@pytest.fixture
def hierarchy(db):
    return build_hierarchy(db)
