from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from lotato.errors import ValidationError
from lotato.services.draw_service import DrawService


@pytest.fixture
def draws() -> DrawService:
    return DrawService("America/New_York", cutoff_minutes=5)


def _utc(hour: int, minute: int, day: int = 10) -> datetime:
    return datetime(2026, 3, day, hour, minute, tzinfo=timezone.utc)


def test_open_until_cutoff(draws):
    # Miami morning at 13:30 EDT == 17:30 UTC; closes at 17:25 UTC.
    assert draws.is_open("miami", "morning", _utc(17, 24))
    assert not draws.is_open("miami", "morning", _utc(17, 25))
    assert not draws.is_open("miami", "morning", _utc(18, 0))


def test_draw_date_is_local(draws):
    # 02:00 UTC on the 11th is still the 10th in New York.
    assert draws.local_date(_utc(2, 0, day=11)) == date(2026, 3, 10)
    assert draws.open_draw_date("miami", "evening", _utc(12, 0)) == "2026-03-10"


def test_unknown_draw_or_slot(draws):
    assert not draws.is_open("atlantis", "morning", _utc(12, 0))
    with pytest.raises(ValidationError):
        draws.ensure_exists("miami", "noon")


def test_closed_slot_rejected(draws):
    with pytest.raises(ValidationError):
        draws.open_draw_date("tunisia", "morning", _utc(15, 0))


def test_catalog_lists_times(draws):
    miami = next(d for d in draws.all() if d["draw_id"] == "miami")
    assert miami["times"] == {"morning": "13:30", "evening": "21:50"}
