"""
backend/lotato/services/draw_service.py

Purpose:
    Draw schedule lookups: which draws and slots exist, the draw-local
    business day, and the sales cutoff before each draw.

    Sales for a slot close BET_CUTOFF_MINUTES before its scheduled local
    time and stay closed for the rest of that local day.

Dependencies:
    - zoneinfo (tzdata)
    - lotato.config_draws
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from lotato.config_draws import DRAW_SLOTS, DRAWS
from lotato.errors import ValidationError
from lotato.utils import ensure_utc, local_day_bounds, utcnow


class DrawService:
    def __init__(
        self,
        timezone: str,
        cutoff_minutes: int,
        draws: Mapping[str, dict] = DRAWS,
    ) -> None:
        self.tz = ZoneInfo(timezone)
        self._cutoff = timedelta(minutes=cutoff_minutes)
        self._draws = draws

    def all(self) -> list[dict]:
        return [
            {
                "draw_id": draw_id,
                "name": spec["name"],
                "times": {
                    slot: f"{hour:02d}:{minute:02d}"
                    for slot, (hour, minute) in spec["times"].items()
                },
            }
            for draw_id, spec in self._draws.items()
        ]

    def ensure_exists(self, draw_id: str, slot: str) -> None:
        if draw_id not in self._draws:
            raise ValidationError("Unknown draw.", details={"draw": draw_id})
        if slot not in DRAW_SLOTS or slot not in self._draws[draw_id]["times"]:
            raise ValidationError("Unknown draw time.", details={"drawTime": slot})

    def local_date(self, now: Optional[datetime] = None) -> date:
        return ensure_utc(now or utcnow()).astimezone(self.tz).date()

    def day_bounds(self, day: date) -> tuple[datetime, datetime]:
        return local_day_bounds(day, self.tz)

    def scheduled_at(self, draw_id: str, slot: str, day: date) -> datetime:
        hour, minute = self._draws[draw_id]["times"][slot]
        return datetime(day.year, day.month, day.day, hour, minute, tzinfo=self.tz)

    def is_open(self, draw_id: str, slot: str, now: Optional[datetime] = None) -> bool:
        if draw_id not in self._draws or slot not in self._draws[draw_id]["times"]:
            return False
        local_now = ensure_utc(now or utcnow()).astimezone(self.tz)
        closes_at = self.scheduled_at(draw_id, slot, local_now.date()) - self._cutoff
        return local_now < closes_at

    def open_draw_date(self, draw_id: str, slot: str, now: Optional[datetime] = None) -> str:
        """Return the draw-local date a sale made ``now`` belongs to.

        Raises ValidationError for an unknown draw/slot or a closed slot.
        """
        self.ensure_exists(draw_id, slot)
        if not self.is_open(draw_id, slot, now):
            raise ValidationError(
                "Sales are closed for this draw.",
                details={"draw": draw_id, "drawTime": slot},
            )
        return self.local_date(now).isoformat()
