"""Draw result publication and lookup. Published results are never edited."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from lotato.config_draws import DRAW_SLOTS
from lotato.errors import PermissionDeniedError
from lotato.models.principal import Principal, Role
from lotato.models.result import DrawResult, ResultPublish
from lotato.repositories.base import ResultRepository
from lotato.services.activity_service import ActivityService
from lotato.services.draw_service import DrawService
from lotato.utils import utcnow

logger = logging.getLogger("lotato.results")

PUBLISHER_ROLES = frozenset({Role.master, Role.subsystem})


class ResultService:
    def __init__(
        self,
        results: ResultRepository,
        draws: DrawService,
        activity: ActivityService,
        list_max: int = 500,
    ) -> None:
        self._results = results
        self._draws = draws
        self._activity = activity
        self._list_max = list_max

    async def publish(
        self, principal: Principal, payload: ResultPublish, now: Optional[datetime] = None
    ) -> DrawResult:
        if principal.role not in PUBLISHER_ROLES:
            raise PermissionDeniedError("Only master or subsystem administrators publish results.")
        self._draws.ensure_exists(payload.draw, payload.draw_time)

        now = now or utcnow()
        day = payload.draw_date or self._draws.local_date(now)
        result = DrawResult(
            draw_id=payload.draw,
            draw_time=payload.draw_time,
            draw_date=day.isoformat(),
            lot1=payload.lot1,
            lot2=payload.lot2,
            lot3=payload.lot3,
            published_at=now,
            published_by=principal.id,
        )
        # ConflictError on a second publication for the same draw, slot and day.
        result = await self._results.insert(result)

        await self._activity.record(
            actor_id=principal.id,
            actor_role=principal.role.value,
            action="RESULT_PUBLISHED",
            target_id=f"{result.draw_id}:{result.draw_time}:{result.draw_date}",
            metadata={"lot1": result.lot1, "lot2": result.lot2, "lot3": result.lot3},
        )
        logger.info(
            "Result %s/%s/%s published by %s",
            result.draw_id, result.draw_time, result.draw_date, principal.username,
        )
        return result

    async def list_results(
        self,
        draw_id: Optional[str] = None,
        draw_time: Optional[str] = None,
        draw_date: Optional[date] = None,
        limit: int = 50,
    ) -> list[DrawResult]:
        query: dict[str, Any] = {}
        if draw_id:
            query["draw_id"] = draw_id
        if draw_time:
            query["draw_time"] = draw_time
        if draw_date:
            query["draw_date"] = draw_date.isoformat()
        return await self._results.find(query, max(1, min(limit, self._list_max)))

    async def latest(self) -> list[DrawResult]:
        """Most recent result of every draw and slot that has one."""
        latest: list[DrawResult] = []
        for draw in self._draws.all():
            for slot in DRAW_SLOTS:
                found = await self._results.find(
                    {"draw_id": draw["draw_id"], "draw_time": slot}, 1
                )
                latest.extend(found)
        return latest
