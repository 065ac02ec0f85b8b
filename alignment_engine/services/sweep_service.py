"""MissedDaySweep: records missed days and queues their recalculation.

For each user whose local "yesterday" has no execution log, writes an empty
log flagged ``is_missed_day`` and enqueues a ``missed_day`` recalculation.
A Redis marker per (user, day) makes the sweep safe to run hourly.
"""

from collections.abc import Iterable
from datetime import date

import structlog
from redis.asyncio import Redis

from alignment_engine.core import redis_keys
from alignment_engine.core.config import get_settings
from alignment_engine.domain.streak import calculate_missed_day_score
from alignment_engine.queue.manager import AlignmentQueue
from alignment_engine.queue.schemas import TriggerReason
from alignment_engine.services.stores import ExecutionLogStore, MetricStore

logger = structlog.get_logger(__name__)


class MissedDaySweep:
    def __init__(
        self,
        execution_logs: ExecutionLogStore,
        queue: AlignmentQueue,
        redis: Redis,
        marker_ttl: int | None = None,
        metrics: MetricStore | None = None,
    ):
        self.execution_logs = execution_logs
        self.queue = queue
        self.redis = redis
        self.marker_ttl = marker_ttl or get_settings().sweep_marker_ttl_seconds
        self.metrics = metrics

    async def sweep_user(self, user_id: str, day: date) -> bool:
        """Apply the missed-day penalty for one user and day.

        Returns:
            True if a missed-day log was written and a recalculation queued,
            False if the day was already swept or already has a log.
        """
        marker = redis_keys.midnight_swept(user_id, day)
        if await self.redis.get(marker):
            return False

        if await self.execution_logs.get(user_id, day) is not None:
            await self.redis.set(marker, "1", ex=self.marker_ttl)
            return False

        await self.execution_logs.upsert(user_id, day, tasks=[], is_missed_day=True)
        await self.queue.enqueue(user_id, day, TriggerReason.MISSED_DAY)
        await self.redis.set(marker, "1", ex=self.marker_ttl)

        projected_score = None
        if self.metrics is not None:
            projected_score = calculate_missed_day_score(await self.metrics.recent_before(user_id, day, 1))

        logger.info(
            "missed_day_penalty_applied",
            user_id=user_id,
            date=day.isoformat(),
            projected_score=projected_score,
        )
        return True

    async def sweep_users(self, days_by_user: Iterable[tuple[str, date]]) -> int:
        """Sweep many users, each with their own local "yesterday".

        A failure for one user is logged and does not stop the others.

        Returns:
            Number of missed days recorded
        """
        applied = 0
        for user_id, day in days_by_user:
            try:
                if await self.sweep_user(user_id, day):
                    applied += 1
            except Exception as exc:
                logger.error("missed_day_sweep_failed", user_id=user_id, date=day.isoformat(), error=str(exc))
        logger.info("missed_day_sweep_complete", applied=applied)
        return applied
