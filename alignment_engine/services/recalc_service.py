"""RecalcOrchestrator: recomputes one user's alignment metric for one day.

Composes the pure domain calculators under a per-user distributed lock,
upserts the result, invalidates dependent caches and fires best-effort
notifications. Pure math only, no LLM calls.

Failure semantics:
- Lock held by another worker: returns None, no store is read or written
- No execution log for the day: returns None
- Store failures: propagate (after the lock is released) so the job system redelivers
- Notification failures: logged and swallowed
"""

from datetime import date

import structlog
from redis.asyncio import Redis

from alignment_engine.core import redis_keys
from alignment_engine.core.config import get_settings
from alignment_engine.core.locking import DistributedLock
from alignment_engine.domain.constants import (
    HISTORY_LIMIT,
    PATTERN_WINDOW_DAYS,
    STREAK_MILESTONES,
    StateLevel,
)
from alignment_engine.domain.drift import calculate_drift, determine_state_level
from alignment_engine.domain.execution import build_exec_summary
from alignment_engine.domain.patterns import detect_patterns
from alignment_engine.domain.score import calculate_raw_score
from alignment_engine.domain.streak import apply_multiplier, calculate_streak
from alignment_engine.schemas.alignment import AlignmentMetricRecord
from alignment_engine.services.notifications import Notifier, send_drift_alert, send_streak_milestone
from alignment_engine.services.stores import (
    CacheSink,
    ExecutionLogStore,
    MetricStore,
    ReflectionQualityProvider,
)

logger = structlog.get_logger(__name__)


class RecalcOrchestrator:
    """Single-flight, idempotent daily alignment recalculation.

    All collaborators are injected. ``redis`` backs both the lock and the
    drift-alert cooldown marker.
    """

    def __init__(
        self,
        execution_logs: ExecutionLogStore,
        metrics: MetricStore,
        reflections: ReflectionQualityProvider,
        cache: CacheSink,
        notifier: Notifier,
        redis: Redis,
        lock: DistributedLock | None = None,
        lock_ttl: int | None = None,
        drift_alert_cooldown: int | None = None,
    ):
        settings = get_settings()
        self.execution_logs = execution_logs
        self.metrics = metrics
        self.reflections = reflections
        self.cache = cache
        self.notifier = notifier
        self.redis = redis
        self.lock = lock or DistributedLock(redis)
        self.lock_ttl = lock_ttl or settings.alignment_lock_ttl_seconds
        self.drift_alert_cooldown = drift_alert_cooldown or settings.drift_alert_cooldown_seconds

    async def recalc_daily_alignment(self, user_id: str, day: date) -> AlignmentMetricRecord | None:
        """Recalculate and persist the alignment metric for ``user_id`` on ``day``.

        Steps:
        1. Acquire the per-user lock (skip if another recalculation holds it)
        2. Fetch the execution log (skip if absent)
        3. Fetch up to 7 previous metrics, newest-first
        4. Fetch reflection quality (default 0)
        5-8. Raw score, streak + multiplier, drift + state level, patterns
        9. Upsert the metric
        10. Invalidate avatar and dashboard caches
        11. Best-effort drift alert and streak milestone notifications
        12. Release the lock on every exit path

        Returns:
            The persisted metric, or None when skipped
        """
        log = logger.bind(user_id=user_id, date=day.isoformat())

        async with self.lock.hold(redis_keys.alignment_lock(user_id), self.lock_ttl) as acquired:
            if not acquired:
                log.info("alignment_recalc_skipped_locked")
                return None
            return await self._recalculate(user_id, day, log)

    async def _recalculate(self, user_id: str, day: date, log) -> AlignmentMetricRecord | None:
        execution_log = await self.execution_logs.get(user_id, day)
        if execution_log is None:
            log.warning("alignment_recalc_skipped_no_execution_log")
            return None

        previous = await self.metrics.recent_before(user_id, day, HISTORY_LIMIT)
        reflection_quality = await self.reflections.get_quality(user_id, day)

        raw_score, components = calculate_raw_score(build_exec_summary(execution_log), reflection_quality)

        streak_count, multiplier = calculate_streak(raw_score, previous)
        alignment_score = apply_multiplier(raw_score, multiplier)

        drift_index, seven_day_average = calculate_drift(alignment_score, previous)
        state_level = determine_state_level(seven_day_average, drift_index, previous)

        metric = AlignmentMetricRecord(
            user_id=user_id,
            date=day,
            alignment_score=alignment_score,
            raw_score=raw_score,
            streak_multiplier=multiplier,
            drift_index=drift_index,
            seven_day_average=seven_day_average,
            streak_count=streak_count,
            state_level=state_level,
            components=components,
        )

        # Pattern windows end at ``day``: today's fresh metric plus the days before it
        metric_window = [metric] + await self.metrics.recent_before(user_id, day, PATTERN_WINDOW_DAYS - 1)
        log_window = await self.execution_logs.recent(user_id, PATTERN_WINDOW_DAYS, until=day)
        flags = detect_patterns(metric_window, log_window)
        metric = metric.model_copy(update={"pattern_flags": [flag.value for flag in flags]})

        stored = await self.metrics.upsert(metric)

        await self.cache.delete(
            redis_keys.avatar_state_cache(user_id),
            redis_keys.dashboard_cache(user_id),
        )

        await self._notify(stored, log)

        log.info(
            "alignment_recalc_complete",
            alignment_score=stored.alignment_score,
            state_level=int(stored.state_level),
            streak_count=stored.streak_count,
            pattern_flags=stored.pattern_flags,
        )
        return stored

    async def _notify(self, metric: AlignmentMetricRecord, log) -> None:
        """Fire drift alert and streak milestone. Never raises."""
        try:
            if metric.state_level == StateLevel.DIMINISHED:
                marker = redis_keys.last_drift_alert(metric.user_id)
                if not await self.redis.get(marker):
                    await send_drift_alert(self.notifier, metric.user_id, metric.alignment_score)
                    await self.redis.setex(marker, self.drift_alert_cooldown, "1")
                    log.info("drift_alert_sent", alignment_score=metric.alignment_score)

            if metric.streak_count in STREAK_MILESTONES:
                await send_streak_milestone(self.notifier, metric.user_id, metric.streak_count)
                log.info("streak_milestone_sent", streak_count=metric.streak_count)
        except Exception as exc:
            log.warning("alignment_notification_failed", error=str(exc), error_type=type(exc).__name__, exc_info=True)
