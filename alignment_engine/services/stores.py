"""Store interfaces consumed by the recalculation engine, plus SQL/Redis implementations.

The orchestrator depends only on the Protocols; tests inject in-memory fakes.
SQL stores open one short-lived session per call and translate SQLAlchemy
failures into PersistenceError.
"""

from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from alignment_engine.core.exceptions import PersistenceError
from alignment_engine.db.base import get_session_factory
from alignment_engine.db.models.alignment_metric import AlignmentMetric
from alignment_engine.db.models.daily_execution_log import DailyExecutionLog
from alignment_engine.db.models.journal_entry import JournalEntry
from alignment_engine.db.redis import get_redis
from alignment_engine.domain.execution import compute_completions
from alignment_engine.schemas.alignment import AlignmentMetricRecord
from alignment_engine.schemas.execution import ExecutionLogRecord, ExecutionTask


@runtime_checkable
class ExecutionLogStore(Protocol):
    async def get(self, user_id: str, day: date) -> ExecutionLogRecord | None: ...

    async def recent(self, user_id: str, limit: int, until: date | None = None) -> list[ExecutionLogRecord]:
        """Newest-first logs for a user, on or before ``until`` when given."""
        ...

    async def upsert(
        self,
        user_id: str,
        day: date,
        tasks: Sequence[ExecutionTask] = (),
        identity_habit_done: bool = False,
        deep_work_minutes: int = 0,
        is_missed_day: bool = False,
    ) -> ExecutionLogRecord: ...


@runtime_checkable
class MetricStore(Protocol):
    async def recent_before(self, user_id: str, day: date, limit: int) -> list[AlignmentMetricRecord]:
        """Newest-first metrics strictly before ``day``."""
        ...

    async def upsert(self, metric: AlignmentMetricRecord) -> AlignmentMetricRecord: ...


@runtime_checkable
class ReflectionQualityProvider(Protocol):
    async def get_quality(self, user_id: str, day: date) -> float:
        """Reflection quality 0-100, 0 when the day has no scored reflection."""
        ...


@runtime_checkable
class CacheSink(Protocol):
    async def delete(self, *keys: str) -> None: ...


def _dialect_insert(session: AsyncSession):
    """Return the dialect's INSERT construct supporting ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise PersistenceError(f"upsert on unsupported dialect '{dialect}'")
    return insert


async def _upsert(session: AsyncSession, model, values: dict[str, Any]) -> None:
    insert = _dialect_insert(session)
    stmt = insert(model).values(**values)
    updates = {key: stmt.excluded[key] for key in values if key not in ("user_id", "date")}
    if "updated_at" in model.__table__.c:
        # onupdate hooks do not fire for ON CONFLICT DO UPDATE
        updates["updated_at"] = datetime.now(timezone.utc)
    stmt = stmt.on_conflict_do_update(index_elements=["user_id", "date"], set_=updates)
    await session.execute(stmt)


class _SqlStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory or get_session_factory()


class SqlExecutionLogStore(_SqlStore):
    """Execution logs in the relational store."""

    async def get(self, user_id: str, day: date) -> ExecutionLogRecord | None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(DailyExecutionLog).where(
                        DailyExecutionLog.user_id == user_id,
                        DailyExecutionLog.date == day,
                    )
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("execution_log.get", exc) from exc
        return ExecutionLogRecord.model_validate(row) if row is not None else None

    async def recent(self, user_id: str, limit: int, until: date | None = None) -> list[ExecutionLogRecord]:
        query = select(DailyExecutionLog).where(DailyExecutionLog.user_id == user_id)
        if until is not None:
            query = query.where(DailyExecutionLog.date <= until)
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    query
                    .order_by(DailyExecutionLog.date.desc())
                    .limit(limit)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise PersistenceError("execution_log.recent", exc) from exc
        return [ExecutionLogRecord.model_validate(row) for row in rows]

    async def upsert(
        self,
        user_id: str,
        day: date,
        tasks: Sequence[ExecutionTask] = (),
        identity_habit_done: bool = False,
        deep_work_minutes: int = 0,
        is_missed_day: bool = False,
    ) -> ExecutionLogRecord:
        """Create or replace a day's log, recomputing the cached completion fields."""
        core_pct, support_pct, average_effort = compute_completions(tasks)
        values = {
            "user_id": user_id,
            "date": day,
            "tasks": [t.model_dump(mode="json") for t in tasks],
            "identity_habit_done": identity_habit_done,
            "deep_work_minutes": deep_work_minutes,
            "is_missed_day": is_missed_day,
            "core_completion_pct": core_pct,
            "support_completion_pct": support_pct,
            "average_effort": average_effort,
        }
        try:
            async with self.session_factory() as session:
                await _upsert(session, DailyExecutionLog, values)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("execution_log.upsert", exc) from exc

        record = await self.get(user_id, day)
        if record is None:
            raise PersistenceError("execution_log.upsert")
        return record


class SqlMetricStore(_SqlStore):
    """Alignment metrics in the relational store."""

    async def recent_before(self, user_id: str, day: date, limit: int) -> list[AlignmentMetricRecord]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AlignmentMetric)
                    .where(AlignmentMetric.user_id == user_id, AlignmentMetric.date < day)
                    .order_by(AlignmentMetric.date.desc())
                    .limit(limit)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise PersistenceError("alignment_metric.recent_before", exc) from exc
        return [AlignmentMetricRecord.model_validate(row) for row in rows]

    async def get(self, user_id: str, day: date) -> AlignmentMetricRecord | None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AlignmentMetric).where(
                        AlignmentMetric.user_id == user_id,
                        AlignmentMetric.date == day,
                    )
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("alignment_metric.get", exc) from exc
        return AlignmentMetricRecord.model_validate(row) if row is not None else None

    async def upsert(self, metric: AlignmentMetricRecord) -> AlignmentMetricRecord:
        """Insert or overwrite the metric for (user_id, date). Other days are never touched."""
        values = metric.model_dump(mode="json")
        values["date"] = metric.date
        values["state_level"] = int(metric.state_level)
        try:
            async with self.session_factory() as session:
                await _upsert(session, AlignmentMetric, values)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("alignment_metric.upsert", exc) from exc

        stored = await self.get(metric.user_id, metric.date)
        if stored is None:
            raise PersistenceError("alignment_metric.upsert")
        return stored


class SqlReflectionQualityProvider(_SqlStore):
    """Reads the reflection quality score written by the reflection subsystem."""

    async def get_quality(self, user_id: str, day: date) -> float:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(JournalEntry.reflection_quality_score).where(
                        JournalEntry.user_id == user_id,
                        JournalEntry.date == day,
                    )
                )
                score = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("journal_entry.get_quality", exc) from exc
        return float(score) if score is not None else 0.0


class RedisCacheSink:
    """Deletes dependent cache entries from Redis."""

    def __init__(self, client: redis.Redis | None = None):
        self._client = client

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        client = self._client if self._client is not None else get_redis()
        try:
            await client.delete(*keys)
        except RedisError as exc:
            raise PersistenceError("cache.delete", exc) from exc
