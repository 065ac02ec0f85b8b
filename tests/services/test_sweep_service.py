"""Tests for the missed-day sweep."""

from datetime import date, timedelta

import pytest

from alignment_engine.core import redis_keys
from alignment_engine.queue.manager import AlignmentQueue
from alignment_engine.queue.schemas import TriggerReason
from alignment_engine.services.sweep_service import MissedDaySweep
from fakes import make_log, make_metric

pytestmark = pytest.mark.unit

USER = "user-1"
YESTERDAY = date(2026, 3, 9)


@pytest.fixture
def queue(redis):
    return AlignmentQueue(redis)


@pytest.fixture
def sweep(execution_logs, queue, redis, metric_store):
    return MissedDaySweep(execution_logs, queue, redis, metrics=metric_store)


@pytest.mark.asyncio
async def test_missing_day_is_recorded_and_queued(sweep, execution_logs, queue, redis):
    applied = await sweep.sweep_user(USER, YESTERDAY)

    assert applied is True
    log = await execution_logs.get(USER, YESTERDAY)
    assert log.is_missed_day is True
    assert log.tasks == []

    job = await queue.dequeue()
    assert job.user_id == USER
    assert job.date == YESTERDAY
    assert job.trigger_reason == TriggerReason.MISSED_DAY

    ttl = await redis.ttl(redis_keys.midnight_swept(USER, YESTERDAY))
    assert 0 < ttl <= 172_800


@pytest.mark.asyncio
async def test_second_sweep_same_day_is_noop(sweep, queue):
    """The hourly sweep must never penalize a day twice."""
    await sweep.sweep_user(USER, YESTERDAY)

    assert await sweep.sweep_user(USER, YESTERDAY) is False
    assert await queue.get_length() == 1


@pytest.mark.asyncio
async def test_existing_log_is_left_alone(sweep, execution_logs, queue, redis):
    execution_logs.add(make_log(YESTERDAY, core_pct=80))

    assert await sweep.sweep_user(USER, YESTERDAY) is False

    assert (await execution_logs.get(USER, YESTERDAY)).is_missed_day is False
    assert await queue.get_length() == 0
    assert await redis.exists(redis_keys.midnight_swept(USER, YESTERDAY)) == 1


@pytest.mark.asyncio
async def test_sweep_reads_last_metric_for_projection(sweep, metric_store):
    metric_store.add(make_metric(YESTERDAY - timedelta(days=1), 80))

    assert await sweep.sweep_user(USER, YESTERDAY) is True
    assert metric_store.read_calls == 1


@pytest.mark.asyncio
async def test_sweep_users_continues_past_failures(sweep, execution_logs, queue):
    execution_logs.fail_for.add("broken")

    applied = await sweep.sweep_users(
        [
            ("user-a", YESTERDAY),
            ("broken", YESTERDAY),
            ("user-b", YESTERDAY - timedelta(days=1)),
        ]
    )

    assert applied == 2
    assert await queue.get_length() == 2


@pytest.mark.asyncio
async def test_sweep_without_metric_store(execution_logs, queue, redis):
    sweep = MissedDaySweep(execution_logs, queue, redis, marker_ttl=60)

    assert await sweep.sweep_user(USER, YESTERDAY) is True
    assert 0 < await redis.ttl(redis_keys.midnight_swept(USER, YESTERDAY)) <= 60
