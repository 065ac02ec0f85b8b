"""Tests for notification templates and the Redis outbox."""

import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from alignment_engine.core import redis_keys
from alignment_engine.core.exceptions import NotificationError
from alignment_engine.services.notifications import (
    Notifier,
    NullNotifier,
    RedisOutboxNotifier,
    send_drift_alert,
    send_streak_milestone,
)
from fakes import RecordingNotifier

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_drift_alert_template():
    notifier = RecordingNotifier()

    await send_drift_alert(notifier, "user-1", 38.5)

    assert notifier.sent == [
        (
            "user-1",
            "drift_alert",
            {
                "title": "Alignment drift detected.",
                "body": "Your score has dropped to 38.5. Your future self needs you now.",
                "data": {"score": "38.5"},
            },
        )
    ]


@pytest.mark.asyncio
async def test_streak_milestone_template():
    notifier = RecordingNotifier()

    await send_streak_milestone(notifier, "user-1", 30)

    _, template_type, payload = notifier.sent[0]
    assert template_type == "streak_milestone"
    assert payload["title"] == "30-day streak!"
    assert payload["data"] == {"streakCount": "30"}


@pytest.mark.asyncio
async def test_outbox_notifier_appends_message(redis):
    notifier = RedisOutboxNotifier(redis)

    await send_drift_alert(notifier, "user-1", 40)

    raw = await redis.lpop(redis_keys.notification_outbox())
    message = json.loads(raw)
    assert message["user_id"] == "user-1"
    assert message["type"] == "drift_alert"
    assert message["payload"]["data"] == {"score": "40"}
    assert "queued_at" in message


class _BrokenRedis:
    async def rpush(self, *args):
        raise RedisConnectionError("connection refused")


@pytest.mark.asyncio
async def test_outbox_failure_raises_notification_error():
    notifier = RedisOutboxNotifier(_BrokenRedis())

    with pytest.raises(NotificationError):
        await send_streak_milestone(notifier, "user-1", 7)


@pytest.mark.asyncio
async def test_null_notifier_drops_silently():
    await NullNotifier().send("user-1", "drift_alert", {})


def test_notifiers_satisfy_protocol():
    assert isinstance(NullNotifier(), Notifier)
    assert isinstance(RedisOutboxNotifier(), Notifier)
    assert isinstance(RecordingNotifier(), Notifier)
