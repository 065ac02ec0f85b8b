"""Notification dispatch for alignment events.

The engine never talks to a push transport directly. It hands a rendered
message to a Notifier; production uses the Redis outbox drained by the
delivery service, tests use NullNotifier or a recording fake.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from alignment_engine.core import redis_keys
from alignment_engine.core.exceptions import NotificationError
from alignment_engine.db.redis import get_redis

logger = structlog.get_logger(__name__)


class NotificationType(str, Enum):
    DRIFT_ALERT = "drift_alert"
    STREAK_MILESTONE = "streak_milestone"


@runtime_checkable
class Notifier(Protocol):
    async def send(self, user_id: str, template_type: str, payload: dict[str, Any]) -> None:
        """Hand a notification to the delivery transport. May raise NotificationError."""
        ...


class NullNotifier:
    """Drops every notification. Used when notifications are disabled."""

    async def send(self, user_id: str, template_type: str, payload: dict[str, Any]) -> None:
        logger.debug("notification_dropped", user_id=user_id, template_type=template_type)


class RedisOutboxNotifier:
    """Appends notifications to a Redis list consumed by the push delivery service."""

    def __init__(self, client: redis.Redis | None = None):
        self._client = client

    async def send(self, user_id: str, template_type: str, payload: dict[str, Any]) -> None:
        client = self._client if self._client is not None else get_redis()
        message = json.dumps(
            {
                "user_id": user_id,
                "type": template_type,
                "payload": payload,
                "queued_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        try:
            await client.rpush(redis_keys.notification_outbox(), message)
        except RedisError as exc:
            raise NotificationError(f"outbox push failed for {template_type}: {exc}") from exc


def _format_score(score: float) -> str:
    return f"{score:g}"


async def send_drift_alert(notifier: Notifier, user_id: str, score: float) -> None:
    await notifier.send(
        user_id,
        NotificationType.DRIFT_ALERT.value,
        {
            "title": "Alignment drift detected.",
            "body": f"Your score has dropped to {_format_score(score)}. Your future self needs you now.",
            "data": {"score": _format_score(score)},
        },
    )


async def send_streak_milestone(notifier: Notifier, user_id: str, streak_count: int) -> None:
    await notifier.send(
        user_id,
        NotificationType.STREAK_MILESTONE.value,
        {
            "title": f"{streak_count}-day streak!",
            "body": "You are building real momentum. Keep going.",
            "data": {"streakCount": str(streak_count)},
        },
    )
