"""Redis key factory functions.

Always build keys here, never inline raw key strings. The configured
``redis_key_prefix`` is applied by ``prefixed``.
"""

from datetime import date

from alignment_engine.core.config import get_settings


def prefixed(key: str) -> str:
    prefix = get_settings().redis_key_prefix
    return f"{prefix}{key}" if prefix else key


# Cache (owned by the dashboard and avatar readers, invalidated by recalculation)
def avatar_state_cache(user_id: str) -> str:
    """Cached avatar state. TTL: 30min."""
    return prefixed(f"cache:avatar:{user_id}")


def dashboard_cache(user_id: str) -> str:
    """Cached dashboard summary. TTL: 15min."""
    return prefixed(f"cache:dashboard:{user_id}")


# Locks
def alignment_lock(user_id: str) -> str:
    """Single-flight lock for one user's recalculation. TTL: 30s."""
    return prefixed(f"lock:alignment:{user_id}")


# Sweep tracking
def midnight_swept(user_id: str, day: date) -> str:
    """Marks the missed-day sweep as done for a user+date. TTL: 48h."""
    return prefixed(f"sweep:{user_id}:{day.isoformat()}")


# Notifications
def last_drift_alert(user_id: str) -> str:
    """Drift alert cooldown marker. TTL: 7d."""
    return prefixed(f"notif:drift:{user_id}")


def notification_outbox() -> str:
    return prefixed("notifications:outbox")


# Queue
def alignment_queue() -> str:
    return prefixed("queue:alignment:pending")


def alignment_processing(worker_id: str) -> str:
    """Jobs claimed by one worker and not yet settled."""
    return prefixed(f"queue:alignment:processing:{worker_id}")


def alignment_dead_letter() -> str:
    return prefixed("queue:alignment:dead")
