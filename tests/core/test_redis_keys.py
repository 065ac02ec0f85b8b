"""Tests for Redis key construction and settings."""

from datetime import date

import pytest

from alignment_engine.core import redis_keys
from alignment_engine.core.config import Settings, get_settings

pytestmark = pytest.mark.unit


def test_key_layout_without_prefix(monkeypatch):
    monkeypatch.setattr(redis_keys, "get_settings", lambda: Settings(redis_key_prefix=""))

    assert redis_keys.alignment_lock("u1") == "lock:alignment:u1"
    assert redis_keys.avatar_state_cache("u1") == "cache:avatar:u1"
    assert redis_keys.dashboard_cache("u1") == "cache:dashboard:u1"
    assert redis_keys.last_drift_alert("u1") == "notif:drift:u1"
    assert redis_keys.midnight_swept("u1", date(2026, 3, 10)) == "sweep:u1:2026-03-10"
    assert redis_keys.alignment_queue() == "queue:alignment:pending"
    assert redis_keys.alignment_dead_letter() == "queue:alignment:dead"
    assert redis_keys.alignment_processing("worker-2") == "queue:alignment:processing:worker-2"


def test_prefix_is_applied_to_every_key(monkeypatch):
    monkeypatch.setattr(redis_keys, "get_settings", lambda: Settings(redis_key_prefix="staging:"))

    assert redis_keys.alignment_lock("u1") == "staging:lock:alignment:u1"
    assert redis_keys.notification_outbox() == "staging:notifications:outbox"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("ALIGNMENT_LOCK_TTL_SECONDS", "45")
    monkeypatch.setenv("NOTIFICATIONS_ENABLED", "false")

    settings = Settings()

    assert settings.alignment_lock_ttl_seconds == 45
    assert settings.notifications_enabled is False


def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.drift_alert_cooldown_seconds == 604_800
    assert settings.sweep_marker_ttl_seconds == 172_800
    assert settings.worker_max_attempts == 5


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
