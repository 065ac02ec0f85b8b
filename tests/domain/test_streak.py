"""Tests for streak tracking, multiplier and missed-day penalty."""

from datetime import date, timedelta

import pytest

from alignment_engine.domain.streak import apply_multiplier, calculate_missed_day_score, calculate_streak
from fakes import make_metric

pytestmark = pytest.mark.unit

YESTERDAY = date(2026, 3, 9)


def test_empty_history_starts_fresh():
    assert calculate_streak(80, []) == (0, 1.0)


def test_qualifying_previous_day_extends_streak():
    streak, multiplier = calculate_streak(80, [make_metric(YESTERDAY, 50, streak=2)])

    assert streak == 3
    assert multiplier == 1.0


def test_weak_previous_day_resets_streak():
    streak, multiplier = calculate_streak(90, [make_metric(YESTERDAY, 49.99, streak=12)])

    assert streak == 0
    assert multiplier == 1.0


def test_only_most_recent_record_counts():
    history = [make_metric(YESTERDAY, 70, streak=5), make_metric(YESTERDAY - timedelta(days=1), 10, streak=0)]

    streak, _ = calculate_streak(60, history)

    assert streak == 6


@pytest.mark.parametrize(
    "previous_streak,expected_streak,expected_multiplier",
    [
        (0, 1, 1.0),
        (2, 3, 1.0),
        (3, 4, 1.05),
        (6, 7, 1.05),
        (7, 8, 1.10),
        (40, 41, 1.10),
    ],
)
def test_multiplier_tiers(previous_streak, expected_streak, expected_multiplier):
    streak, multiplier = calculate_streak(75, [make_metric(YESTERDAY, 75, streak=previous_streak)])

    assert streak == expected_streak
    assert multiplier == expected_multiplier


def test_apply_multiplier_rounds_to_two_decimals():
    assert apply_multiplier(70.17, 1.05) == 73.68


def test_apply_multiplier_caps_at_100():
    assert apply_multiplier(95, 1.10) == 100
    assert apply_multiplier(100, 1.10) == 100


def test_missed_day_score_without_history_is_zero():
    assert calculate_missed_day_score([]) == 0


def test_missed_day_score_deducts_ten_percent():
    assert calculate_missed_day_score([make_metric(YESTERDAY, 80)]) == 72


def test_missed_day_score_rounds_half_up():
    assert calculate_missed_day_score([make_metric(YESTERDAY, 45)]) == 41


def test_missed_day_score_from_zero_stays_zero():
    assert calculate_missed_day_score([make_metric(YESTERDAY, 0)]) == 0
