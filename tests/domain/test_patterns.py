"""Tests for behavioral pattern detection.

Each detector is independent; all four may fire on the same day.
"""

from datetime import date, timedelta

import pytest

from alignment_engine.domain.constants import PatternFlag
from alignment_engine.domain.patterns import (
    detect_effort_inflation,
    detect_midweek_drift,
    detect_overcommitment,
    detect_patterns,
    detect_streak_break,
)
from fakes import make_log, make_metric

pytestmark = pytest.mark.unit

FIRST_MONDAY = date(2026, 3, 2)


def _weeks(drops: list[float], monday_score: float = 80) -> list:
    """Monday/Wednesday metrics for consecutive weeks, newest-first.

    ``drops[0]`` is the oldest week.
    """
    metrics = []
    for week, drop in enumerate(drops):
        monday = FIRST_MONDAY + timedelta(weeks=week)
        metrics.append(make_metric(monday, monday_score))
        metrics.append(make_metric(monday + timedelta(days=2), monday_score - drop))
    return sorted(metrics, key=lambda m: m.date, reverse=True)


def _logs(values: list[tuple[float, float]]) -> list:
    """Logs from (core_pct, average_effort) pairs, first pair newest."""
    today = date(2026, 3, 31)
    return [
        make_log(today - timedelta(days=i), core_pct=pct, average_effort=effort)
        for i, (pct, effort) in enumerate(values)
    ]


def test_fixture_weekdays():
    assert FIRST_MONDAY.weekday() == 0
    assert (FIRST_MONDAY + timedelta(days=2)).weekday() == 2


# ============================================================================
# MIDWEEK_DRIFT
# ============================================================================


def test_midweek_drift_three_of_four_weeks():
    assert detect_midweek_drift(_weeks([20, 5, 15, 30])) is True


def test_midweek_drift_two_of_four_weeks_is_not_enough():
    assert detect_midweek_drift(_weeks([20, 5, 5, 30])) is False


def test_midweek_drift_needs_three_weekly_pairs():
    assert detect_midweek_drift(_weeks([25, 25])) is False


def test_midweek_drift_only_reads_four_most_recent_weeks():
    # Oldest two weeks drift, newest four only once
    assert detect_midweek_drift(_weeks([30, 30, 0, 0, 0, 20])) is False


def test_wednesday_without_its_monday_is_ignored():
    metrics = [m for m in _weeks([20, 20, 20]) if m.date.weekday() == 2]

    assert detect_midweek_drift(metrics) is False


# ============================================================================
# EFFORT_INFLATION / OVERCOMMITMENT
# ============================================================================


def test_effort_inflation_three_of_seven_days():
    logs = _logs([(40, 8), (30, 9), (100, 9), (49, 8.5), (100, 5), (100, 5), (100, 5)])

    assert detect_effort_inflation(logs) is True


def test_effort_inflation_requires_low_completion():
    logs = _logs([(50, 9), (50, 9), (50, 9), (40, 7.9)])

    assert detect_effort_inflation(logs) is False


def test_effort_inflation_ignores_days_beyond_seven():
    logs = _logs([(100, 5)] * 7 + [(10, 9)] * 3)

    assert detect_effort_inflation(logs) is False


def test_overcommitment_five_of_seven_days():
    logs = _logs([(0, 5), (10, 5), (39, 5), (20, 5), (35, 5), (100, 5), (100, 5)])

    assert detect_overcommitment(logs) is True


def test_overcommitment_four_days_is_not_enough():
    logs = _logs([(0, 5), (10, 5), (40, 5), (20, 5), (35, 5), (100, 5), (100, 5)])

    assert detect_overcommitment(logs) is False


# ============================================================================
# STREAK_BREAK
# ============================================================================


def test_streak_break_from_long_streak():
    metrics = [make_metric(date(2026, 3, 10), 20, streak=0), make_metric(date(2026, 3, 9), 90, streak=8)]

    assert detect_streak_break(metrics) is True


def test_streak_break_needs_streak_above_seven():
    metrics = [make_metric(date(2026, 3, 10), 20, streak=0), make_metric(date(2026, 3, 9), 90, streak=7)]

    assert detect_streak_break(metrics) is False


def test_streak_break_needs_newest_at_zero():
    metrics = [make_metric(date(2026, 3, 10), 60, streak=1), make_metric(date(2026, 3, 9), 90, streak=12)]

    assert detect_streak_break(metrics) is False


def test_streak_break_with_single_record():
    assert detect_streak_break([make_metric(date(2026, 3, 10), 20, streak=0)]) is False


# ============================================================================
# detect_patterns
# ============================================================================


def test_detect_patterns_empty_inputs():
    assert detect_patterns([], []) == []


def test_detect_patterns_no_flags_on_healthy_history():
    metrics = _weeks([0, 0, 0, 0])
    logs = _logs([(100, 7)] * 7)

    assert detect_patterns(metrics, logs) == []


def test_all_detectors_can_fire_together():
    weeks = _weeks([20, 20, 20, 20])
    newest = weeks[0].date
    metrics = [
        make_metric(newest + timedelta(days=2), 10, streak=0),
        make_metric(newest + timedelta(days=1), 80, streak=9),
    ] + weeks
    logs = _logs([(10, 9)] * 7)

    flags = detect_patterns(metrics, logs)

    assert flags == [
        PatternFlag.MIDWEEK_DRIFT,
        PatternFlag.EFFORT_INFLATION,
        PatternFlag.OVERCOMMITMENT,
        PatternFlag.STREAK_BREAK,
    ]
