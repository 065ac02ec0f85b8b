"""Behavioral pattern detection.

Pure domain functions. Each detector reads newest-first windows and is
independent of the others; any combination may fire on the same day.
"""

from collections.abc import Sequence

from alignment_engine.domain.constants import (
    EFFORT_INFLATION_COMPLETION_MAX,
    EFFORT_INFLATION_DAYS_REQUIRED,
    EFFORT_INFLATION_EFFORT_MIN,
    LOG_WINDOW_DAYS,
    MIDWEEK_DROP_THRESHOLD,
    MIDWEEK_WEEKS_CONSIDERED,
    MIDWEEK_WEEKS_REQUIRED,
    OVERCOMMIT_COMPLETION_MAX,
    OVERCOMMIT_DAYS_REQUIRED,
    PATTERN_WINDOW_DAYS,
    STREAK_THRESHOLD_HIGH,
    PatternFlag,
)
from alignment_engine.schemas.alignment import AlignmentMetricRecord
from alignment_engine.schemas.execution import ExecutionLogRecord

_MONDAY = 0
_WEDNESDAY = 2


def detect_midweek_drift(metrics: Sequence[AlignmentMetricRecord]) -> bool:
    """Wednesday scores at least 15 points below Monday in 3 of the last 4 weeks."""
    window = metrics[:PATTERN_WINDOW_DAYS]
    drops: list[float] = []

    for wednesday in window:
        if wednesday.date.weekday() != _WEDNESDAY:
            continue

        monday = next(
            (
                m
                for m in window
                if m.date.weekday() == _MONDAY and abs((m.date - wednesday.date).days) < 3
            ),
            None,
        )
        if monday is not None:
            drops.append(monday.alignment_score - wednesday.alignment_score)

        if len(drops) >= MIDWEEK_WEEKS_CONSIDERED:
            break

    drifting = [d for d in drops if d >= MIDWEEK_DROP_THRESHOLD]
    return len(drifting) >= MIDWEEK_WEEKS_REQUIRED


def detect_effort_inflation(logs: Sequence[ExecutionLogRecord]) -> bool:
    """Effort rated 8+ while under half the core tasks were done, on 3 of the last 7 days."""
    inflated = [
        log
        for log in logs[:LOG_WINDOW_DAYS]
        if log.average_effort >= EFFORT_INFLATION_EFFORT_MIN
        and log.core_completion_pct < EFFORT_INFLATION_COMPLETION_MAX
    ]
    return len(inflated) >= EFFORT_INFLATION_DAYS_REQUIRED


def detect_overcommitment(logs: Sequence[ExecutionLogRecord]) -> bool:
    """Core completion below 40% on 5 of the last 7 days."""
    low = [log for log in logs[:LOG_WINDOW_DAYS] if log.core_completion_pct < OVERCOMMIT_COMPLETION_MAX]
    return len(low) >= OVERCOMMIT_DAYS_REQUIRED


def detect_streak_break(metrics: Sequence[AlignmentMetricRecord]) -> bool:
    """Newest streak is 0 while the record before it had a streak above 7."""
    last3 = metrics[:3]
    if len(last3) < 2:
        return False
    return last3[0].streak_count == 0 and last3[1].streak_count > STREAK_THRESHOLD_HIGH


def detect_patterns(
    metrics: Sequence[AlignmentMetricRecord],
    logs: Sequence[ExecutionLogRecord],
) -> list[PatternFlag]:
    """Run every detector over the newest-first 30-day windows.

    Returns:
        Active flags in detector order, so the persisted list is stable
        across recalculations. Empty when both windows are empty.
    """
    if not metrics and not logs:
        return []

    flags: list[PatternFlag] = []
    if detect_midweek_drift(metrics):
        flags.append(PatternFlag.MIDWEEK_DRIFT)
    if detect_effort_inflation(logs):
        flags.append(PatternFlag.EFFORT_INFLATION)
    if detect_overcommitment(logs):
        flags.append(PatternFlag.OVERCOMMITMENT)
    if detect_streak_break(metrics):
        flags.append(PatternFlag.STREAK_BREAK)
    return flags
