"""Streak tracking domain functions.

Pure deterministic math. History is always ordered newest-first.
"""

from collections.abc import Sequence

from alignment_engine.domain.constants import (
    MISSED_DAY_PENALTY,
    MULTIPLIER_HIGH,
    MULTIPLIER_LOW,
    MULTIPLIER_NONE,
    STREAK_BREAK_SCORE,
    STREAK_THRESHOLD_HIGH,
    STREAK_THRESHOLD_LOW,
)
from alignment_engine.domain.rounding import round_half_up
from alignment_engine.schemas.alignment import AlignmentMetricRecord


def calculate_streak(
    raw_score: float,
    prior_metrics: Sequence[AlignmentMetricRecord] = (),
) -> tuple[int, float]:
    """Calculate today's streak count and score multiplier.

    The streak continues when the previous record scored at least 50;
    otherwise (no history, or a weak previous day) it resets to 0.
    ``raw_score`` does not affect the streak, today only counts once tomorrow
    is scored.

    Returns:
        Tuple of (streak_count, multiplier)
        - streak > 7: 1.10
        - streak > 3: 1.05
        - otherwise: 1.00
    """
    previous = prior_metrics[0] if prior_metrics else None

    if previous is not None and previous.alignment_score >= STREAK_BREAK_SCORE:
        streak_count = previous.streak_count + 1
    else:
        streak_count = 0

    if streak_count > STREAK_THRESHOLD_HIGH:
        multiplier = MULTIPLIER_HIGH
    elif streak_count > STREAK_THRESHOLD_LOW:
        multiplier = MULTIPLIER_LOW
    else:
        multiplier = MULTIPLIER_NONE

    return (streak_count, multiplier)


def apply_multiplier(raw_score: float, multiplier: float) -> float:
    """Apply the streak multiplier, rounded to 2 decimals and capped at 100."""
    return min(100.0, round_half_up(raw_score * multiplier, 2))


def calculate_missed_day_score(prior_metrics: Sequence[AlignmentMetricRecord] = ()) -> int:
    """Score for a missed day: the last known score less 10%, as a whole number.

    Returns 0 when there is no history.
    """
    if not prior_metrics:
        return 0
    last_score = prior_metrics[0].alignment_score
    penalty = last_score * MISSED_DAY_PENALTY
    return max(0, int(round_half_up(last_score - penalty)))
