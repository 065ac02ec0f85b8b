"""Drift and state level domain functions.

Pure deterministic math. State is a function of the current observation and
a bounded, newest-first history window; it never lives on an object.

State drops IMMEDIATELY on a single bad observation but rises only after
sustained good performance.
"""

from collections.abc import Sequence

from alignment_engine.domain.constants import (
    ALIGNED_CONSECUTIVE_DAYS,
    DRIFT_DANGER,
    DRIFT_DAYS_TO_DIMINISH,
    DRIFT_WINDOW_DAYS,
    STATE_ALIGNED_MIN,
    STATE_STABLE_MIN,
    StateLevel,
)
from alignment_engine.domain.rounding import clamp, round_half_up
from alignment_engine.schemas.alignment import AlignmentMetricRecord


def calculate_drift(
    today_score: float,
    prior_metrics: Sequence[AlignmentMetricRecord] = (),
) -> tuple[float, float]:
    """Calculate the 7-day moving average and drift index.

    Window is today's score plus up to 6 prior scores.
    Drift = (today - average) / average, 0 when the average is 0.

    Returns:
        Tuple of (drift_index, seven_day_average)
        - drift_index: clamped to [-1, 1], rounded to 3 decimals
        - seven_day_average: rounded to 2 decimals
    """
    window = [today_score] + [m.alignment_score for m in prior_metrics[: DRIFT_WINDOW_DAYS - 1]]
    average = sum(window) / len(window)

    raw_drift = 0.0 if average == 0 else (today_score - average) / average
    drift_index = round_half_up(clamp(raw_drift, -1.0, 1.0), 3)

    return (drift_index, round_half_up(average, 2))


def determine_state_level(
    seven_day_average: float,
    drift_index: float,
    prior_metrics: Sequence[AlignmentMetricRecord] = (),
) -> StateLevel:
    """Classify recent performance as Diminished, Stable or Aligned.

    Level 1 — Diminished: 7-day avg < 45, OR today's drift and the two
              previous drifts (3 points required) are all below -0.4
    Level 3 — Aligned:    7-day avg > 75 AND drift >= 0 AND the two previous
              records were already Aligned
    Level 2 — Stable:     everything else, including a day that qualifies for
              Aligned without the two-day confirmation
    """
    recent_drift = [drift_index] + [m.drift_index for m in prior_metrics[: DRIFT_DAYS_TO_DIMINISH - 1]]
    sustained_danger = len(recent_drift) >= DRIFT_DAYS_TO_DIMINISH and all(d < DRIFT_DANGER for d in recent_drift)

    if seven_day_average < STATE_STABLE_MIN or sustained_danger:
        return StateLevel.DIMINISHED

    if seven_day_average > STATE_ALIGNED_MIN and drift_index >= 0:
        previous_levels = [m.state_level for m in prior_metrics[:ALIGNED_CONSECUTIVE_DAYS]]
        confirmed = len(previous_levels) >= ALIGNED_CONSECUTIVE_DAYS and all(
            level >= StateLevel.ALIGNED for level in previous_levels
        )
        if confirmed:
            return StateLevel.ALIGNED

    return StateLevel.STABLE
