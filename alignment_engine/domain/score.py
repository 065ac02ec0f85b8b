"""Raw alignment score domain function.

Pure deterministic math, no I/O. Weights sum to 1.0:
Core 50% | Support 20% | Habit 15% | Effort 10% | Reflection 5%
"""

from alignment_engine.domain.constants import (
    EFFORT_MAX,
    EFFORT_MIN,
    WEIGHT_CORE,
    WEIGHT_EFFORT,
    WEIGHT_HABIT,
    WEIGHT_REFLECTION,
    WEIGHT_SUPPORT,
)
from alignment_engine.domain.rounding import clamp, round_half_up
from alignment_engine.schemas.alignment import ScoreComponents
from alignment_engine.schemas.execution import ExecSummary


def _completion(done: int, total: int) -> float:
    return (done / total) * 100 if total > 0 else 0.0


def calculate_raw_score(summary: ExecSummary, reflection_quality: float = 0) -> tuple[float, ScoreComponents]:
    """Calculate the raw daily alignment score (0-100) before the streak multiplier.

    Pure function. No DB access.

    Args:
        summary: Task counts, habit flag, average effort (1-10) and missed-day flag.
        reflection_quality: Reflection quality score, 0-100.

    Returns:
        Tuple of (raw_score, components)
        - raw_score: weighted sum rounded to 2 decimals, clamped to [0, 100]
        - components: each factor on its 0-100 scale, rounded to 2 decimals

    Edge cases:
        - No core or support tasks: that completion is 0
        - Missed day: effort contributes 0 whatever the recorded average
    """
    core = clamp(_completion(summary.core_tasks_done, summary.core_tasks_total), 0, 100)
    support = clamp(_completion(summary.support_tasks_done, summary.support_tasks_total), 0, 100)
    habit = 100.0 if summary.habit_done else 0.0

    if summary.is_missed_day:
        effort = 0.0
    else:
        effort = clamp((summary.average_effort - EFFORT_MIN) / (EFFORT_MAX - EFFORT_MIN) * 100, 0, 100)

    reflection = clamp(reflection_quality, 0, 100)

    weighted = (
        core * WEIGHT_CORE
        + support * WEIGHT_SUPPORT
        + habit * WEIGHT_HABIT
        + effort * WEIGHT_EFFORT
        + reflection * WEIGHT_REFLECTION
    )
    raw_score = clamp(round_half_up(weighted, 2), 0, 100)

    components = ScoreComponents(
        core_completion=round_half_up(core, 2),
        support_completion=round_half_up(support, 2),
        habit_completion=habit,
        effort_normalized=round_half_up(effort, 2),
        reflection_quality=round_half_up(reflection, 2),
    )
    return (raw_score, components)
