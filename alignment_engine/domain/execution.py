"""Execution log summarisation.

Pure domain functions turning a day's task list into the counts and
percentages the scoring and pattern detectors read.
"""

from collections.abc import Sequence

from alignment_engine.domain.constants import TaskCategory
from alignment_engine.domain.rounding import round_half_up
from alignment_engine.schemas.execution import ExecSummary, ExecutionLogRecord, ExecutionTask


def compute_completions(tasks: Sequence[ExecutionTask]) -> tuple[float, float, float]:
    """Compute core/support completion percentages and average effort.

    Support is every non-core task. Average effort covers completed tasks only.

    Returns:
        Tuple of (core_completion_pct, support_completion_pct, average_effort),
        percentages rounded to whole numbers. All zero for an empty task list.
    """
    if not tasks:
        return (0, 0, 0)

    core = [t for t in tasks if t.category == TaskCategory.CORE]
    support = [t for t in tasks if t.category != TaskCategory.CORE]

    core_pct = round_half_up(sum(t.completed for t in core) / len(core) * 100) if core else 0
    support_pct = round_half_up(sum(t.completed for t in support) / len(support) * 100) if support else 0

    completed = [t for t in tasks if t.completed]
    average_effort = sum(t.effort_score for t in completed) / len(completed) if completed else 0

    return (core_pct, support_pct, average_effort)


def build_exec_summary(log: ExecutionLogRecord) -> ExecSummary:
    """Build the counts consumed by ``calculate_raw_score`` from an execution log."""
    core = [t for t in log.tasks if t.category == TaskCategory.CORE]
    support = [t for t in log.tasks if t.category != TaskCategory.CORE]

    return ExecSummary(
        core_tasks_total=len(core),
        core_tasks_done=sum(1 for t in core if t.completed),
        support_tasks_total=len(support),
        support_tasks_done=sum(1 for t in support if t.completed),
        habit_done=log.identity_habit_done,
        average_effort=log.average_effort,
        is_missed_day=log.is_missed_day,
    )
