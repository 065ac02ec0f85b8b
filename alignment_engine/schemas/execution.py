"""Schemas for execution evidence read by the alignment engine."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from alignment_engine.domain.constants import TaskCategory


class ExecutionTask(BaseModel):
    """One planned task on a day's execution log."""

    name: str = ""
    category: TaskCategory = TaskCategory.SUPPORT
    completed: bool = False
    effort_score: float = Field(default=0, ge=0, le=10)


class ExecutionLogRecord(BaseModel):
    """A user's execution log for one calendar day."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    date: date
    tasks: list[ExecutionTask] = Field(default_factory=list)
    identity_habit_done: bool = False
    deep_work_minutes: int = 0
    is_missed_day: bool = False
    core_completion_pct: float = 0
    support_completion_pct: float = 0
    average_effort: float = 0


class ExecSummary(BaseModel):
    """Counts consumed by the raw score calculation."""

    core_tasks_total: int = 0
    core_tasks_done: int = 0
    support_tasks_total: int = 0
    support_tasks_done: int = 0
    habit_done: bool = False
    average_effort: float = 0
    is_missed_day: bool = False
