"""Alignment job schemas."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field


class TriggerReason(str, Enum):
    """Why a recalculation was requested. Informational only, never changes the math."""

    TASK_COMPLETE = "task_complete"
    REFLECTION_DONE = "reflection_done"
    MISSED_DAY = "missed_day"
    ADMIN_CALIBRATE = "admin_calibrate"


class AlignmentJob(BaseModel):
    """One recalculation request as carried on the queue."""

    job_id: str
    user_id: str
    date: date
    trigger_reason: TriggerReason = TriggerReason.TASK_COMPLETE
    attempts: int = Field(default=0, ge=0)
