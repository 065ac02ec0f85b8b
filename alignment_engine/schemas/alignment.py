"""Schemas for the derived alignment ledger."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from alignment_engine.domain.constants import StateLevel


class ScoreComponents(BaseModel):
    """Per-factor breakdown of a raw score, each on a 0-100 scale before weighting."""

    core_completion: float = 0
    support_completion: float = 0
    habit_completion: float = 0
    effort_normalized: float = 0
    reflection_quality: float = 0


class AlignmentMetricRecord(BaseModel):
    """One user's alignment metric for one calendar day."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    date: date
    alignment_score: float = Field(default=0, ge=0, le=100)
    raw_score: float = 0
    streak_multiplier: float = 1.0
    drift_index: float = Field(default=0, ge=-1, le=1)
    seven_day_average: float = 0
    streak_count: int = Field(default=0, ge=0)
    state_level: StateLevel = StateLevel.STABLE
    pattern_flags: list[str] = Field(default_factory=list)
    components: ScoreComponents = Field(default_factory=ScoreComponents)
