"""DailyExecutionLog model — one evidence record per user per day."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, UniqueConstraint

from alignment_engine.db.base import Base


class DailyExecutionLog(Base):
    __tablename__ = "daily_execution_logs"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_execution_logs_user_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)  # user's local calendar day

    # [{"name": str, "category": "core"|"support"|"habit", "completed": bool, "effort_score": 0-10}]
    tasks = Column(JSON, nullable=False, default=list)
    identity_habit_done = Column(Boolean, nullable=False, default=False)
    deep_work_minutes = Column(Integer, nullable=False, default=0)
    is_missed_day = Column(Boolean, nullable=False, default=False)

    # Cached from tasks on every upsert
    core_completion_pct = Column(Float, nullable=False, default=0)
    support_completion_pct = Column(Float, nullable=False, default=0)
    average_effort = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
