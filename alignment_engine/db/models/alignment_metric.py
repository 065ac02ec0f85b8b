"""AlignmentMetric model — derived daily alignment ledger.

Written only by the recalculation orchestrator. Recomputing a day overwrites
that day's row in place; no other day is ever touched.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, String, UniqueConstraint

from alignment_engine.db.base import Base


class AlignmentMetric(Base):
    __tablename__ = "alignment_metrics"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_alignment_metrics_user_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    alignment_score = Column(Float, nullable=False, default=0)  # 0-100, after multiplier
    raw_score = Column(Float, nullable=False, default=0)
    streak_multiplier = Column(Float, nullable=False, default=1.0)
    drift_index = Column(Float, nullable=False, default=0)  # -1..1
    seven_day_average = Column(Float, nullable=False, default=0)
    streak_count = Column(Integer, nullable=False, default=0)
    state_level = Column(Integer, nullable=False, default=2)  # 1 diminished, 2 stable, 3 aligned
    pattern_flags = Column(JSON, nullable=False, default=list)
    components = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    # NO updated_at -- recomputing identical evidence must leave the row byte-identical
