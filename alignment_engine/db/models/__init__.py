"""Re-export all models so Base.metadata sees them."""

from alignment_engine.db.models.alignment_metric import AlignmentMetric
from alignment_engine.db.models.daily_execution_log import DailyExecutionLog
from alignment_engine.db.models.journal_entry import JournalEntry

__all__ = [
    "AlignmentMetric",
    "DailyExecutionLog",
    "JournalEntry",
]
