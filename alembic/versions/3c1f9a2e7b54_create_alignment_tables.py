"""create execution log, alignment metric and journal entry tables

Revision ID: 3c1f9a2e7b54
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1f9a2e7b54"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the evidence tables and the derived alignment ledger."""
    op.create_table(
        "daily_execution_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("tasks", sa.JSON(), nullable=False),
        sa.Column("identity_habit_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deep_work_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_missed_day", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("core_completion_pct", sa.Float(), nullable=False, server_default="0"),
        sa.Column("support_completion_pct", sa.Float(), nullable=False, server_default="0"),
        sa.Column("average_effort", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_execution_logs_user_date"),
    )
    op.create_index(op.f("ix_daily_execution_logs_user_id"), "daily_execution_logs", ["user_id"], unique=False)
    op.create_index(op.f("ix_daily_execution_logs_date"), "daily_execution_logs", ["date"], unique=False)

    op.create_table(
        "alignment_metrics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("alignment_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("raw_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("streak_multiplier", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("drift_index", sa.Float(), nullable=False, server_default="0"),
        sa.Column("seven_day_average", sa.Float(), nullable=False, server_default="0"),
        sa.Column("streak_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("state_level", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("pattern_flags", sa.JSON(), nullable=False),
        sa.Column("components", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "date", name="uq_alignment_metrics_user_date"),
    )
    op.create_index(op.f("ix_alignment_metrics_user_id"), "alignment_metrics", ["user_id"], unique=False)
    op.create_index(op.f("ix_alignment_metrics_date"), "alignment_metrics", ["date"], unique=False)

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("reflection_quality_score", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "date", name="uq_journal_entries_user_date"),
    )
    op.create_index(op.f("ix_journal_entries_user_id"), "journal_entries", ["user_id"], unique=False)


def downgrade() -> None:
    """Drop the alignment tables."""
    op.drop_index(op.f("ix_journal_entries_user_id"), table_name="journal_entries")
    op.drop_table("journal_entries")
    op.drop_index(op.f("ix_alignment_metrics_date"), table_name="alignment_metrics")
    op.drop_index(op.f("ix_alignment_metrics_user_id"), table_name="alignment_metrics")
    op.drop_table("alignment_metrics")
    op.drop_index(op.f("ix_daily_execution_logs_date"), table_name="daily_execution_logs")
    op.drop_index(op.f("ix_daily_execution_logs_user_id"), table_name="daily_execution_logs")
    op.drop_table("daily_execution_logs")
