"""Create weekly metrics and user stats

Revision ID: 006_create_progress_counters
Revises: 005_create_challenges

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "006_create_progress_counters"
down_revision: Union[str, None] = "005_create_challenges"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "weekly_metrics",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("total_workouts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_volume", sa.Float(), nullable=False, server_default="0"),
        sa.Column("exercises_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "week_start", name="uq_weekly_metrics_week"),
    )
    op.create_index(op.f("ix_weekly_metrics_user_id"), "weekly_metrics", ["user_id"], unique=False)

    op.create_table(
        "user_stats",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("total_workouts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_sets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_volume", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_prs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_workout_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("user_stats")
    op.drop_index(op.f("ix_weekly_metrics_user_id"), table_name="weekly_metrics")
    op.drop_table("weekly_metrics")
