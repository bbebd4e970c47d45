"""Create workout sessions and sets

Revision ID: 002_create_sessions_and_sets
Revises: 001_create_users_and_catalog

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002_create_sessions_and_sets"
down_revision: Union[str, None] = "001_create_users_and_catalog"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "workout_sessions",
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("plan_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("plan_day_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("mood_rating", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["plan_id"], ["workout_plans.plan_id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["plan_day_id"], ["plan_days.plan_day_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("session_id"),
    )
    op.create_index(
        op.f("ix_workout_sessions_user_id"), "workout_sessions", ["user_id"], unique=False
    )
    op.create_index(
        "idx_workout_sessions_user_completed",
        "workout_sessions",
        ["user_id", "completed_at"],
        unique=False,
    )
    # At most one active session per user
    op.create_index(
        "uq_workout_sessions_one_active",
        "workout_sessions",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("completed_at IS NULL"),
    )

    op.create_table(
        "workout_sets",
        sa.Column("set_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("time_seconds", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("weight_unit", sa.String(length=8), nullable=False, server_default="KG"),
        sa.Column("rpe", sa.Integer(), nullable=True),
        sa.Column("is_warmup", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_dropset", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["session_id"], ["workout_sessions.session_id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.exercise_id"]),
        sa.PrimaryKeyConstraint("set_id"),
    )
    op.create_index(op.f("ix_workout_sets_session_id"), "workout_sets", ["session_id"], unique=False)
    op.create_index(op.f("ix_workout_sets_exercise_id"), "workout_sets", ["exercise_id"], unique=False)
    op.create_index(op.f("ix_workout_sets_created_at"), "workout_sets", ["created_at"], unique=False)
    op.create_index(
        "idx_workout_sets_session_exercise",
        "workout_sets",
        ["session_id", "exercise_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_workout_sets_session_exercise", table_name="workout_sets")
    op.drop_index(op.f("ix_workout_sets_created_at"), table_name="workout_sets")
    op.drop_index(op.f("ix_workout_sets_exercise_id"), table_name="workout_sets")
    op.drop_index(op.f("ix_workout_sets_session_id"), table_name="workout_sets")
    op.drop_table("workout_sets")
    op.drop_index("uq_workout_sessions_one_active", table_name="workout_sessions")
    op.drop_index("idx_workout_sessions_user_completed", table_name="workout_sessions")
    op.drop_index(op.f("ix_workout_sessions_user_id"), table_name="workout_sessions")
    op.drop_table("workout_sessions")
