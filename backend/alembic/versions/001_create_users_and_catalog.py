"""Create users, exercise catalog and workout plans

Revision ID: 001_create_users_and_catalog
Revises:

"""

from typing import Sequence, Union
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_users_and_catalog"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table (rows owned by the identity service)
    op.create_table(
        "users",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Exercises table
    op.create_table(
        "exercises",
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("muscle_group", sa.String(length=16), nullable=False),
        sa.Column("shape", sa.String(length=16), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("exercise_id"),
    )
    op.create_index(op.f("ix_exercises_name"), "exercises", ["name"], unique=True)
    op.create_index(op.f("ix_exercises_muscle_group"), "exercises", ["muscle_group"], unique=False)

    # Plans and plan days
    op.create_table(
        "workout_plans",
        sa.Column("plan_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("plan_id"),
    )
    op.create_index(op.f("ix_workout_plans_user_id"), "workout_plans", ["user_id"], unique=False)

    op.create_table(
        "plan_days",
        sa.Column("plan_day_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("plan_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("day_order", sa.Integer(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(["plan_id"], ["workout_plans.plan_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("plan_day_id"),
    )
    op.create_index(op.f("ix_plan_days_plan_id"), "plan_days", ["plan_id"], unique=False)

    op.create_table(
        "plan_exercise_targets",
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("plan_day_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_order", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("target_sets", sa.Integer(), nullable=True),
        sa.Column("target_reps", sa.Integer(), nullable=True),
        sa.Column("target_time_seconds", sa.Integer(), nullable=True),
        sa.Column("target_weight", sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(["plan_day_id"], ["plan_days.plan_day_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.exercise_id"]),
        sa.PrimaryKeyConstraint("target_id"),
    )
    op.create_index(
        op.f("ix_plan_exercise_targets_plan_day_id"),
        "plan_exercise_targets",
        ["plan_day_id"],
        unique=False,
    )

    # Seed exercises with fixed UUIDs for consistency
    exercises_data = [
        # Chest
        (uuid.UUID("00000000-0000-0000-0000-000000000001"), "Bench Press", "CHEST", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000002"), "Incline Bench Press", "CHEST", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000003"), "Dumbbell Flyes", "CHEST", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000004"), "Push-ups", "CHEST", "REP_BASED"),
        # Back
        (uuid.UUID("00000000-0000-0000-0000-000000000005"), "Deadlift", "BACK", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000006"), "Pull-ups", "BACK", "REP_BASED"),
        (uuid.UUID("00000000-0000-0000-0000-000000000007"), "Barbell Row", "BACK", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000008"), "Lat Pulldown", "BACK", "REP_AND_WEIGHT"),
        # Legs
        (uuid.UUID("00000000-0000-0000-0000-000000000009"), "Squat", "LEGS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-00000000000a"), "Leg Press", "LEGS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-00000000000b"), "Romanian Deadlift", "LEGS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-00000000000c"), "Lunges", "LEGS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-00000000000d"), "Wall Sit", "LEGS", "TIMED"),
        # Shoulders
        (uuid.UUID("00000000-0000-0000-0000-00000000000e"), "Overhead Press", "SHOULDERS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-00000000000f"), "Lateral Raises", "SHOULDERS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000010"), "Pike Push-ups", "SHOULDERS", "REP_BASED"),
        # Arms
        (uuid.UUID("00000000-0000-0000-0000-000000000011"), "Bicep Curls", "ARMS", "REP_AND_WEIGHT"),
        (uuid.UUID("00000000-0000-0000-0000-000000000012"), "Tricep Dips", "ARMS", "REP_BASED"),
        (uuid.UUID("00000000-0000-0000-0000-000000000013"), "Tricep Pushdowns", "ARMS", "REP_AND_WEIGHT"),
        # Core
        (uuid.UUID("00000000-0000-0000-0000-000000000014"), "Plank", "CORE", "TIMED"),
        (uuid.UUID("00000000-0000-0000-0000-000000000015"), "Hanging Leg Raises", "CORE", "REP_BASED"),
        (uuid.UUID("00000000-0000-0000-0000-000000000016"), "Cable Crunches", "CORE", "REP_AND_WEIGHT"),
        # Cardio and full body
        (uuid.UUID("00000000-0000-0000-0000-000000000017"), "Rowing Machine", "CARDIO", "TIMED"),
        (uuid.UUID("00000000-0000-0000-0000-000000000018"), "Burpees", "FULL_BODY", "REP_BASED"),
        (uuid.UUID("00000000-0000-0000-0000-000000000019"), "Farmer's Carry", "FULL_BODY", "TIMED"),
    ]

    connection = op.get_bind()
    for exercise_id, name, muscle_group, shape in exercises_data:
        connection.execute(
            sa.text(
                """
                INSERT INTO exercises (exercise_id, name, muscle_group, shape, created_at)
                VALUES (:exercise_id, :name, :muscle_group, :shape, now())
                """
            ),
            {
                "exercise_id": str(exercise_id),
                "name": name,
                "muscle_group": muscle_group,
                "shape": shape,
            },
        )


def downgrade() -> None:
    op.drop_index(op.f("ix_plan_exercise_targets_plan_day_id"), table_name="plan_exercise_targets")
    op.drop_table("plan_exercise_targets")
    op.drop_index(op.f("ix_plan_days_plan_id"), table_name="plan_days")
    op.drop_table("plan_days")
    op.drop_index(op.f("ix_workout_plans_user_id"), table_name="workout_plans")
    op.drop_table("workout_plans")
    op.drop_index(op.f("ix_exercises_muscle_group"), table_name="exercises")
    op.drop_index(op.f("ix_exercises_name"), table_name="exercises")
    op.drop_table("exercises")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
