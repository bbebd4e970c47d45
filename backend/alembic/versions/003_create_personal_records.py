"""Create personal records

Revision ID: 003_create_personal_records
Revises: 002_create_sessions_and_sets

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "003_create_personal_records"
down_revision: Union[str, None] = "002_create_sessions_and_sets"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "personal_records",
        sa.Column("record_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("record_type", sa.String(length=16), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("previous_record", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("time_seconds", sa.Integer(), nullable=True),
        sa.Column("achieved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source_set_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.exercise_id"]),
        sa.ForeignKeyConstraint(["source_set_id"], ["workout_sets.set_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("record_id"),
        sa.UniqueConstraint(
            "user_id", "exercise_id", "record_type", name="uq_personal_records_key"
        ),
    )
    op.create_index(
        op.f("ix_personal_records_user_id"), "personal_records", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_personal_records_exercise_id"), "personal_records", ["exercise_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_personal_records_exercise_id"), table_name="personal_records")
    op.drop_index(op.f("ix_personal_records_user_id"), table_name="personal_records")
    op.drop_table("personal_records")
