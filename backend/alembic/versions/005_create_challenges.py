"""Create challenges and participants

Revision ID: 005_create_challenges
Revises: 004_create_achievements

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "005_create_challenges"
down_revision: Union[str, None] = "004_create_achievements"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "challenges",
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("challenge_type", sa.String(length=24), nullable=False),
        sa.Column("target_value", sa.Float(), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="UPCOMING"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.exercise_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("challenge_id"),
    )
    op.create_index(op.f("ix_challenges_creator_id"), "challenges", ["creator_id"], unique=False)
    op.create_index(op.f("ix_challenges_status"), "challenges", ["status"], unique=False)

    op.create_table(
        "challenge_participants",
        sa.Column("participant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("progress", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["challenge_id"], ["challenges.challenge_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("participant_id"),
        sa.UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participants_key"),
    )
    op.create_index(
        op.f("ix_challenge_participants_challenge_id"),
        "challenge_participants",
        ["challenge_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_challenge_participants_user_id"),
        "challenge_participants",
        ["user_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_challenge_participants_user_id"), table_name="challenge_participants")
    op.drop_index(
        op.f("ix_challenge_participants_challenge_id"), table_name="challenge_participants"
    )
    op.drop_table("challenge_participants")
    op.drop_index(op.f("ix_challenges_status"), table_name="challenges")
    op.drop_index(op.f("ix_challenges_creator_id"), table_name="challenges")
    op.drop_table("challenges")
