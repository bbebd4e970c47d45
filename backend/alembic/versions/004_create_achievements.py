"""Create achievement catalog and earned achievements

Revision ID: 004_create_achievements
Revises: 003_create_personal_records

"""

from typing import Sequence, Union
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "004_create_achievements"
down_revision: Union[str, None] = "003_create_personal_records"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "achievements",
        sa.Column("achievement_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=24), nullable=False),
        sa.Column("rarity", sa.String(length=16), nullable=False, server_default="COMMON"),
        sa.Column("icon", sa.String(), nullable=False, server_default="trophy"),
        sa.Column("threshold", sa.Float(), nullable=False, server_default="1"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_hidden", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("record_type", sa.String(length=16), nullable=True),
        sa.Column("muscle_group", sa.String(length=16), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.exercise_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("achievement_id"),
    )
    op.create_index(op.f("ix_achievements_code"), "achievements", ["code"], unique=True)
    op.create_index(op.f("ix_achievements_category"), "achievements", ["category"], unique=False)
    op.create_index(op.f("ix_achievements_exercise_id"), "achievements", ["exercise_id"], unique=False)

    op.create_table(
        "user_achievements",
        sa.Column("user_achievement_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("achievement_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notified", sa.Boolean(), nullable=False, server_default="false"),
        sa.ForeignKeyConstraint(
            ["achievement_id"], ["achievements.achievement_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("user_achievement_id"),
        sa.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_key"),
    )
    op.create_index(
        op.f("ix_user_achievements_user_id"), "user_achievements", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_user_achievements_achievement_id"),
        "user_achievements",
        ["achievement_id"],
        unique=False,
    )

    # Seed the starter catalog
    achievements_data = [
        ("FIRST_WORKOUT", "First Steps", "Complete your first workout", "MILESTONE", "COMMON", 1, 10),
        ("TEN_WORKOUTS", "Getting Serious", "Complete 10 workouts", "MILESTONE", "UNCOMMON", 10, 11),
        ("FIFTY_WORKOUTS", "Dedicated", "Complete 50 workouts", "MILESTONE", "RARE", 50, 12),
        ("HUNDRED_WORKOUTS", "Centurion", "Complete 100 workouts", "MILESTONE", "EPIC", 100, 13),
        ("STREAK_4_WEEKS", "On a Roll", "Train every week for 4 weeks", "STREAK", "UNCOMMON", 4, 20),
        ("STREAK_12_WEEKS", "Unstoppable", "Train every week for 12 weeks", "STREAK", "EPIC", 12, 21),
        ("CONSISTENT_4_WEEKS", "Creature of Habit", "Three workouts a week for 4 weeks", "CONSISTENCY", "RARE", 4, 30),
        ("FIRST_PR", "Personal Best", "Set your first personal record", "PERSONAL_RECORD", "COMMON", 1, 40),
        ("TWENTY_FIVE_PRS", "Record Breaker", "Hold 25 personal records", "PERSONAL_RECORD", "RARE", 25, 41),
        ("VOLUME_10K", "Ten Tonnes", "Move 10,000 kg in working sets", "VOLUME", "UNCOMMON", 10000, 50),
        ("VOLUME_100K", "Heavy Lifter", "Move 100,000 kg in working sets", "VOLUME", "EPIC", 100000, 51),
        ("VOLUME_1M", "Atlas", "Move 1,000,000 kg in working sets", "VOLUME", "LEGENDARY", 1000000, 52),
    ]

    connection = op.get_bind()
    for code, name, description, category, rarity, threshold, sort_order in achievements_data:
        connection.execute(
            sa.text(
                """
                INSERT INTO achievements
                    (achievement_id, code, name, description, category, rarity, threshold, sort_order)
                VALUES
                    (:achievement_id, :code, :name, :description, :category, :rarity, :threshold, :sort_order)
                """
            ),
            {
                "achievement_id": str(uuid.uuid5(uuid.NAMESPACE_URL, f"liftlog:achievement:{code}")),
                "code": code,
                "name": name,
                "description": description,
                "category": category,
                "rarity": rarity,
                "threshold": threshold,
                "sort_order": sort_order,
            },
        )


def downgrade() -> None:
    op.drop_index(op.f("ix_user_achievements_achievement_id"), table_name="user_achievements")
    op.drop_index(op.f("ix_user_achievements_user_id"), table_name="user_achievements")
    op.drop_table("user_achievements")
    op.drop_index(op.f("ix_achievements_exercise_id"), table_name="achievements")
    op.drop_index(op.f("ix_achievements_category"), table_name="achievements")
    op.drop_index(op.f("ix_achievements_code"), table_name="achievements")
    op.drop_table("achievements")
