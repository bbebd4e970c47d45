from sqlalchemy import (
    Boolean,
    Column,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime
from liftlog.domain.enums import (
    AchievementCategory,
    AchievementRarity,
    MuscleGroup,
    RecordType,
)


class Achievement(Base):
    __tablename__ = "achievements"

    achievement_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    code = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    category = Column(
        SAEnum(AchievementCategory, name="achievement_category", native_enum=False, length=24),
        nullable=False,
        index=True,
    )
    rarity = Column(
        SAEnum(AchievementRarity, name="achievement_rarity", native_enum=False, length=16),
        nullable=False,
        default=AchievementRarity.COMMON,
    )
    icon = Column(String, nullable=False, default="trophy")
    threshold = Column(Float, nullable=False, default=1)
    sort_order = Column(Integer, nullable=False, default=0)
    is_hidden = Column(Boolean, nullable=False, default=False)
    # EXERCISE_SPECIFIC only
    exercise_id = Column(
        GUID(), ForeignKey("exercises.exercise_id", ondelete="SET NULL"), nullable=True, index=True
    )
    record_type = Column(
        SAEnum(RecordType, name="record_type", native_enum=False, length=16), nullable=True
    )
    # MUSCLE_FOCUS only
    muscle_group = Column(
        SAEnum(MuscleGroup, name="muscle_group", native_enum=False, length=16), nullable=True
    )
    created_at = Column(UTCDateTime(), server_default=func.now(), nullable=False)


class UserAchievement(Base):
    """An earned achievement. Created once, never revoked."""

    __tablename__ = "user_achievements"

    user_achievement_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=False, index=True)
    achievement_id = Column(
        GUID(),
        ForeignKey("achievements.achievement_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    earned_at = Column(UTCDateTime(), nullable=False)
    notified = Column(Boolean, nullable=False, default=False)

    achievement = relationship("Achievement")

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_key"),
    )
