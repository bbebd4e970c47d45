"""
Workout sessions and the sets logged into them.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import relationship
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime
from liftlog.domain.enums import WeightUnit


class WorkoutSession(Base):
    __tablename__ = "workout_sessions"

    session_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=False, index=True)
    plan_id = Column(GUID(), ForeignKey("workout_plans.plan_id", ondelete="SET NULL"), nullable=True)
    plan_day_id = Column(
        GUID(), ForeignKey("plan_days.plan_day_id", ondelete="SET NULL"), nullable=True
    )
    started_at = Column(UTCDateTime(), nullable=False)
    completed_at = Column(UTCDateTime(), nullable=True)  # NULL while active
    duration_seconds = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    mood_rating = Column(Integer, nullable=True)

    sets = relationship(
        "WorkoutSet",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="WorkoutSet.created_at",
    )

    __table_args__ = (
        # At most one active session per user
        Index(
            "uq_workout_sessions_one_active",
            "user_id",
            unique=True,
            postgresql_where=text("completed_at IS NULL"),
            sqlite_where=text("completed_at IS NULL"),
        ),
        Index("idx_workout_sessions_user_completed", "user_id", "completed_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.completed_at is None


class WorkoutSet(Base):
    __tablename__ = "workout_sets"

    set_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        GUID(),
        ForeignKey("workout_sessions.session_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exercise_id = Column(GUID(), ForeignKey("exercises.exercise_id"), nullable=False, index=True)
    set_number = Column(Integer, nullable=False)  # 1-based per (session, exercise)
    reps = Column(Integer, nullable=True)
    time_seconds = Column(Integer, nullable=True)
    weight = Column(Float, nullable=True)
    weight_unit = Column(
        SAEnum(WeightUnit, name="weight_unit", native_enum=False, length=8),
        nullable=False,
        default=WeightUnit.KG,
    )
    rpe = Column(Integer, nullable=True)
    is_warmup = Column(Boolean, default=False, nullable=False)
    is_dropset = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, index=True)

    session = relationship("WorkoutSession", back_populates="sets")
    exercise = relationship("Exercise")

    __table_args__ = (Index("idx_workout_sets_session_exercise", "session_id", "exercise_id"),)
