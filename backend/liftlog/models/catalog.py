"""
Read-only catalog collaborators: exercises, plans and plan days.
"""

from sqlalchemy import Column, Enum as SAEnum, ForeignKey, Integer, String, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime
from liftlog.domain.enums import ExerciseShape, MuscleGroup


class Exercise(Base):
    __tablename__ = "exercises"

    exercise_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True, index=True)
    muscle_group = Column(
        SAEnum(MuscleGroup, name="muscle_group", native_enum=False, length=16),
        nullable=False,
        index=True,
    )
    shape = Column(
        SAEnum(ExerciseShape, name="exercise_shape", native_enum=False, length=16),
        nullable=False,
    )
    created_at = Column(UTCDateTime(), server_default=func.now(), nullable=False)


class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    plan_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(UTCDateTime(), server_default=func.now(), nullable=False)

    days = relationship("PlanDay", back_populates="plan", cascade="all, delete-orphan")


class PlanDay(Base):
    __tablename__ = "plan_days"

    plan_day_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    plan_id = Column(
        GUID(), ForeignKey("workout_plans.plan_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    day_order = Column(Integer, nullable=False, default=1)

    plan = relationship("WorkoutPlan", back_populates="days")
    targets = relationship(
        "PlanExerciseTarget", back_populates="plan_day", cascade="all, delete-orphan"
    )


class PlanExerciseTarget(Base):
    """Default-value hints for an exercise on a plan day; never enforced."""

    __tablename__ = "plan_exercise_targets"

    target_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    plan_day_id = Column(
        GUID(), ForeignKey("plan_days.plan_day_id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id = Column(GUID(), ForeignKey("exercises.exercise_id"), nullable=False)
    exercise_order = Column(Integer, nullable=False, default=1)
    target_sets = Column(Integer, nullable=True)
    target_reps = Column(Integer, nullable=True)
    target_time_seconds = Column(Integer, nullable=True)
    target_weight = Column(Float, nullable=True)

    plan_day = relationship("PlanDay", back_populates="targets")
    exercise = relationship("Exercise")
