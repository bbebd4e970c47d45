"""
Materialized derived state maintained by the progress fan-out.
"""

from sqlalchemy import Column, Date, Float, Integer, UniqueConstraint
from sqlalchemy.sql import func
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime


class WeeklyMetrics(Base):
    __tablename__ = "weekly_metrics"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=False, index=True)
    week_start = Column(Date, nullable=False)  # Monday
    total_workouts = Column(Integer, default=0, nullable=False)
    total_volume = Column(Float, default=0.0, nullable=False)  # working sets only
    exercises_count = Column(Integer, default=0, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "week_start", name="uq_weekly_metrics_week"),)


class UserStats(Base):
    """Per-user running counters; current_streak is as of the last completion."""

    __tablename__ = "user_stats"

    user_id = Column(GUID(), primary_key=True)
    total_workouts = Column(Integer, default=0, nullable=False)
    total_sets = Column(Integer, default=0, nullable=False)
    total_volume = Column(Float, default=0.0, nullable=False)
    total_prs = Column(Integer, default=0, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_workout_at = Column(UTCDateTime(), nullable=True)
    updated_at = Column(
        UTCDateTime(), server_default=func.now(), onupdate=func.now(), nullable=False
    )
