"""
Global leaderboards over completed workouts.

Metrics: volume, workouts, streak (current weekly streak) and prs, each over
the last 7 days, the last 30 days, or all time. Streaks ignore the window.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from liftlog.config import settings
from liftlog.domain.enums import ExerciseShape, WeightUnit
from liftlog.domain.shapes import SetValues, set_volume
from liftlog.models.catalog import Exercise
from liftlog.models.records import PersonalRecord
from liftlog.models.user import User
from liftlog.models.workout import WorkoutSession, WorkoutSet
from liftlog.services.metrics_service import calculate_week_streak, get_week_start
from liftlog.utils.clock import utcnow


class LeaderboardMetric(str, Enum):
    VOLUME = "volume"
    WORKOUTS = "workouts"
    STREAK = "streak"
    PRS = "prs"


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


TIME_RANGE_DAYS = {TimeRange.WEEK: 7, TimeRange.MONTH: 30}


@dataclass
class LeaderboardEntry:
    rank: int
    user_id: UUID
    display_name: Optional[str]
    value: float


class LeaderboardService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def get_leaderboard(
        self,
        metric: LeaderboardMetric,
        time_range: TimeRange = TimeRange.ALL,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """Top users for a metric, highest first; users with a zero value are left out."""
        if limit is None:
            limit = settings.leaderboard_default_size
        limit = max(1, min(limit, settings.leaderboard_max_size))
        since = self._since(time_range)

        if metric == LeaderboardMetric.VOLUME:
            values = self._volume_by_user(since)
        elif metric == LeaderboardMetric.WORKOUTS:
            values = self._workouts_by_user(since)
        elif metric == LeaderboardMetric.STREAK:
            values = self._streak_by_user()
        elif metric == LeaderboardMetric.PRS:
            values = self._prs_by_user(since)
        else:
            raise ValueError(f"Unhandled leaderboard metric: {metric!r}")

        ranked = sorted(
            ((user_id, value) for user_id, value in values.items() if value > 0),
            key=lambda item: (-item[1], str(item[0])),
        )[:limit]
        return self._enrich(ranked)

    def _since(self, time_range: TimeRange) -> Optional[datetime]:
        days = TIME_RANGE_DAYS.get(time_range)
        if days is None:
            return None
        return self.clock() - timedelta(days=days)

    def _volume_by_user(self, since: Optional[datetime]) -> Dict[UUID, float]:
        query = (
            self.db.query(
                WorkoutSession.user_id,
                Exercise.shape,
                WorkoutSet.reps,
                WorkoutSet.time_seconds,
                WorkoutSet.weight,
                WorkoutSet.weight_unit,
            )
            .join(WorkoutSet, WorkoutSet.session_id == WorkoutSession.session_id)
            .join(Exercise, WorkoutSet.exercise_id == Exercise.exercise_id)
            .filter(
                WorkoutSession.completed_at.isnot(None),
                WorkoutSet.is_warmup.is_(False),
            )
        )
        if since is not None:
            query = query.filter(WorkoutSession.completed_at >= since)

        totals: Dict[UUID, float] = defaultdict(float)
        for user_id, shape, reps, time_seconds, weight, weight_unit in query.all():
            values = SetValues(
                reps=reps,
                time_seconds=time_seconds,
                weight=weight,
                weight_unit=WeightUnit(weight_unit or WeightUnit.KG),
            )
            totals[user_id] += set_volume(ExerciseShape(shape), values)
        return totals

    def _workouts_by_user(self, since: Optional[datetime]) -> Dict[UUID, float]:
        query = self.db.query(WorkoutSession.user_id, func.count(WorkoutSession.session_id)).filter(
            WorkoutSession.completed_at.isnot(None)
        )
        if since is not None:
            query = query.filter(WorkoutSession.completed_at >= since)
        return {user_id: count for user_id, count in query.group_by(WorkoutSession.user_id).all()}

    def _streak_by_user(self) -> Dict[UUID, float]:
        weeks = defaultdict(set)
        rows = (
            self.db.query(WorkoutSession.user_id, WorkoutSession.completed_at)
            .filter(WorkoutSession.completed_at.isnot(None))
            .all()
        )
        for user_id, completed_at in rows:
            weeks[user_id].add(get_week_start(completed_at))
        today = self.clock()
        return {user_id: calculate_week_streak(w, today) for user_id, w in weeks.items()}

    def _prs_by_user(self, since: Optional[datetime]) -> Dict[UUID, float]:
        query = self.db.query(PersonalRecord.user_id, func.count(PersonalRecord.record_id))
        if since is not None:
            query = query.filter(PersonalRecord.achieved_at >= since)
        return {user_id: count for user_id, count in query.group_by(PersonalRecord.user_id).all()}

    def _enrich(self, ranked) -> List[LeaderboardEntry]:
        user_ids = [user_id for user_id, _ in ranked]
        names = {}
        if user_ids:
            names = {
                u.user_id: u.display_name
                for u in self.db.query(User).filter(User.user_id.in_(user_ids)).all()
            }
        return [
            LeaderboardEntry(
                rank=i + 1, user_id=user_id, display_name=names.get(user_id), value=float(value)
            )
            for i, (user_id, value) in enumerate(ranked)
        ]
