"""
Per-user progress reads: totals, streaks and personal records.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from liftlog.models.projections import UserStats
from liftlog.models.records import PersonalRecord
from liftlog.services.aggregates import completion_times
from liftlog.services.metrics_service import calculate_week_streak, get_week_start
from liftlog.services.record_index import PersonalRecordIndex
from liftlog.utils.clock import utcnow


@dataclass
class StatsView:
    user_id: UUID
    total_workouts: int
    total_sets: int
    total_volume: float
    total_prs: int
    current_streak: int
    longest_streak: int
    last_workout_at: Optional[datetime]


class StatsService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.records = PersonalRecordIndex(db)

    def get_user_stats(self, user_id: UUID) -> StatsView:
        """
        Running totals for a user.

        The stored streak is as of the last completion; it is recomputed here
        so a week that closed without a workout reads as a broken streak.
        """
        stats = self.db.get(UserStats, user_id)
        weeks = [get_week_start(ts) for ts in completion_times(self.db, user_id)]
        current_streak = calculate_week_streak(weeks, self.clock())

        if stats is None:
            return StatsView(
                user_id=user_id,
                total_workouts=0,
                total_sets=0,
                total_volume=0.0,
                total_prs=0,
                current_streak=current_streak,
                longest_streak=current_streak,
                last_workout_at=None,
            )
        return StatsView(
            user_id=user_id,
            total_workouts=stats.total_workouts,
            total_sets=stats.total_sets,
            total_volume=stats.total_volume,
            total_prs=stats.total_prs,
            current_streak=current_streak,
            longest_streak=max(stats.longest_streak, current_streak),
            last_workout_at=stats.last_workout_at,
        )

    def get_display_records(self, user_id: UUID) -> List[PersonalRecord]:
        return self.records.display_records(user_id)

    def get_exercise_records(self, user_id: UUID, exercise_id: UUID) -> List[PersonalRecord]:
        records = self.records.records_for_exercise(user_id, exercise_id)
        return sorted(records.values(), key=lambda r: r.record_type.value)
