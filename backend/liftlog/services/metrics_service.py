"""
Weekly metrics and streak arithmetic.

Weeks start on Monday (UTC). A streak is the number of consecutive weeks,
walking backward from the most recent week with a completed session, that
each contain at least one completed session.
"""

from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.orm import Session

from liftlog.models.projections import WeeklyMetrics
from liftlog.models.workout import WorkoutSession
from liftlog.services.aggregates import completion_times, total_volume, working_sets

ONE_WEEK = timedelta(days=7)
CONSISTENCY_WORKOUTS_PER_WEEK = 3


def get_week_start(dt) -> date:
    """Get the Monday of the week for a given date or datetime."""
    if isinstance(dt, datetime):
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        dt = dt.date()
    return dt - timedelta(days=dt.weekday())


def _run_from(weeks: set, anchor: date) -> int:
    streak = 0
    expected = anchor
    while expected in weeks:
        streak += 1
        expected -= ONE_WEEK
    return streak


def calculate_week_streak(week_starts: Iterable[date], today) -> int:
    """
    Current streak as of `today`.

    The run must reach the current or the previous week; once a week closes
    with no session the streak reads as 0.
    """
    weeks = set(week_starts)
    if not weeks:
        return 0

    current_week = get_week_start(today)
    latest = max(weeks)
    if latest < current_week - ONE_WEEK:
        return 0
    return _run_from(weeks, min(latest, current_week))


def trailing_week_run(week_starts: Iterable[date]) -> int:
    """Consecutive weeks ending at the latest week present, regardless of today."""
    weeks = set(week_starts)
    if not weeks:
        return 0
    return _run_from(weeks, max(weeks))


def longest_week_run(week_starts: Iterable[date]) -> int:
    weeks = set(week_starts)
    longest = 0
    for week in weeks:
        if week - ONE_WEEK in weeks:
            continue  # not the start of a run
        length = 0
        while week + length * ONE_WEEK in weeks:
            length += 1
        longest = max(longest, length)
    return longest


def consistency_streak(completed_at: Iterable[datetime], today) -> int:
    """Current streak of weeks holding at least three completed sessions."""
    per_week = Counter(get_week_start(ts) for ts in completed_at)
    qualifying = [w for w, n in per_week.items() if n >= CONSISTENCY_WORKOUTS_PER_WEEK]
    return calculate_week_streak(qualifying, today)


class MetricsService:
    """Service for calculating and storing weekly metrics."""

    def __init__(self, db: Session):
        self.db = db

    def calculate_weekly_metrics(self, user_id: UUID, week_start: date) -> WeeklyMetrics:
        """
        Calculate weekly metrics for a user and week.

        Flushes but does not commit; callers own the transaction.

        Args:
            user_id: User ID
            week_start: Monday date of the week

        Returns:
            WeeklyMetrics object (created or updated)
        """
        start = datetime.combine(week_start, datetime.min.time(), tzinfo=timezone.utc)
        end = start + ONE_WEEK

        session_ids = [
            row[0]
            for row in self.db.query(WorkoutSession.session_id)
            .filter(
                and_(
                    WorkoutSession.user_id == user_id,
                    WorkoutSession.completed_at >= start,
                    WorkoutSession.completed_at < end,
                )
            )
            .all()
        ]
        sets = working_sets(self.db, user_id, session_ids=session_ids)

        metrics = (
            self.db.query(WeeklyMetrics)
            .filter(
                and_(
                    WeeklyMetrics.user_id == user_id,
                    WeeklyMetrics.week_start == week_start,
                )
            )
            .first()
        )
        if metrics is None:
            metrics = WeeklyMetrics(user_id=user_id, week_start=week_start)
            self.db.add(metrics)

        metrics.total_workouts = len(session_ids)
        metrics.total_volume = total_volume(sets)
        metrics.exercises_count = len({s.exercise_id for s in sets})

        self.db.flush()
        return metrics

    def rebuild_weekly_metrics(self, user_id: UUID) -> int:
        """
        Recalculate every week in which the user completed a session.

        Returns:
            Number of weeks rebuilt
        """
        weeks = {get_week_start(ts) for ts in completion_times(self.db, user_id)}
        for week_start in sorted(weeks):
            self.calculate_weekly_metrics(user_id, week_start)
        return len(weeks)

    def get_weekly_metrics(
        self, user_id: UUID, week_start: Optional[date] = None
    ) -> Optional[WeeklyMetrics]:
        """
        Get weekly metrics for a user.

        Args:
            user_id: User ID
            week_start: Monday date of the week (defaults to current week)

        Returns:
            WeeklyMetrics or None if not found
        """
        if week_start is None:
            week_start = get_week_start(datetime.now(timezone.utc))

        return (
            self.db.query(WeeklyMetrics)
            .filter(
                and_(
                    WeeklyMetrics.user_id == user_id,
                    WeeklyMetrics.week_start == week_start,
                )
            )
            .first()
        )
