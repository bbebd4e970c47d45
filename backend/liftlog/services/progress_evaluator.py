"""
Progress fan-out: derived state recomputed after a set is logged or a
session is completed.

Runs synchronously inside the caller's transaction and only flushes. The
steps always run in the same order:

1. recompute the counters the event can move (UserStats, WeeklyMetrics)
2. award achievements whose category the event can move and whose
   threshold is now met
3. recompute progress of the user's ACTIVE challenges of matching type

If any step raises, the caller's unit of work rolls everything back,
including the set or session write that triggered the event.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from liftlog.domain.enums import (
    AchievementCategory,
    ChallengeStatus,
    ChallengeType,
    ExerciseShape,
    MuscleGroup,
    RecordType,
)
from liftlog.domain.events import (
    EVENT_ACHIEVEMENT_CATEGORIES,
    EVENT_CHALLENGE_TYPES,
    EngineEvent,
    EventType,
    SetLoggedEvent,
)
from liftlog.domain.shapes import primary_record_type
from liftlog.models.achievements import Achievement, UserAchievement
from liftlog.models.catalog import Exercise
from liftlog.models.challenges import Challenge, ChallengeParticipant
from liftlog.models.projections import UserStats
from liftlog.services.aggregates import (
    WorkingSet,
    completion_times,
    count_completed_sessions,
    total_volume,
    working_sets,
)
from liftlog.services.metrics_service import (
    MetricsService,
    calculate_week_streak,
    consistency_streak,
    get_week_start,
    longest_week_run,
    trailing_week_run,
)
from liftlog.services.record_index import PersonalRecordIndex
from liftlog.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ProgressCounters:
    """Counters recomputed in step 1; only the ones the event moves are set."""

    total_workouts: Optional[int] = None
    current_streak: Optional[int] = None
    consistency_weeks: Optional[int] = None
    total_sets: Optional[int] = None
    total_volume: Optional[float] = None
    total_prs: Optional[int] = None
    muscle_group_sets: Dict[MuscleGroup, int] = field(default_factory=dict)
    exercise_records: Dict[RecordType, float] = field(default_factory=dict)
    exercise_shape: Optional[ExerciseShape] = None


@dataclass
class FanOutResult:
    """What one event changed, returned to the caller for celebration UI."""

    counters: ProgressCounters
    new_achievements: List[UserAchievement] = field(default_factory=list)
    updated_participants: List[ChallengeParticipant] = field(default_factory=list)
    completed_challenges: List[ChallengeParticipant] = field(default_factory=list)


class ProgressEvaluator:
    """Applies one engine event to achievements, challenges and counters."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.records = PersonalRecordIndex(db)
        self.metrics = MetricsService(db)

    def handle(self, event: EngineEvent) -> FanOutResult:
        now = self.clock()
        counters = self._recompute_counters(event, now)
        result = FanOutResult(counters=counters)
        result.new_achievements = self._award_achievements(event, counters, now)
        self._update_challenges(event, now, result)
        self.db.flush()

        logger.info(
            f"[FANOUT] {event.event_type.value} user={event.user_id}: "
            f"{len(result.new_achievements)} achievement(s), "
            f"{len(result.updated_participants)} challenge update(s)"
        )
        return result

    # Step 1: counters

    def _recompute_counters(self, event: EngineEvent, now: datetime) -> ProgressCounters:
        stats = self._get_or_create_stats(event.user_id)
        counters = ProgressCounters()

        if event.event_type == EventType.SET_LOGGED:
            sets = working_sets(self.db, event.user_id)
            counters.total_sets = len(sets)
            counters.total_volume = total_volume(sets)
            counters.total_prs = self.records.count_records(event.user_id)
            counters.muscle_group_sets = dict(Counter(s.muscle_group for s in sets))
            counters.exercise_records = {
                rt: record.value
                for rt, record in self.records.records_for_exercise(
                    event.user_id, event.exercise_id
                ).items()
            }
            exercise = self.db.get(Exercise, event.exercise_id)
            counters.exercise_shape = ExerciseShape(exercise.shape) if exercise else None

            stats.total_sets = counters.total_sets
            stats.total_volume = counters.total_volume
            stats.total_prs = counters.total_prs

        elif event.event_type == EventType.SESSION_COMPLETED:
            completed = completion_times(self.db, event.user_id)
            weeks = [get_week_start(ts) for ts in completed]
            counters.total_workouts = len(completed)
            counters.current_streak = calculate_week_streak(weeks, now)
            counters.consistency_weeks = consistency_streak(completed, now)

            stats.total_workouts = counters.total_workouts
            stats.current_streak = counters.current_streak
            stats.longest_streak = max(stats.longest_streak or 0, longest_week_run(weeks))
            stats.last_workout_at = completed[0] if completed else None

            self.metrics.calculate_weekly_metrics(event.user_id, get_week_start(event.occurred_at))

        else:
            raise ValueError(f"Unhandled event type: {event.event_type!r}")

        self.db.flush()
        return counters

    def _get_or_create_stats(self, user_id: UUID) -> UserStats:
        stats = self.db.get(UserStats, user_id)
        if stats is None:
            stats = UserStats(
                user_id=user_id,
                total_workouts=0,
                total_sets=0,
                total_volume=0.0,
                total_prs=0,
                current_streak=0,
                longest_streak=0,
            )
            self.db.add(stats)
        return stats

    # Step 2: achievements

    def _award_achievements(
        self, event: EngineEvent, counters: ProgressCounters, now: datetime
    ) -> List[UserAchievement]:
        categories = EVENT_ACHIEVEMENT_CATEGORIES[event.event_type]
        candidates = (
            self.db.query(Achievement)
            .filter(Achievement.category.in_(list(categories)))
            .order_by(Achievement.sort_order, Achievement.code)
            .all()
        )
        if not candidates:
            return []

        earned_ids = {
            row[0]
            for row in self.db.query(UserAchievement.achievement_id)
            .filter(UserAchievement.user_id == event.user_id)
            .all()
        }

        awarded = []
        for achievement in candidates:
            if achievement.achievement_id in earned_ids:
                continue
            if not self._threshold_met(achievement, event, counters):
                continue

            user_achievement = UserAchievement(
                user_id=event.user_id,
                achievement_id=achievement.achievement_id,
                earned_at=now,
                notified=False,
            )
            self.db.add(user_achievement)
            user_achievement.achievement = achievement
            awarded.append(user_achievement)
            logger.info(f"[ACHIEVEMENT] user={event.user_id} earned {achievement.code}")

        if awarded:
            self.db.flush()
        return awarded

    def _threshold_met(
        self, achievement: Achievement, event: EngineEvent, counters: ProgressCounters
    ) -> bool:
        category = AchievementCategory(achievement.category)
        threshold = achievement.threshold

        if category == AchievementCategory.MILESTONE:
            return (counters.total_workouts or 0) >= threshold
        if category == AchievementCategory.STREAK:
            return (counters.current_streak or 0) >= threshold
        if category == AchievementCategory.CONSISTENCY:
            return (counters.consistency_weeks or 0) >= threshold
        if category == AchievementCategory.PERSONAL_RECORD:
            return (counters.total_prs or 0) >= threshold
        if category == AchievementCategory.VOLUME:
            return (counters.total_volume or 0) >= threshold
        if category == AchievementCategory.MUSCLE_FOCUS:
            if achievement.muscle_group is None:
                return False
            muscle = MuscleGroup(achievement.muscle_group)
            return counters.muscle_group_sets.get(muscle, 0) >= threshold
        if category == AchievementCategory.EXERCISE_SPECIFIC:
            if not isinstance(event, SetLoggedEvent):
                return False
            if achievement.exercise_id != event.exercise_id or counters.exercise_shape is None:
                return False
            record_type = (
                RecordType(achievement.record_type)
                if achievement.record_type
                else primary_record_type(counters.exercise_shape)
            )
            return counters.exercise_records.get(record_type, 0) >= threshold

        raise ValueError(f"Unhandled achievement category: {category!r}")

    # Step 3: challenges

    def _update_challenges(self, event: EngineEvent, now: datetime, result: FanOutResult) -> None:
        challenge_types = EVENT_CHALLENGE_TYPES[event.event_type]
        participations = (
            self.db.query(ChallengeParticipant)
            .join(Challenge, ChallengeParticipant.challenge_id == Challenge.challenge_id)
            .filter(
                ChallengeParticipant.user_id == event.user_id,
                Challenge.status.in_([ChallengeStatus.ACTIVE, ChallengeStatus.UPCOMING]),
                Challenge.start_date <= now,
                Challenge.challenge_type.in_(list(challenge_types)),
            )
            .order_by(Challenge.start_date, Challenge.challenge_id)
            .with_for_update(of=ChallengeParticipant)
            .all()
        )

        for participant in participations:
            challenge = participant.challenge
            # UPCOMING only means the window had not opened at creation time.
            if ChallengeStatus(challenge.status) == ChallengeStatus.UPCOMING:
                challenge.status = ChallengeStatus.ACTIVE
                logger.info(f"[CHALLENGE] challenge={challenge.challenge_id} is now active")
            if (
                ChallengeType(challenge.challenge_type) == ChallengeType.SPECIFIC_EXERCISE
                and isinstance(event, SetLoggedEvent)
                and challenge.exercise_id != event.exercise_id
            ):
                continue

            progress = self.compute_challenge_progress(challenge, event.user_id)
            if progress > (participant.progress or 0):
                participant.progress = progress
                result.updated_participants.append(participant)

            if participant.completed_at is None and participant.progress >= challenge.target_value:
                participant.completed_at = now
                result.completed_challenges.append(participant)
                logger.info(
                    f"[CHALLENGE] user={event.user_id} completed challenge={challenge.challenge_id}"
                )

    def compute_challenge_progress(self, challenge: Challenge, user_id: UUID) -> float:
        """
        Aggregate the challenge metric over its [start_date, end_date] window.

        Pure read; calling it twice yields the same value.
        """
        start, end = challenge.start_date, challenge.end_date
        challenge_type = ChallengeType(challenge.challenge_type)

        if challenge_type == ChallengeType.TOTAL_WORKOUTS:
            return float(count_completed_sessions(self.db, user_id, start, end))
        if challenge_type == ChallengeType.WORKOUT_STREAK:
            times = completion_times(self.db, user_id, start, end)
            return float(trailing_week_run(get_week_start(ts) for ts in times))
        if challenge_type == ChallengeType.TOTAL_VOLUME:
            return total_volume(working_sets(self.db, user_id, start, end))
        if challenge_type == ChallengeType.TOTAL_SETS:
            return float(len(working_sets(self.db, user_id, start, end)))
        if challenge_type == ChallengeType.SPECIFIC_EXERCISE:
            if challenge.exercise_id is None:
                return 0.0
            sets = working_sets(self.db, user_id, start, end, exercise_id=challenge.exercise_id)
            return sum(_exercise_work(s) for s in sets)

        raise ValueError(f"Unhandled challenge type: {challenge_type!r}")


def _exercise_work(s: WorkingSet) -> float:
    """Per-exercise challenge contribution: volume, or reps / seconds when unloaded."""
    if s.shape == ExerciseShape.REP_AND_WEIGHT:
        return s.volume
    if s.shape == ExerciseShape.REP_BASED:
        return s.volume if s.values.load > 0 else float(s.values.reps or 0)
    if s.shape == ExerciseShape.TIMED:
        return s.volume if s.values.load > 0 else float(s.values.time_seconds or 0)
    raise ValueError(f"Unhandled exercise shape: {s.shape!r}")
