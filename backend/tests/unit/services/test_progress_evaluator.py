"""
Unit tests for the progress fan-out.

Drives the evaluator through SessionService and SetLogger so every event is
produced the way the API produces it.
"""

from datetime import timedelta

import pytest

from liftlog.domain.enums import (
    AchievementCategory,
    ChallengeStatus,
    ChallengeType,
    MuscleGroup,
    RecordType,
)
from liftlog.models import (
    Achievement,
    Challenge,
    ChallengeParticipant,
    UserAchievement,
    UserStats,
    WeeklyMetrics,
)
from liftlog.services.metrics_service import get_week_start
from liftlog.services.challenge_service import ChallengeService
from liftlog.services.progress_evaluator import ProgressEvaluator
from liftlog.services.session_service import SessionService
from liftlog.services.set_logger import SetLogger


@pytest.fixture
def sessions(test_db, clock):
    return SessionService(test_db, clock=clock)


@pytest.fixture
def sets(test_db, clock):
    return SetLogger(test_db, clock=clock)


@pytest.fixture
def add_achievement(test_db):
    def _add(code, category, threshold, **fields):
        achievement = Achievement(code=code, name=code.title(), category=category, threshold=threshold, **fields)
        test_db.add(achievement)
        test_db.commit()
        return achievement

    return _add


@pytest.fixture
def add_challenge(test_db, clock):
    def _add(user_id, challenge_type, target_value, status=ChallengeStatus.ACTIVE, **fields):
        challenge = Challenge(
            creator_id=user_id,
            name=f"{challenge_type.value} challenge",
            challenge_type=challenge_type,
            target_value=target_value,
            status=status,
            start_date=clock() - timedelta(days=1),
            end_date=clock() + timedelta(days=7),
            **fields,
        )
        test_db.add(challenge)
        test_db.flush()
        participant = ChallengeParticipant(
            challenge_id=challenge.challenge_id, user_id=user_id, progress=0.0
        )
        test_db.add(participant)
        test_db.commit()
        return participant

    return _add


def complete_workout(sessions, user_id, clock, sets=None, logs=()):
    session = sessions.start_session(user_id)
    for exercise, fields in logs:
        clock.advance(minutes=3)
        sets.log_set(session.session_id, user_id, exercise.exercise_id, **fields)
    clock.advance(minutes=30)
    return sessions.complete_session(session.session_id, user_id)


class TestSessionAchievements:
    """Achievements evaluated on session completion."""

    def test_third_workout_awards_milestone_once(
        self, test_db, sample_user_id, sessions, clock, add_achievement
    ):
        add_achievement("THREE_WORKOUTS", AchievementCategory.MILESTONE, 3)

        first = complete_workout(sessions, sample_user_id, clock)
        second = complete_workout(sessions, sample_user_id, clock)
        third = complete_workout(sessions, sample_user_id, clock)
        fourth = complete_workout(sessions, sample_user_id, clock)

        assert [len(r.new_achievements) for r in (first, second, third, fourth)] == [0, 0, 1, 0]
        assert third.new_achievements[0].achievement.code == "THREE_WORKOUTS"
        assert test_db.query(UserAchievement).count() == 1

    def test_already_earned_adds_no_row(self, test_db, sample_user_id, sessions, clock, add_achievement):
        achievement = add_achievement("THREE_WORKOUTS", AchievementCategory.MILESTONE, 3)
        complete_workout(sessions, sample_user_id, clock)
        complete_workout(sessions, sample_user_id, clock)
        test_db.add(
            UserAchievement(
                user_id=sample_user_id,
                achievement_id=achievement.achievement_id,
                earned_at=clock() - timedelta(days=30),
            )
        )
        test_db.commit()

        result = complete_workout(sessions, sample_user_id, clock)

        assert result.new_achievements == []
        assert test_db.query(UserAchievement).count() == 1

    def test_multiple_and_hidden_awarded_together(
        self, test_db, sample_user_id, sessions, clock, add_achievement
    ):
        add_achievement("FIRST_WORKOUT", AchievementCategory.MILESTONE, 1)
        add_achievement("SECRET_FIRST", AchievementCategory.MILESTONE, 1, is_hidden=True)
        add_achievement("ONE_WEEK_STREAK", AchievementCategory.STREAK, 1)

        result = complete_workout(sessions, sample_user_id, clock)

        assert {ua.achievement.code for ua in result.new_achievements} == {
            "FIRST_WORKOUT",
            "SECRET_FIRST",
            "ONE_WEEK_STREAK",
        }

    def test_streak_across_weeks(self, test_db, sample_user_id, sessions, clock, add_achievement):
        add_achievement("TWO_WEEK_STREAK", AchievementCategory.STREAK, 2)

        complete_workout(sessions, sample_user_id, clock)
        clock.advance(days=7)
        result = complete_workout(sessions, sample_user_id, clock)

        assert [ua.achievement.code for ua in result.new_achievements] == ["TWO_WEEK_STREAK"]
        stats = test_db.get(UserStats, sample_user_id)
        assert stats.current_streak == 2
        assert stats.longest_streak == 2

    def test_streak_broken_by_empty_week(self, test_db, sample_user_id, sessions, clock):
        complete_workout(sessions, sample_user_id, clock)
        clock.advance(days=14)
        complete_workout(sessions, sample_user_id, clock)

        stats = test_db.get(UserStats, sample_user_id)
        assert stats.current_streak == 1
        assert stats.longest_streak == 1
        assert stats.total_workouts == 2

    def test_consistency_needs_three_in_week(self, test_db, sample_user_id, sessions, clock, add_achievement):
        add_achievement("CONSISTENT", AchievementCategory.CONSISTENCY, 1)

        results = [complete_workout(sessions, sample_user_id, clock) for _ in range(3)]

        assert [len(r.new_achievements) for r in results] == [0, 0, 1]

    def test_set_categories_ignored_on_completion(
        self, test_db, sample_user_id, sessions, clock, add_achievement
    ):
        add_achievement("ANY_VOLUME", AchievementCategory.VOLUME, 0)

        result = complete_workout(sessions, sample_user_id, clock)

        assert result.new_achievements == []


class TestSetAchievements:
    """Achievements evaluated on set logging."""

    def test_volume_and_pr_counts(self, test_db, sample_user_id, bench, sessions, sets, clock, add_achievement):
        add_achievement("TONNE", AchievementCategory.VOLUME, 1000)
        add_achievement("THREE_PRS", AchievementCategory.PERSONAL_RECORD, 3)
        add_achievement("FIRST_WORKOUT", AchievementCategory.MILESTONE, 1)
        session = sessions.start_session(sample_user_id)

        first = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)
        second = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)

        assert [ua.achievement.code for ua in first.new_achievements] == ["THREE_PRS"]
        assert [ua.achievement.code for ua in second.new_achievements] == ["TONNE"]
        stats = test_db.get(UserStats, sample_user_id)
        assert stats.total_sets == 2
        assert stats.total_volume == 1000.0
        assert stats.total_prs == 3
        assert stats.total_workouts == 0

    def test_warmups_do_not_count(self, test_db, sample_user_id, bench, sessions, sets, add_achievement):
        add_achievement("FIRST_SET", AchievementCategory.MUSCLE_FOCUS, 1, muscle_group=MuscleGroup.CHEST)
        session = sessions.start_session(sample_user_id)

        result = sets.log_set(
            session.session_id, sample_user_id, bench.exercise_id, reps=10, weight=40.0, is_warmup=True
        )

        assert result.new_achievements == []
        assert test_db.get(UserStats, sample_user_id).total_sets == 0

    def test_exercise_specific_matches_linked_exercise(
        self, test_db, sample_user_id, bench, pushup, sessions, sets, add_achievement
    ):
        add_achievement(
            "BENCH_100",
            AchievementCategory.EXERCISE_SPECIFIC,
            100,
            exercise_id=bench.exercise_id,
            record_type=RecordType.MAX_WEIGHT,
        )
        add_achievement("PUSHUPS_50", AchievementCategory.EXERCISE_SPECIFIC, 50, exercise_id=pushup.exercise_id)
        session = sessions.start_session(sample_user_id)

        light = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=20, weight=60.0)
        pushups = sets.log_set(session.session_id, sample_user_id, pushup.exercise_id, reps=50)
        heavy = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=1, weight=100.0)

        assert light.new_achievements == []
        assert [ua.achievement.code for ua in pushups.new_achievements] == ["PUSHUPS_50"]
        assert [ua.achievement.code for ua in heavy.new_achievements] == ["BENCH_100"]

    def test_muscle_focus_counts_working_sets(
        self, test_db, sample_user_id, bench, pushup, plank, sessions, sets, add_achievement
    ):
        add_achievement("CHEST_3", AchievementCategory.MUSCLE_FOCUS, 3, muscle_group=MuscleGroup.CHEST)
        session = sessions.start_session(sample_user_id)

        results = [
            sets.log_set(session.session_id, sample_user_id, ex.exercise_id, **fields)
            for ex, fields in [
                (bench, {"reps": 5, "weight": 60.0}),
                (plank, {"time_seconds": 60}),
                (pushup, {"reps": 10}),
                (bench, {"reps": 5, "weight": 60.0}),
            ]
        ]

        assert [len(r.new_achievements) for r in results] == [0, 0, 0, 1]


class TestChallenges:
    """Challenge progress recomputation."""

    def test_total_volume_progress_is_window_sum(
        self, test_db, sample_user_id, bench, sessions, sets, clock, add_challenge, add_workout
    ):
        participant = add_challenge(sample_user_id, ChallengeType.TOTAL_VOLUME, 10000)
        add_workout(sample_user_id, clock() - timedelta(days=3), [{"exercise": bench, "reps": 10, "weight": 100.0}])
        session = sessions.start_session(sample_user_id)

        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=10, weight=40.0, is_warmup=True)
        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)
        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=8, weight=80.0)

        test_db.refresh(participant)
        assert participant.progress == 5 * 100.0 + 8 * 80.0
        assert participant.completed_at is None

        evaluator = ProgressEvaluator(test_db, clock)
        challenge = participant.challenge
        assert evaluator.compute_challenge_progress(challenge, sample_user_id) == participant.progress
        assert evaluator.compute_challenge_progress(challenge, sample_user_id) == participant.progress

    def test_total_sets_completes_once(self, test_db, sample_user_id, bench, sessions, sets, clock, add_challenge):
        participant = add_challenge(sample_user_id, ChallengeType.TOTAL_SETS, 2)
        session = sessions.start_session(sample_user_id)

        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5)
        clock.advance(minutes=2)
        second = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5)
        completed_at = clock()
        clock.advance(minutes=2)
        third = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5)

        test_db.refresh(participant)
        assert len(second.completed_challenges) == 1
        assert third.completed_challenges == []
        assert participant.progress == 3
        assert participant.completed_at == completed_at

    def test_workout_challenges_move_on_completion_only(
        self, test_db, sample_user_id, bench, sessions, sets, clock, add_challenge
    ):
        workouts = add_challenge(sample_user_id, ChallengeType.TOTAL_WORKOUTS, 2)
        streak = add_challenge(sample_user_id, ChallengeType.WORKOUT_STREAK, 1)
        session = sessions.start_session(sample_user_id)
        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5)

        test_db.refresh(workouts)
        assert workouts.progress == 0

        clock.advance(minutes=30)
        result = sessions.complete_session(session.session_id, sample_user_id)

        test_db.refresh(workouts)
        test_db.refresh(streak)
        assert workouts.progress == 1
        assert streak.progress == 1
        assert [p.participant_id for p in result.completed_challenges] == [streak.participant_id]

    def test_specific_exercise_uses_reps_for_bodyweight(
        self, test_db, sample_user_id, bench, pushup, sessions, sets, add_challenge
    ):
        participant = add_challenge(
            sample_user_id, ChallengeType.SPECIFIC_EXERCISE, 100, exercise_id=pushup.exercise_id
        )
        session = sessions.start_session(sample_user_id)

        sets.log_set(session.session_id, sample_user_id, pushup.exercise_id, reps=30)
        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)
        sets.log_set(session.session_id, sample_user_id, pushup.exercise_id, reps=25)

        test_db.refresh(participant)
        assert participant.progress == 55

    def test_closed_and_unopened_challenges_untouched(
        self, test_db, sample_user_id, bench, sessions, sets, clock, add_challenge
    ):
        cancelled = add_challenge(sample_user_id, ChallengeType.TOTAL_SETS, 1, status=ChallengeStatus.CANCELLED)
        later = add_challenge(sample_user_id, ChallengeType.TOTAL_SETS, 1, status=ChallengeStatus.UPCOMING)
        later.challenge.start_date = clock() + timedelta(days=1)
        test_db.commit()
        session = sessions.start_session(sample_user_id)

        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5)

        for participant in (cancelled, later):
            test_db.refresh(participant)
            assert participant.progress == 0
            assert participant.completed_at is None
        assert later.challenge.status == ChallengeStatus.UPCOMING

    def test_upcoming_challenge_counts_once_window_opens(
        self, test_db, sample_user_id, bench, sessions, sets, clock
    ):
        challenge = ChallengeService(test_db, clock=clock).create_challenge(
            sample_user_id,
            "Tonne week",
            ChallengeType.TOTAL_VOLUME,
            100,
            start_date=clock() + timedelta(days=1),
            end_date=clock() + timedelta(days=8),
        )
        assert challenge.status == ChallengeStatus.UPCOMING

        clock.advance(days=2)
        session = sessions.start_session(sample_user_id)
        result = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)

        participant = test_db.query(ChallengeParticipant).filter_by(challenge_id=challenge.challenge_id).one()
        assert participant.progress == 500.0
        assert participant.completed_at == clock()
        assert challenge.status == ChallengeStatus.ACTIVE
        assert [p.participant_id for p in result.completed_challenges] == [participant.participant_id]

    def test_progress_never_decreases(self, test_db, sample_user_id, bench, sessions, sets, add_challenge):
        participant = add_challenge(sample_user_id, ChallengeType.TOTAL_VOLUME, 10000)
        session = sessions.start_session(sample_user_id)
        big = sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)
        sets.delete_set(big.set.set_id, sample_user_id)

        sets.log_set(session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=20.0)

        test_db.refresh(participant)
        assert participant.progress == 500.0


class TestCounters:
    """Materialized counters refreshed in step 1."""

    def test_weekly_metrics_written_on_completion(self, test_db, sample_user_id, bench, sessions, sets, clock):
        complete_workout(
            sessions,
            sample_user_id,
            clock,
            sets=sets,
            logs=[(bench, {"reps": 5, "weight": 100.0}), (bench, {"reps": 5, "weight": 90.0})],
        )

        metrics = (
            test_db.query(WeeklyMetrics)
            .filter(
                WeeklyMetrics.user_id == sample_user_id,
                WeeklyMetrics.week_start == get_week_start(clock()),
            )
            .one()
        )
        assert metrics.total_workouts == 1
        assert metrics.total_volume == 950.0
        assert metrics.exercises_count == 1
