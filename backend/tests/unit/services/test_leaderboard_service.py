"""
Unit tests for LeaderboardService.
"""

from datetime import timedelta

import pytest

from liftlog.config import settings
from liftlog.domain.enums import RecordType
from liftlog.models import PersonalRecord
from liftlog.services.leaderboard_service import (
    LeaderboardMetric,
    LeaderboardService,
    TimeRange,
)


@pytest.fixture
def service(test_db, clock):
    return LeaderboardService(test_db, clock=clock)


def add_record(test_db, user_id, exercise, record_type, value, achieved_at):
    test_db.add(
        PersonalRecord(
            user_id=user_id,
            exercise_id=exercise.exercise_id,
            record_type=record_type,
            value=value,
            achieved_at=achieved_at,
        )
    )
    test_db.commit()


class TestVolume:
    def test_ranks_completed_working_volume(
        self, service, sample_user_id, other_user_id, bench, add_workout, clock
    ):
        add_workout(
            sample_user_id,
            clock() - timedelta(days=1),
            [
                {"exercise": bench, "reps": 10, "weight": 50.0, "is_warmup": True},
                {"exercise": bench, "reps": 5, "weight": 100.0},
            ],
        )
        add_workout(other_user_id, clock() - timedelta(days=2), [{"exercise": bench, "reps": 10, "weight": 80.0}])
        add_workout(other_user_id, None, [{"exercise": bench, "reps": 10, "weight": 500.0}])

        entries = service.get_leaderboard(LeaderboardMetric.VOLUME)

        assert [(e.rank, e.user_id, e.value) for e in entries] == [
            (1, other_user_id, 800.0),
            (2, sample_user_id, 500.0),
        ]
        assert entries[0].display_name == "Alex"

    def test_week_window(self, service, sample_user_id, other_user_id, bench, add_workout, clock):
        add_workout(sample_user_id, clock() - timedelta(days=3), [{"exercise": bench, "reps": 5, "weight": 100.0}])
        add_workout(other_user_id, clock() - timedelta(days=20), [{"exercise": bench, "reps": 10, "weight": 80.0}])

        week = service.get_leaderboard(LeaderboardMetric.VOLUME, TimeRange.WEEK)
        month = service.get_leaderboard(LeaderboardMetric.VOLUME, TimeRange.MONTH)

        assert [e.user_id for e in week] == [sample_user_id]
        assert [e.user_id for e in month] == [other_user_id, sample_user_id]


class TestOtherMetrics:
    def test_workouts_ties_are_stable(self, service, sample_user_id, other_user_id, add_workout, clock):
        for user_id in (sample_user_id, other_user_id):
            add_workout(user_id, clock() - timedelta(days=1))

        entries = service.get_leaderboard(LeaderboardMetric.WORKOUTS)

        assert [e.value for e in entries] == [1.0, 1.0]
        assert [str(e.user_id) for e in entries] == sorted([str(sample_user_id), str(other_user_id)])

    def test_streak_ignores_window(self, service, sample_user_id, other_user_id, add_workout, clock):
        for weeks_ago in (0, 1, 2):
            add_workout(sample_user_id, clock() - timedelta(weeks=weeks_ago))
        add_workout(other_user_id, clock() - timedelta(weeks=3))

        entries = service.get_leaderboard(LeaderboardMetric.STREAK, TimeRange.WEEK)

        assert [(e.user_id, e.value) for e in entries] == [(sample_user_id, 3.0)]

    def test_prs_counted_in_window(self, test_db, service, sample_user_id, other_user_id, bench, clock):
        add_record(test_db, sample_user_id, bench, RecordType.MAX_WEIGHT, 100, clock() - timedelta(days=2))
        add_record(test_db, sample_user_id, bench, RecordType.MAX_VOLUME, 500, clock() - timedelta(days=40))
        add_record(test_db, other_user_id, bench, RecordType.MAX_WEIGHT, 80, clock() - timedelta(days=40))

        assert [(e.user_id, e.value) for e in service.get_leaderboard(LeaderboardMetric.PRS, TimeRange.MONTH)] == [
            (sample_user_id, 1.0)
        ]
        assert [e.value for e in service.get_leaderboard(LeaderboardMetric.PRS)] == [2.0, 1.0]


class TestLimits:
    def test_limit_is_clamped(self, service, sample_user_id, other_user_id, add_workout, clock):
        for user_id in (sample_user_id, other_user_id):
            add_workout(user_id, clock() - timedelta(days=1))

        assert len(service.get_leaderboard(LeaderboardMetric.WORKOUTS, limit=0)) == 1
        assert len(service.get_leaderboard(LeaderboardMetric.WORKOUTS, limit=settings.leaderboard_max_size + 5)) == 2

    def test_empty_board(self, service):
        assert service.get_leaderboard(LeaderboardMetric.VOLUME, TimeRange.WEEK) == []
