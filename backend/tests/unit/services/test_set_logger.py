"""
Unit tests for SetLogger.

Tests PR detection, set numbering, validation-before-write, deletion and
all-or-nothing behaviour when the fan-out fails.
"""

from uuid import uuid4

import pytest

from liftlog.domain.enums import AchievementCategory, RecordType, WeightUnit
from liftlog.domain.errors import ConflictError, NotFoundError, ValidationError
from liftlog.models import Achievement, PersonalRecord, UserAchievement, UserStats, WorkoutSet
from liftlog.services.progress_evaluator import ProgressEvaluator
from liftlog.services.record_index import PersonalRecordIndex
from liftlog.services.session_service import SessionService
from liftlog.services.set_logger import SetLogger


@pytest.fixture
def active_session(test_db, sample_user_id, clock):
    return SessionService(test_db, clock=clock).start_session(sample_user_id)


@pytest.fixture
def set_logger(test_db, clock):
    return SetLogger(test_db, clock=clock)


class TestPersonalRecords:
    """Tests for PR detection while logging."""

    def test_bench_scenario(self, test_db, sample_user_id, bench, active_session, set_logger):
        """100x5 is a PR, repeating it is not, 110x5 beats 500 with 550."""
        def log(weight):
            return set_logger.log_set(
                active_session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=weight
            )

        first = log(100.0)
        assert first.is_new_pr is True
        assert first.previous_record is None
        assert first.record_type == RecordType.MAX_VOLUME
        assert first.new_record == 500.0

        second = log(100.0)
        assert second.is_new_pr is False

        third = log(110.0)
        assert third.is_new_pr is True
        assert third.previous_record == 500.0
        assert third.new_record == 550.0

        index = PersonalRecordIndex(test_db)
        assert index.get_best_value(sample_user_id, bench.exercise_id, RecordType.MAX_VOLUME) == 550.0
        assert index.get_best_value(sample_user_id, bench.exercise_id, RecordType.MAX_WEIGHT) == 110.0

    def test_all_applicable_types_updated(self, sample_user_id, bench, active_session, set_logger):
        set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)

        result = set_logger.log_set(
            active_session.session_id, sample_user_id, bench.exercise_id, reps=12, weight=40.0
        )

        assert result.is_new_pr is False  # 480 < 500 volume
        assert result.updated_record_types == [RecordType.MAX_REPS]

    def test_increasing_sequence(self, sample_user_id, bench, active_session, set_logger):
        """isNewPR is true exactly on strictly increasing volumes."""
        flags = [
            set_logger.log_set(
                active_session.session_id, sample_user_id, bench.exercise_id, reps=reps, weight=60.0
            ).is_new_pr
            for reps in (5, 6, 6, 8, 7, 8, 9)
        ]
        assert flags == [True, True, False, True, False, False, True]

    def test_warmup_skips_pr_detection(self, test_db, sample_user_id, bench, active_session, set_logger):
        result = set_logger.log_set(
            active_session.session_id,
            sample_user_id,
            bench.exercise_id,
            reps=10,
            weight=200.0,
            is_warmup=True,
        )

        assert result.is_new_pr is False
        assert result.record_type is None
        assert test_db.query(PersonalRecord).count() == 0

    def test_dropset_counts_for_prs(self, sample_user_id, bench, active_session, set_logger):
        result = set_logger.log_set(
            active_session.session_id,
            sample_user_id,
            bench.exercise_id,
            reps=15,
            weight=50.0,
            is_dropset=True,
        )
        assert result.is_new_pr is True

    def test_rep_based_primary_is_reps(self, sample_user_id, pushup, active_session, set_logger):
        first = set_logger.log_set(active_session.session_id, sample_user_id, pushup.exercise_id, reps=20)
        second = set_logger.log_set(active_session.session_id, sample_user_id, pushup.exercise_id, reps=25)

        assert first.record_type == RecordType.MAX_REPS
        assert second.is_new_pr is True
        assert second.previous_record == 20.0

    def test_weighted_pushups_track_load(self, test_db, sample_user_id, pushup, active_session, set_logger):
        set_logger.log_set(active_session.session_id, sample_user_id, pushup.exercise_id, reps=5, weight=20.0)
        result = set_logger.log_set(
            active_session.session_id, sample_user_id, pushup.exercise_id, reps=5, weight=40.0
        )

        assert result.record_type == RecordType.MAX_REPS
        assert result.is_new_pr is False
        assert set(result.updated_record_types) == {RecordType.MAX_WEIGHT, RecordType.MAX_VOLUME}
        index = PersonalRecordIndex(test_db)
        assert index.get_best_value(sample_user_id, pushup.exercise_id, RecordType.MAX_VOLUME) == 200.0
        assert index.get_best_value(sample_user_id, pushup.exercise_id, RecordType.MAX_WEIGHT) == 40.0

    def test_pounds_compare_in_kilograms(self, test_db, sample_user_id, bench, active_session, set_logger):
        set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)
        result = set_logger.log_set(
            active_session.session_id,
            sample_user_id,
            bench.exercise_id,
            reps=5,
            weight=200.0,
            weight_unit=WeightUnit.LBS,
        )

        assert result.is_new_pr is False
        assert result.updated_record_types == []
        stored = test_db.get(WorkoutSet, result.set.set_id)
        assert stored.weight == 200.0
        assert stored.weight_unit == WeightUnit.LBS

    def test_timed_primary_is_time(self, sample_user_id, plank, active_session, set_logger):
        set_logger.log_set(active_session.session_id, sample_user_id, plank.exercise_id, time_seconds=60)
        result = set_logger.log_set(
            active_session.session_id, sample_user_id, plank.exercise_id, time_seconds=45, weight=10.0
        )

        assert result.record_type == RecordType.MAX_TIME
        assert result.is_new_pr is False
        assert set(result.updated_record_types) == {RecordType.MAX_WEIGHT, RecordType.MAX_VOLUME}


class TestSetNumbering:
    """Tests for set_number assignment."""

    def test_numbers_per_exercise(self, sample_user_id, bench, pushup, active_session, set_logger):
        numbers = [
            set_logger.log_set(active_session.session_id, sample_user_id, ex.exercise_id, reps=5).set.set_number
            for ex in (bench, bench, pushup, bench)
        ]
        assert numbers == [1, 2, 1, 3]


class TestPreconditions:
    """Tests for rejected logs: nothing is written."""

    def test_completed_session_conflicts(self, test_db, sample_user_id, bench, active_session, clock, set_logger):
        SessionService(test_db, clock=clock).complete_session(active_session.session_id, sample_user_id)

        with pytest.raises(ConflictError):
            set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5)
        assert test_db.query(WorkoutSet).count() == 0

    def test_unknown_session_not_found(self, test_db, sample_user_id, bench, set_logger):
        with pytest.raises(NotFoundError):
            set_logger.log_set(uuid4(), sample_user_id, bench.exercise_id, reps=5)
        assert test_db.query(WorkoutSet).count() == 0

    def test_other_users_session_not_found(self, test_db, other_user_id, bench, active_session, set_logger):
        with pytest.raises(NotFoundError):
            set_logger.log_set(active_session.session_id, other_user_id, bench.exercise_id, reps=5)
        assert test_db.query(WorkoutSet).count() == 0

    def test_unknown_exercise(self, sample_user_id, active_session, set_logger):
        with pytest.raises(NotFoundError):
            set_logger.log_set(active_session.session_id, sample_user_id, uuid4(), reps=5)

    @pytest.mark.parametrize(
        "fields",
        [
            {"reps": 5, "rpe": 5},
            {"reps": 5, "rpe": 11},
            {"reps": 5, "weight": -10.0},
            {"time_seconds": 30},
            {"reps": 0},
        ],
    )
    def test_invalid_values(self, test_db, sample_user_id, bench, active_session, set_logger, fields):
        with pytest.raises(ValidationError):
            set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, **fields)
        assert test_db.query(WorkoutSet).count() == 0


class TestDeleteSet:
    """Tests for delete_set."""

    def test_delete_keeps_records_and_achievements(
        self, test_db, sample_user_id, bench, active_session, set_logger
    ):
        test_db.add(
            Achievement(
                code="FIRST_PR",
                name="First PR",
                category=AchievementCategory.PERSONAL_RECORD,
                threshold=1,
            )
        )
        test_db.commit()
        result = set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)
        assert len(result.new_achievements) == 1

        set_logger.delete_set(result.set.set_id, sample_user_id)

        assert test_db.query(WorkoutSet).count() == 0
        record = PersonalRecordIndex(test_db).get_record(sample_user_id, bench.exercise_id, RecordType.MAX_VOLUME)
        assert record.value == 500.0
        assert record.source_set_id is None
        assert test_db.query(UserAchievement).count() == 1

    def test_delete_from_completed_session_conflicts(
        self, test_db, sample_user_id, bench, active_session, clock, set_logger
    ):
        result = set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5)
        SessionService(test_db, clock=clock).complete_session(active_session.session_id, sample_user_id)

        with pytest.raises(ConflictError):
            set_logger.delete_set(result.set.set_id, sample_user_id)
        assert test_db.query(WorkoutSet).count() == 1

    def test_delete_other_users_set_not_found(self, sample_user_id, other_user_id, bench, active_session, set_logger):
        result = set_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5)

        with pytest.raises(NotFoundError):
            set_logger.delete_set(result.set.set_id, other_user_id)
        with pytest.raises(NotFoundError):
            set_logger.delete_set(uuid4(), sample_user_id)


class TestAtomicity:
    """A failing fan-out rolls back the set and its records."""

    def test_fan_out_failure_rolls_back_everything(
        self, test_db, sample_user_id, bench, active_session, clock, monkeypatch
    ):
        evaluator = ProgressEvaluator(test_db, clock)

        def explode(event):
            raise RuntimeError("challenge store unavailable")

        monkeypatch.setattr(evaluator, "handle", explode)
        failing_logger = SetLogger(test_db, clock=clock, evaluator=evaluator)

        with pytest.raises(RuntimeError):
            failing_logger.log_set(active_session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0)

        assert test_db.query(WorkoutSet).count() == 0
        assert test_db.query(PersonalRecord).count() == 0
        assert test_db.get(UserStats, sample_user_id) is None

        # The session itself is untouched and still accepts sets
        result = SetLogger(test_db, clock=clock).log_set(
            active_session.session_id, sample_user_id, bench.exercise_id, reps=5, weight=100.0
        )
        assert result.is_new_pr is True
