"""
Set Logger / PR Engine.

Appends a set to the caller's active session, detects personal records for
every record type the exercise shape supports, and runs the set-level
fan-out, all in one transaction. Input is validated completely before the
first write.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from liftlog.db.transaction import unit_of_work
from liftlog.domain.enums import ExerciseShape, RecordType, WeightUnit
from liftlog.domain.errors import ConflictError, NotFoundError
from liftlog.domain.events import SetLoggedEvent
from liftlog.domain.sets import parse_set_input, validate_set_for_shape
from liftlog.domain.shapes import primary_record_type, record_candidates
from liftlog.models.achievements import UserAchievement
from liftlog.models.catalog import Exercise
from liftlog.models.challenges import ChallengeParticipant
from liftlog.models.workout import WorkoutSession, WorkoutSet
from liftlog.services.progress_evaluator import ProgressEvaluator
from liftlog.services.record_index import PersonalRecordIndex
from liftlog.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class LogSetResult:
    """
    Outcome of logging one set.

    is_new_pr / previous_record / new_record describe the exercise's primary
    record type only; updated_record_types lists every type that moved.
    """

    set: WorkoutSet
    is_new_pr: bool = False
    record_type: Optional[RecordType] = None
    previous_record: Optional[float] = None
    new_record: Optional[float] = None
    updated_record_types: List[RecordType] = field(default_factory=list)
    new_achievements: List[UserAchievement] = field(default_factory=list)
    completed_challenges: List[ChallengeParticipant] = field(default_factory=list)


class SetLogger:
    """Logs and deletes sets inside active sessions."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utcnow,
        evaluator: Optional[ProgressEvaluator] = None,
    ):
        self.db = db
        self.clock = clock
        self.records = PersonalRecordIndex(db)
        self.evaluator = evaluator or ProgressEvaluator(db, clock)

    def log_set(
        self,
        session_id: UUID,
        user_id: UUID,
        exercise_id: UUID,
        reps: Optional[int] = None,
        time_seconds: Optional[int] = None,
        weight: Optional[float] = None,
        weight_unit: WeightUnit = WeightUnit.KG,
        rpe: Optional[int] = None,
        is_warmup: bool = False,
        is_dropset: bool = False,
        notes: Optional[str] = None,
    ) -> LogSetResult:
        """
        Log a set and detect personal records.

        Raises:
            ValidationError: If the values do not fit the exercise shape or are out of range
            NotFoundError: If the exercise or session is unknown, or the session is not the user's
            ConflictError: If the session is already completed
        """
        set_input = parse_set_input(
            reps=reps,
            time_seconds=time_seconds,
            weight=weight,
            weight_unit=weight_unit,
            rpe=rpe,
            is_warmup=is_warmup,
            is_dropset=is_dropset,
            notes=notes,
        )
        exercise = self.db.get(Exercise, exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)
        shape = ExerciseShape(exercise.shape)
        validate_set_for_shape(shape, set_input)

        with unit_of_work(self.db):
            session = (
                self.db.query(WorkoutSession)
                .filter(WorkoutSession.session_id == session_id)
                .with_for_update()
                .first()
            )
            if session is None or session.user_id != user_id:
                raise NotFoundError("Session", session_id)
            if not session.is_active:
                raise ConflictError(f"Session {session_id} is already completed")

            now = self.clock()
            existing_count = (
                self.db.query(func.count(WorkoutSet.set_id))
                .filter(
                    WorkoutSet.session_id == session_id,
                    WorkoutSet.exercise_id == exercise_id,
                )
                .scalar()
                or 0
            )
            workout_set = WorkoutSet(
                session_id=session_id,
                exercise_id=exercise_id,
                set_number=existing_count + 1,
                reps=set_input.reps,
                time_seconds=set_input.time_seconds,
                weight=set_input.weight,
                weight_unit=set_input.weight_unit,
                rpe=set_input.rpe,
                is_warmup=set_input.is_warmup,
                is_dropset=set_input.is_dropset,
                notes=set_input.notes,
                created_at=now,
            )
            self.db.add(workout_set)
            self.db.flush()

            result = LogSetResult(set=workout_set)
            if not set_input.is_warmup:
                self._detect_records(result, user_id, exercise_id, shape, set_input.values, now)

            fan_out = self.evaluator.handle(
                SetLoggedEvent(
                    user_id=user_id,
                    session_id=session_id,
                    exercise_id=exercise_id,
                    set_id=workout_set.set_id,
                    is_warmup=set_input.is_warmup,
                    occurred_at=now,
                )
            )
            result.new_achievements = fan_out.new_achievements
            result.completed_challenges = fan_out.completed_challenges

        logger.info(
            f"[SET] Logged set #{workout_set.set_number} of {exercise.name} "
            f"in session {session_id} (new PR: {result.is_new_pr})"
        )
        return result

    def _detect_records(self, result, user_id, exercise_id, shape, values, now) -> None:
        primary = primary_record_type(shape)
        result.record_type = primary

        for record_type, candidate in record_candidates(shape, values).items():
            update = self.records.offer(
                user_id, exercise_id, record_type, candidate, result.set, now
            )
            if update.is_new:
                result.updated_record_types.append(record_type)
            if record_type == primary:
                result.is_new_pr = update.is_new
                result.previous_record = update.previous_value
                result.new_record = update.value

    def delete_set(self, set_id: UUID, user_id: UUID) -> None:
        """
        Delete a set from an active session.

        Personal records and achievements it produced are kept.

        Raises:
            NotFoundError: If the set is unknown or not the user's
            ConflictError: If the set's session is completed
        """
        with unit_of_work(self.db):
            row = (
                self.db.query(WorkoutSet, WorkoutSession)
                .join(WorkoutSession, WorkoutSet.session_id == WorkoutSession.session_id)
                .filter(WorkoutSet.set_id == set_id)
                .with_for_update()
                .first()
            )
            if row is None or row[1].user_id != user_id:
                raise NotFoundError("Set", set_id)
            workout_set, session = row
            if not session.is_active:
                raise ConflictError("Sets of a completed session cannot be deleted")

            self.records.detach_sets([set_id])
            self.db.delete(workout_set)
            self.db.flush()

        logger.info(f"[SET] Deleted set {set_id} from session {session.session_id}")

    def list_sets(self, session_id: UUID, user_id: UUID) -> List[WorkoutSet]:
        session = self.db.get(WorkoutSession, session_id)
        if session is None or session.user_id != user_id:
            raise NotFoundError("Session", session_id)
        return list(session.sets)
