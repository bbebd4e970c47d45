"""
Personal Record Index: current best value per (user, exercise, record type).

Records only move up. A candidate replaces the stored value only when it is
strictly greater, so ties keep the original achieved_at and previous_record.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from liftlog.domain.enums import RecordType
from liftlog.domain.shapes import select_display_record
from liftlog.models.records import PersonalRecord
from liftlog.models.workout import WorkoutSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordUpdate:
    """Outcome of offering one candidate value to the index."""

    record_type: RecordType
    value: float
    is_new: bool
    previous_value: Optional[float] = None


class PersonalRecordIndex:
    """Access layer for the personal_records table."""

    def __init__(self, db: Session):
        self.db = db

    def get_record(
        self,
        user_id: UUID,
        exercise_id: UUID,
        record_type: RecordType,
        for_update: bool = False,
    ) -> Optional[PersonalRecord]:
        query = self.db.query(PersonalRecord).filter(
            PersonalRecord.user_id == user_id,
            PersonalRecord.exercise_id == exercise_id,
            PersonalRecord.record_type == record_type,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_best_value(
        self, user_id: UUID, exercise_id: UUID, record_type: RecordType
    ) -> Optional[float]:
        record = self.get_record(user_id, exercise_id, record_type)
        return record.value if record else None

    def records_for_exercise(self, user_id: UUID, exercise_id: UUID) -> Dict[RecordType, PersonalRecord]:
        records = (
            self.db.query(PersonalRecord)
            .filter(
                PersonalRecord.user_id == user_id,
                PersonalRecord.exercise_id == exercise_id,
            )
            .all()
        )
        return {RecordType(r.record_type): r for r in records}

    def offer(
        self,
        user_id: UUID,
        exercise_id: UUID,
        record_type: RecordType,
        value: float,
        source_set: WorkoutSet,
        now: datetime,
    ) -> RecordUpdate:
        """
        Write `value` if it strictly beats the stored record (or none exists).

        The existing row is read with FOR UPDATE so two writers for the same
        key serialize; the unique key is the backstop.
        """
        existing = self.get_record(user_id, exercise_id, record_type, for_update=True)

        if existing is not None and value <= existing.value:
            return RecordUpdate(record_type=record_type, value=existing.value, is_new=False)

        previous = existing.value if existing is not None else None
        if existing is None:
            existing = PersonalRecord(
                user_id=user_id,
                exercise_id=exercise_id,
                record_type=record_type,
            )
            self.db.add(existing)

        existing.value = value
        existing.previous_record = previous
        existing.weight = source_set.weight
        existing.reps = source_set.reps
        existing.time_seconds = source_set.time_seconds
        existing.achieved_at = now
        existing.source_set_id = source_set.set_id
        self.db.flush()

        logger.info(
            f"[PR] user={user_id} exercise={exercise_id} {record_type.value}: "
            f"{previous} -> {value}"
        )
        return RecordUpdate(
            record_type=record_type, value=value, is_new=True, previous_value=previous
        )

    def count_records(self, user_id: UUID) -> int:
        return (
            self.db.query(func.count(PersonalRecord.record_id))
            .filter(PersonalRecord.user_id == user_id)
            .scalar()
            or 0
        )

    def display_records(self, user_id: UUID) -> List[PersonalRecord]:
        """One record per exercise, chosen by display priority."""
        records = (
            self.db.query(PersonalRecord)
            .filter(PersonalRecord.user_id == user_id)
            .order_by(PersonalRecord.exercise_id)
            .all()
        )
        by_exercise: Dict[UUID, List[PersonalRecord]] = {}
        for record in records:
            by_exercise.setdefault(record.exercise_id, []).append(record)
        return [select_display_record(group) for group in by_exercise.values()]

    def detach_sets(self, set_ids: List[UUID]) -> int:
        """Clear source_set_id on records pointing at sets about to be deleted."""
        if not set_ids:
            return 0
        detached = (
            self.db.query(PersonalRecord)
            .filter(PersonalRecord.source_set_id.in_(set_ids))
            .update({PersonalRecord.source_set_id: None}, synchronize_session="fetch")
        )
        return detached
