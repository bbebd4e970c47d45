"""
Aggregation queries over sessions and sets.

Shared by the progress fan-out, the weekly metrics and the read-side
services. Warmup sets never appear in working-set aggregates.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from liftlog.domain.enums import ExerciseShape, MuscleGroup, WeightUnit
from liftlog.domain.shapes import SetValues, set_volume
from liftlog.models.catalog import Exercise
from liftlog.models.workout import WorkoutSession, WorkoutSet


@dataclass(frozen=True)
class WorkingSet:
    """A non-warmup set with the catalog facts needed to aggregate it."""

    set_id: UUID
    session_id: UUID
    exercise_id: UUID
    shape: ExerciseShape
    muscle_group: MuscleGroup
    values: SetValues
    created_at: datetime

    @property
    def volume(self) -> float:
        return set_volume(self.shape, self.values)


def working_sets(
    db: Session,
    user_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    exercise_id: Optional[UUID] = None,
    session_ids: Optional[Iterable[UUID]] = None,
) -> List[WorkingSet]:
    """
    Load a user's working sets, optionally bounded by created_at [start, end].

    Sets in the user's active session are included; discarded sessions no
    longer have sets to include.
    """
    filters = [WorkoutSession.user_id == user_id, WorkoutSet.is_warmup.is_(False)]
    if start is not None:
        filters.append(WorkoutSet.created_at >= start)
    if end is not None:
        filters.append(WorkoutSet.created_at <= end)
    if exercise_id is not None:
        filters.append(WorkoutSet.exercise_id == exercise_id)
    if session_ids is not None:
        session_ids = list(session_ids)
        if not session_ids:
            return []
        filters.append(WorkoutSet.session_id.in_(session_ids))

    rows = (
        db.query(WorkoutSet, Exercise.shape, Exercise.muscle_group)
        .join(WorkoutSession, WorkoutSet.session_id == WorkoutSession.session_id)
        .join(Exercise, WorkoutSet.exercise_id == Exercise.exercise_id)
        .filter(and_(*filters))
        .all()
    )

    return [
        WorkingSet(
            set_id=s.set_id,
            session_id=s.session_id,
            exercise_id=s.exercise_id,
            shape=ExerciseShape(shape),
            muscle_group=MuscleGroup(muscle_group),
            values=SetValues(
                reps=s.reps,
                time_seconds=s.time_seconds,
                weight=s.weight,
                weight_unit=WeightUnit(s.weight_unit or WeightUnit.KG),
            ),
            created_at=s.created_at,
        )
        for s, shape, muscle_group in rows
    ]


def total_volume(sets: Iterable[WorkingSet]) -> float:
    return sum(s.volume for s in sets)


def count_completed_sessions(
    db: Session,
    user_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> int:
    query = db.query(func.count(WorkoutSession.session_id)).filter(
        WorkoutSession.user_id == user_id,
        WorkoutSession.completed_at.isnot(None),
    )
    if start is not None:
        query = query.filter(WorkoutSession.completed_at >= start)
    if end is not None:
        query = query.filter(WorkoutSession.completed_at <= end)
    return query.scalar() or 0


def completion_times(
    db: Session,
    user_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[datetime]:
    """completed_at of every completed session, newest first."""
    query = db.query(WorkoutSession.completed_at).filter(
        WorkoutSession.user_id == user_id,
        WorkoutSession.completed_at.isnot(None),
    )
    if start is not None:
        query = query.filter(WorkoutSession.completed_at >= start)
    if end is not None:
        query = query.filter(WorkoutSession.completed_at <= end)
    return [row[0] for row in query.order_by(WorkoutSession.completed_at.desc()).all()]
