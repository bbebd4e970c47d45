"""
Exercise catalog endpoints (read-only).
"""

from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from liftlog.db.database import get_db
from liftlog.domain.enums import ExerciseShape, MuscleGroup
from liftlog.domain.errors import NotFoundError
from liftlog.models.catalog import Exercise

router = APIRouter()


class ExerciseResponse(BaseModel):
    """Exercise response model."""

    exercise_id: UUID
    name: str
    muscle_group: MuscleGroup
    shape: ExerciseShape


def _to_response(ex: Exercise) -> ExerciseResponse:
    return ExerciseResponse(
        exercise_id=ex.exercise_id,
        name=ex.name,
        muscle_group=ex.muscle_group,
        shape=ex.shape,
    )


@router.get(
    "/exercises",
    response_model=List[ExerciseResponse],
    status_code=status.HTTP_200_OK,
)
async def get_exercises(
    muscle_group: Optional[MuscleGroup] = Query(None, description="Filter by muscle group"),
    db: Session = Depends(get_db),
):
    """Get list of exercises, optionally filtered by muscle group."""
    query = db.query(Exercise)

    if muscle_group:
        query = query.filter(Exercise.muscle_group == muscle_group)

    return [_to_response(ex) for ex in query.order_by(Exercise.name).all()]


@router.get(
    "/exercises/{exercise_id}",
    response_model=ExerciseResponse,
    status_code=status.HTTP_200_OK,
)
async def get_exercise(exercise_id: UUID, db: Session = Depends(get_db)):
    exercise = db.get(Exercise, exercise_id)
    if exercise is None:
        raise NotFoundError("Exercise", exercise_id)
    return _to_response(exercise)
