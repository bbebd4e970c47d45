"""
Set logging endpoints.
"""

from datetime import datetime
from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from liftlog.api.v1.achievements import EarnedAchievementResponse, earned_response
from liftlog.api.v1.challenges import CompletedChallengeResponse, completed_challenge_response
from liftlog.db.database import get_db
from liftlog.domain.enums import RecordType, WeightUnit
from liftlog.models.workout import WorkoutSet
from liftlog.services.set_logger import SetLogger
from liftlog.utils.auth import get_current_user_id

router = APIRouter()


class LogSetRequest(BaseModel):
    """
    Values for one set. Ranges and shape fit are checked by the set logger
    so that every caller gets the same ValidationError.
    """

    exercise_id: UUID
    reps: Optional[int] = None
    time_seconds: Optional[int] = None
    weight: Optional[float] = None
    weight_unit: WeightUnit = WeightUnit.KG
    rpe: Optional[int] = None
    is_warmup: bool = False
    is_dropset: bool = False
    notes: Optional[str] = None


class SetResponse(BaseModel):
    """Set response model."""

    set_id: UUID
    session_id: UUID
    exercise_id: UUID
    set_number: int
    reps: Optional[int]
    time_seconds: Optional[int]
    weight: Optional[float]
    weight_unit: WeightUnit
    rpe: Optional[int]
    is_warmup: bool
    is_dropset: bool
    notes: Optional[str]
    created_at: datetime


class LogSetResponse(BaseModel):
    set: SetResponse
    is_new_pr: bool
    record_type: Optional[RecordType] = None
    previous_record: Optional[float] = None
    new_record: Optional[float] = None
    updated_record_types: List[RecordType] = []
    new_achievements: List[EarnedAchievementResponse] = []
    completed_challenges: List[CompletedChallengeResponse] = []


def set_response(s: WorkoutSet) -> SetResponse:
    return SetResponse(
        set_id=s.set_id,
        session_id=s.session_id,
        exercise_id=s.exercise_id,
        set_number=s.set_number,
        reps=s.reps,
        time_seconds=s.time_seconds,
        weight=s.weight,
        weight_unit=s.weight_unit,
        rpe=s.rpe,
        is_warmup=s.is_warmup,
        is_dropset=s.is_dropset,
        notes=s.notes,
        created_at=s.created_at,
    )


@router.post(
    "/sessions/{session_id}/sets",
    response_model=LogSetResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_set(
    session_id: UUID,
    request: LogSetRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Log a set into the caller's active session.

    is_new_pr and previous_record describe the exercise's primary record
    (volume for weighted lifts, reps for bodyweight, time for timed holds).
    """
    fields = request.model_dump()
    exercise_id = fields.pop("exercise_id")
    result = SetLogger(db).log_set(session_id, user_id, exercise_id, **fields)
    return LogSetResponse(
        set=set_response(result.set),
        is_new_pr=result.is_new_pr,
        record_type=result.record_type,
        previous_record=result.previous_record,
        new_record=result.new_record,
        updated_record_types=result.updated_record_types,
        new_achievements=[earned_response(ua) for ua in result.new_achievements],
        completed_challenges=[completed_challenge_response(p) for p in result.completed_challenges],
    )


@router.get(
    "/sessions/{session_id}/sets",
    response_model=List[SetResponse],
    status_code=status.HTTP_200_OK,
)
async def list_sets(
    session_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Sets of one of the caller's sessions, in logging order."""
    return [set_response(s) for s in SetLogger(db).list_sets(session_id, user_id)]


@router.delete(
    "/sets/{set_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_set(
    set_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a set from an active session. Records it set are kept."""
    SetLogger(db).delete_set(set_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
