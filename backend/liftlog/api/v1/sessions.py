"""
Workout session lifecycle endpoints.
"""

from datetime import datetime
from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from liftlog.api.v1.achievements import EarnedAchievementResponse, earned_response
from liftlog.api.v1.challenges import CompletedChallengeResponse, completed_challenge_response
from liftlog.api.v1.sets import SetResponse, set_response
from liftlog.db.database import get_db
from liftlog.models.workout import WorkoutSession
from liftlog.services.session_service import SessionService
from liftlog.utils.auth import get_current_user_id

router = APIRouter()


class StartSessionRequest(BaseModel):
    plan_day_id: Optional[UUID] = None


class CompleteSessionRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)
    mood_rating: Optional[int] = Field(None, description="1 (worst) to 10 (best)")


class SessionResponse(BaseModel):
    """Workout session response model."""

    session_id: UUID
    user_id: UUID
    plan_id: Optional[UUID]
    plan_day_id: Optional[UUID]
    started_at: datetime
    completed_at: Optional[datetime]
    duration_seconds: Optional[int]
    notes: Optional[str]
    mood_rating: Optional[int]
    sets: List[SetResponse] = []


class CompleteSessionResponse(BaseModel):
    session: SessionResponse
    new_achievements: List[EarnedAchievementResponse] = []
    completed_challenges: List[CompletedChallengeResponse] = []


def session_response(session: WorkoutSession, include_sets: bool = False) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        user_id=session.user_id,
        plan_id=session.plan_id,
        plan_day_id=session.plan_day_id,
        started_at=session.started_at,
        completed_at=session.completed_at,
        duration_seconds=session.duration_seconds,
        notes=session.notes,
        mood_rating=session.mood_rating,
        sets=[set_response(s) for s in session.sets] if include_sets else [],
    )


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_session(
    request: StartSessionRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Start a workout. Fails with 409 when one is already active."""
    session = SessionService(db).start_session(user_id, request.plan_day_id)
    return session_response(session)


@router.get(
    "/sessions/active",
    response_model=Optional[SessionResponse],
    status_code=status.HTTP_200_OK,
)
async def get_active_session(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    session = SessionService(db).get_active_session(user_id)
    if session is None:
        return None
    return session_response(session, include_sets=True)


@router.get(
    "/sessions",
    response_model=List[SessionResponse],
    status_code=status.HTTP_200_OK,
)
async def list_sessions(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Completed sessions, newest first."""
    sessions = SessionService(db).list_sessions(user_id, limit=limit, offset=offset)
    return [session_response(s) for s in sessions]


@router.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
)
async def get_session(
    session_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    session = SessionService(db).get_session(session_id, user_id)
    return session_response(session, include_sets=True)


@router.post(
    "/sessions/{session_id}/complete",
    response_model=CompleteSessionResponse,
    status_code=status.HTTP_200_OK,
)
async def complete_session(
    session_id: UUID,
    request: CompleteSessionRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Complete the session and apply workout-level progress.

    Returns achievements and challenges completed by this workout.
    """
    result = SessionService(db).complete_session(
        session_id, user_id, notes=request.notes, mood_rating=request.mood_rating
    )
    return CompleteSessionResponse(
        session=session_response(result.session, include_sets=True),
        new_achievements=[earned_response(ua) for ua in result.new_achievements],
        completed_challenges=[completed_challenge_response(p) for p in result.completed_challenges],
    )


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def discard_session(
    session_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Discard a session and all its sets."""
    SessionService(db).discard_session(session_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
