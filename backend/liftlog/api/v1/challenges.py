"""
Challenge endpoints: create, join, leave and standings.
"""

from datetime import datetime
from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from liftlog.db.database import get_db
from liftlog.domain.enums import ChallengeStatus, ChallengeType
from liftlog.models.challenges import Challenge, ChallengeParticipant
from liftlog.services.challenge_service import ChallengeService
from liftlog.utils.auth import get_current_user_id

router = APIRouter()


class CreateChallengeRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    challenge_type: ChallengeType
    target_value: float
    exercise_id: Optional[UUID] = None
    start_date: datetime
    end_date: datetime
    is_public: bool = False
    max_participants: Optional[int] = None


class ChallengeResponse(BaseModel):
    """Challenge response model."""

    challenge_id: UUID
    creator_id: UUID
    name: str
    description: Optional[str]
    challenge_type: ChallengeType
    target_value: float
    exercise_id: Optional[UUID]
    status: ChallengeStatus
    start_date: datetime
    end_date: datetime
    is_public: bool
    max_participants: Optional[int]


class ParticipantResponse(BaseModel):
    challenge_id: UUID
    user_id: UUID
    progress: float
    completed_at: Optional[datetime]
    joined_at: datetime


class StandingResponse(BaseModel):
    rank: int
    user_id: UUID
    progress: float
    completed_at: Optional[datetime]


class CompletedChallengeResponse(BaseModel):
    """A challenge finished by the current request."""

    challenge_id: UUID
    progress: float
    completed_at: datetime


class UserChallengeResponse(BaseModel):
    challenge: ChallengeResponse
    progress: float
    completed_at: Optional[datetime]


def challenge_response(c: Challenge) -> ChallengeResponse:
    return ChallengeResponse(
        challenge_id=c.challenge_id,
        creator_id=c.creator_id,
        name=c.name,
        description=c.description,
        challenge_type=c.challenge_type,
        target_value=c.target_value,
        exercise_id=c.exercise_id,
        status=c.status,
        start_date=c.start_date,
        end_date=c.end_date,
        is_public=c.is_public,
        max_participants=c.max_participants,
    )


def completed_challenge_response(p: ChallengeParticipant) -> CompletedChallengeResponse:
    return CompletedChallengeResponse(
        challenge_id=p.challenge_id, progress=p.progress, completed_at=p.completed_at
    )


def participant_response(p: ChallengeParticipant) -> ParticipantResponse:
    return ParticipantResponse(
        challenge_id=p.challenge_id,
        user_id=p.user_id,
        progress=p.progress,
        completed_at=p.completed_at,
        joined_at=p.joined_at,
    )


@router.post(
    "/challenges",
    response_model=ChallengeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_challenge(
    request: CreateChallengeRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a challenge; the creator is enrolled automatically."""
    challenge = ChallengeService(db).create_challenge(creator_id=user_id, **request.model_dump())
    return challenge_response(challenge)


@router.get(
    "/challenges",
    response_model=List[UserChallengeResponse],
    status_code=status.HTTP_200_OK,
)
async def list_my_challenges(
    challenge_status: Optional[ChallengeStatus] = Query(None, alias="status"),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    participations = ChallengeService(db).list_user_challenges(user_id, challenge_status)
    return [
        UserChallengeResponse(
            challenge=challenge_response(p.challenge),
            progress=p.progress,
            completed_at=p.completed_at,
        )
        for p in participations
    ]


@router.get(
    "/challenges/public",
    response_model=List[ChallengeResponse],
    status_code=status.HTTP_200_OK,
)
async def list_public_challenges(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Open public challenges the caller has not joined."""
    return [challenge_response(c) for c in ChallengeService(db).list_public_challenges(user_id)]


@router.get(
    "/challenges/{challenge_id}",
    response_model=ChallengeResponse,
    status_code=status.HTTP_200_OK,
)
async def get_challenge(
    challenge_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return challenge_response(ChallengeService(db).get_challenge(challenge_id))


@router.get(
    "/challenges/{challenge_id}/standings",
    response_model=List[StandingResponse],
    status_code=status.HTTP_200_OK,
)
async def get_standings(
    challenge_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Finishers first by completion time, then everyone else by progress."""
    return [
        StandingResponse(
            rank=s.rank,
            user_id=s.participant.user_id,
            progress=s.participant.progress,
            completed_at=s.participant.completed_at,
        )
        for s in ChallengeService(db).get_standings(challenge_id)
    ]


@router.post(
    "/challenges/{challenge_id}/join",
    response_model=ParticipantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_challenge(
    challenge_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    participant = ChallengeService(db).join_challenge(challenge_id, user_id)
    return participant_response(participant)


@router.delete(
    "/challenges/{challenge_id}/participation",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def leave_challenge(
    challenge_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    ChallengeService(db).leave_challenge(challenge_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
