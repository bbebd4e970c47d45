"""
Challenge participation and standings.

Progress itself is written only by the progress fan-out; this service
manages who takes part and reads the resulting standings.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from liftlog.db.transaction import unit_of_work
from liftlog.domain.enums import ChallengeStatus, ChallengeType
from liftlog.domain.errors import ConflictError, NotFoundError, ValidationError
from liftlog.models.catalog import Exercise
from liftlog.models.challenges import Challenge, ChallengeParticipant
from liftlog.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (ChallengeStatus.COMPLETED, ChallengeStatus.CANCELLED)


@dataclass
class Standing:
    rank: int
    participant: ChallengeParticipant


class ChallengeService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def create_challenge(
        self,
        creator_id: UUID,
        name: str,
        challenge_type: ChallengeType,
        target_value: float,
        start_date: datetime,
        end_date: datetime,
        description: Optional[str] = None,
        exercise_id: Optional[UUID] = None,
        is_public: bool = False,
        max_participants: Optional[int] = None,
    ) -> Challenge:
        """
        Create a challenge and enrol its creator.

        Status is UPCOMING when it starts in the future, ACTIVE otherwise.

        Raises:
            ValidationError: If the window is empty, the target is not positive,
                or a SPECIFIC_EXERCISE challenge names no exercise
            NotFoundError: If the exercise is unknown
        """
        start_date, end_date = as_utc(start_date), as_utc(end_date)
        if start_date >= end_date:
            raise ValidationError("End date must be after start date", field="end_date")
        if target_value <= 0:
            raise ValidationError("Target value must be positive", field="target_value")
        if challenge_type == ChallengeType.SPECIFIC_EXERCISE and exercise_id is None:
            raise ValidationError(
                "SPECIFIC_EXERCISE challenges require an exercise", field="exercise_id"
            )
        if max_participants is not None and max_participants < 1:
            raise ValidationError("max_participants must be at least 1", field="max_participants")

        with unit_of_work(self.db):
            if exercise_id is not None and self.db.get(Exercise, exercise_id) is None:
                raise NotFoundError("Exercise", exercise_id)

            now = self.clock()
            challenge = Challenge(
                creator_id=creator_id,
                name=name,
                description=description,
                challenge_type=challenge_type,
                target_value=target_value,
                exercise_id=exercise_id,
                status=ChallengeStatus.UPCOMING if start_date > now else ChallengeStatus.ACTIVE,
                start_date=start_date,
                end_date=end_date,
                is_public=is_public,
                max_participants=max_participants,
            )
            self.db.add(challenge)
            self.db.flush()
            self.db.add(
                ChallengeParticipant(
                    challenge_id=challenge.challenge_id,
                    user_id=creator_id,
                    progress=0.0,
                    joined_at=now,
                )
            )

        logger.info(f"[CHALLENGE] User {creator_id} created challenge {challenge.challenge_id}")
        return challenge

    def get_challenge(self, challenge_id: UUID) -> Challenge:
        challenge = self.db.get(Challenge, challenge_id)
        if challenge is None:
            raise NotFoundError("Challenge", challenge_id)
        return challenge

    def join_challenge(self, challenge_id: UUID, user_id: UUID) -> ChallengeParticipant:
        """
        Enrol a user. Progress is filled in by the next matching event.

        Raises:
            NotFoundError: If the challenge is unknown
            ConflictError: If it is closed, full, or the user already takes part
        """
        with unit_of_work(self.db):
            challenge = (
                self.db.query(Challenge)
                .filter(Challenge.challenge_id == challenge_id)
                .with_for_update()
                .first()
            )
            if challenge is None:
                raise NotFoundError("Challenge", challenge_id)
            if ChallengeStatus(challenge.status) in CLOSED_STATUSES:
                raise ConflictError("Challenge is no longer active")

            participant_count = (
                self.db.query(func.count(ChallengeParticipant.participant_id))
                .filter(ChallengeParticipant.challenge_id == challenge_id)
                .scalar()
            )
            if challenge.max_participants and participant_count >= challenge.max_participants:
                raise ConflictError("Challenge is full")

            existing = (
                self.db.query(ChallengeParticipant)
                .filter(
                    ChallengeParticipant.challenge_id == challenge_id,
                    ChallengeParticipant.user_id == user_id,
                )
                .first()
            )
            if existing is not None:
                raise ConflictError("Already participating in this challenge")

            participant = ChallengeParticipant(
                challenge_id=challenge_id,
                user_id=user_id,
                progress=0.0,
                joined_at=self.clock(),
            )
            self.db.add(participant)
            self.db.flush()

        logger.info(f"[CHALLENGE] User {user_id} joined challenge {challenge_id}")
        return participant

    def leave_challenge(self, challenge_id: UUID, user_id: UUID) -> None:
        """
        Raises:
            NotFoundError: If the user does not take part in the challenge
            ConflictError: If the user created the challenge
        """
        with unit_of_work(self.db):
            challenge = self.get_challenge(challenge_id)
            if challenge.creator_id == user_id:
                raise ConflictError("Creator cannot leave their own challenge")
            participant = (
                self.db.query(ChallengeParticipant)
                .filter(
                    ChallengeParticipant.challenge_id == challenge_id,
                    ChallengeParticipant.user_id == user_id,
                )
                .first()
            )
            if participant is None:
                raise NotFoundError("Challenge participation", challenge_id)
            self.db.delete(participant)

        logger.info(f"[CHALLENGE] User {user_id} left challenge {challenge_id}")

    def get_standings(self, challenge_id: UUID) -> List[Standing]:
        """
        Participants ranked: finishers first by completion time, then by progress.
        """
        self.get_challenge(challenge_id)
        participants = (
            self.db.query(ChallengeParticipant)
            .filter(ChallengeParticipant.challenge_id == challenge_id)
            .all()
        )

        participants.sort(key=_standing_key)
        return [Standing(rank=i + 1, participant=p) for i, p in enumerate(participants)]

    def list_user_challenges(
        self, user_id: UUID, status: Optional[ChallengeStatus] = None
    ) -> List[ChallengeParticipant]:
        query = (
            self.db.query(ChallengeParticipant)
            .join(Challenge, ChallengeParticipant.challenge_id == Challenge.challenge_id)
            .filter(ChallengeParticipant.user_id == user_id)
        )
        if status is not None:
            query = query.filter(Challenge.status == status)
        return query.order_by(ChallengeParticipant.joined_at.desc()).all()

    def list_public_challenges(self, user_id: UUID) -> List[Challenge]:
        """Open public challenges the user has not joined yet."""
        joined = select(ChallengeParticipant.challenge_id).where(
            ChallengeParticipant.user_id == user_id
        )
        return (
            self.db.query(Challenge)
            .filter(
                Challenge.is_public.is_(True),
                Challenge.status.in_([ChallengeStatus.ACTIVE, ChallengeStatus.UPCOMING]),
                Challenge.challenge_id.notin_(joined),
            )
            .order_by(Challenge.created_at.desc())
            .all()
        )


def _standing_key(p: ChallengeParticipant):
    if p.completed_at is not None:
        return (0, p.completed_at.timestamp(), -p.progress)
    return (1, 0.0, -p.progress)
