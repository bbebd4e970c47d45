"""
Session Manager: lifecycle of a workout session.

NONE -> ACTIVE (start) -> COMPLETED (complete, terminal)
                       -> deleted   (discard, terminal)

Each public method is one transaction. A user has at most one ACTIVE
session; the partial unique index uq_workout_sessions_one_active backs the
check made here.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from liftlog.db.transaction import unit_of_work
from liftlog.domain.errors import ConflictError, NotFoundError, ValidationError
from liftlog.domain.events import SessionCompletedEvent
from liftlog.models.achievements import UserAchievement
from liftlog.models.catalog import PlanDay
from liftlog.models.challenges import ChallengeParticipant
from liftlog.models.workout import WorkoutSession, WorkoutSet
from liftlog.services.progress_evaluator import ProgressEvaluator
from liftlog.services.record_index import PersonalRecordIndex
from liftlog.utils.clock import utcnow

logger = logging.getLogger(__name__)

MOOD_MIN = 1
MOOD_MAX = 10


@dataclass
class CompletionResult:
    session: WorkoutSession
    new_achievements: List[UserAchievement] = field(default_factory=list)
    completed_challenges: List[ChallengeParticipant] = field(default_factory=list)


class SessionService:
    """Starts, completes and discards workout sessions."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utcnow,
        evaluator: Optional[ProgressEvaluator] = None,
    ):
        self.db = db
        self.clock = clock
        self.evaluator = evaluator or ProgressEvaluator(db, clock)

    def start_session(self, user_id: UUID, plan_day_id: Optional[UUID] = None) -> WorkoutSession:
        """
        Open a new active session for the user.

        Raises:
            ConflictError: If the user already has an active session
            NotFoundError: If the plan day is unknown or not the user's
        """
        with unit_of_work(self.db):
            existing = self._active_session_query(user_id).with_for_update().first()
            if existing is not None:
                raise ConflictError(
                    f"User already has an active session: {existing.session_id}"
                )

            plan_id = None
            if plan_day_id is not None:
                plan_day = self.db.get(PlanDay, plan_day_id)
                if plan_day is None or plan_day.plan.user_id != user_id:
                    raise NotFoundError("Plan day", plan_day_id)
                plan_id = plan_day.plan_id

            session = WorkoutSession(
                user_id=user_id,
                plan_id=plan_id,
                plan_day_id=plan_day_id,
                started_at=self.clock(),
            )
            self.db.add(session)
            self.db.flush()

        logger.info(f"[SESSION] Started session {session.session_id} for user {user_id}")
        return session

    def get_active_session(self, user_id: UUID) -> Optional[WorkoutSession]:
        return self._active_session_query(user_id).first()

    def get_session(self, session_id: UUID, user_id: UUID) -> WorkoutSession:
        """Fetch a session the user owns, active or completed."""
        session = self.db.get(WorkoutSession, session_id)
        if session is None or session.user_id != user_id:
            raise NotFoundError("Session", session_id)
        return session

    def list_sessions(self, user_id: UUID, limit: int = 20, offset: int = 0) -> List[WorkoutSession]:
        """Completed sessions, newest first."""
        return (
            self.db.query(WorkoutSession)
            .filter(
                WorkoutSession.user_id == user_id,
                WorkoutSession.completed_at.isnot(None),
            )
            .order_by(WorkoutSession.completed_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def complete_session(
        self,
        session_id: UUID,
        user_id: UUID,
        notes: Optional[str] = None,
        mood_rating: Optional[int] = None,
    ) -> CompletionResult:
        """
        Complete an active session and run the session-level fan-out.

        Raises:
            ValidationError: If mood_rating is outside 1..10
            NotFoundError: If the session is unknown or not the user's
            ConflictError: If the session is already completed
        """
        if mood_rating is not None and not MOOD_MIN <= mood_rating <= MOOD_MAX:
            raise ValidationError(
                f"mood_rating must be between {MOOD_MIN} and {MOOD_MAX}", field="mood_rating"
            )

        with unit_of_work(self.db):
            session = self._lock_owned_session(session_id, user_id)
            if not session.is_active:
                raise ConflictError(f"Session {session_id} is already completed")

            now = self.clock()
            session.completed_at = now
            session.duration_seconds = max(0, int((now - session.started_at).total_seconds()))
            if notes is not None:
                session.notes = notes
            if mood_rating is not None:
                session.mood_rating = mood_rating
            self.db.flush()

            fan_out = self.evaluator.handle(
                SessionCompletedEvent(user_id=user_id, session_id=session_id, occurred_at=now)
            )

        logger.info(
            f"[SESSION] Completed session {session_id} for user {user_id} "
            f"({session.duration_seconds}s)"
        )
        return CompletionResult(
            session=session,
            new_achievements=fan_out.new_achievements,
            completed_challenges=fan_out.completed_challenges,
        )

    def discard_session(self, session_id: UUID, user_id: UUID) -> None:
        """
        Delete an active session and its sets. No fan-out runs.

        Raises:
            NotFoundError: If the session is unknown or not the user's
            ConflictError: If the session is already completed
        """
        with unit_of_work(self.db):
            session = self._lock_owned_session(session_id, user_id)
            if not session.is_active:
                raise ConflictError(f"Session {session_id} is completed and cannot be discarded")
            set_ids = [
                row[0]
                for row in self.db.query(WorkoutSet.set_id)
                .filter(WorkoutSet.session_id == session_id)
                .all()
            ]
            PersonalRecordIndex(self.db).detach_sets(set_ids)
            self.db.delete(session)
            self.db.flush()

        logger.info(
            f"[SESSION] Discarded session {session_id} ({len(set_ids)} sets) for user {user_id}"
        )

    def _active_session_query(self, user_id: UUID):
        return self.db.query(WorkoutSession).filter(
            WorkoutSession.user_id == user_id,
            WorkoutSession.completed_at.is_(None),
        )

    def _lock_owned_session(self, session_id: UUID, user_id: UUID) -> WorkoutSession:
        session = (
            self.db.query(WorkoutSession)
            .filter(WorkoutSession.session_id == session_id)
            .with_for_update()
            .first()
        )
        if session is None or session.user_id != user_id:
            raise NotFoundError("Session", session_id)
        return session
