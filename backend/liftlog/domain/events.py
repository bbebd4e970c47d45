"""
Engine event models consumed by the progress fan-out.

Two events exist:
- SetLogged: a working or warmup set was appended to an active session
- SessionCompleted: an active session was completed

Each event type declares which achievement categories and challenge types it
can move. The fan-out only re-evaluates those, so a set log never touches
session-level counters such as the streak.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Union
from uuid import UUID

from pydantic import BaseModel, Field

from liftlog.domain.enums import AchievementCategory, ChallengeType


class EventType(str, Enum):
    """Canonical engine event types."""

    SET_LOGGED = "SetLogged"
    SESSION_COMPLETED = "SessionCompleted"


class SetLoggedEvent(BaseModel):
    """Emitted after a set row is inserted."""

    event_type: EventType = Field(EventType.SET_LOGGED, frozen=True)
    user_id: UUID
    session_id: UUID
    exercise_id: UUID
    set_id: UUID
    is_warmup: bool = False
    occurred_at: datetime


class SessionCompletedEvent(BaseModel):
    """Emitted after a session's completed_at is written."""

    event_type: EventType = Field(EventType.SESSION_COMPLETED, frozen=True)
    user_id: UUID
    session_id: UUID
    occurred_at: datetime


EngineEvent = Union[SetLoggedEvent, SessionCompletedEvent]


EVENT_ACHIEVEMENT_CATEGORIES: Dict[EventType, FrozenSet[AchievementCategory]] = {
    EventType.SET_LOGGED: frozenset(
        {
            AchievementCategory.PERSONAL_RECORD,
            AchievementCategory.VOLUME,
            AchievementCategory.EXERCISE_SPECIFIC,
            AchievementCategory.MUSCLE_FOCUS,
        }
    ),
    EventType.SESSION_COMPLETED: frozenset(
        {
            AchievementCategory.MILESTONE,
            AchievementCategory.STREAK,
            AchievementCategory.CONSISTENCY,
        }
    ),
}

EVENT_CHALLENGE_TYPES: Dict[EventType, FrozenSet[ChallengeType]] = {
    EventType.SET_LOGGED: frozenset(
        {
            ChallengeType.SPECIFIC_EXERCISE,
            ChallengeType.TOTAL_VOLUME,
            ChallengeType.TOTAL_SETS,
        }
    ),
    EventType.SESSION_COMPLETED: frozenset(
        {
            ChallengeType.TOTAL_WORKOUTS,
            ChallengeType.WORKOUT_STREAK,
        }
    ),
}
