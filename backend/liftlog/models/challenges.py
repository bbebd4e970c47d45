from sqlalchemy import (
    Boolean,
    Column,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime
from liftlog.domain.enums import ChallengeStatus, ChallengeType


class Challenge(Base):
    __tablename__ = "challenges"

    challenge_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    creator_id = Column(GUID(), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    challenge_type = Column(
        SAEnum(ChallengeType, name="challenge_type", native_enum=False, length=24),
        nullable=False,
    )
    target_value = Column(Float, nullable=False)
    exercise_id = Column(
        GUID(), ForeignKey("exercises.exercise_id", ondelete="SET NULL"), nullable=True
    )
    status = Column(
        SAEnum(ChallengeStatus, name="challenge_status", native_enum=False, length=16),
        nullable=False,
        default=ChallengeStatus.UPCOMING,
        index=True,
    )
    start_date = Column(UTCDateTime(), nullable=False)
    end_date = Column(UTCDateTime(), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    max_participants = Column(Integer, nullable=True)
    created_at = Column(UTCDateTime(), server_default=func.now(), nullable=False)

    participants = relationship(
        "ChallengeParticipant", back_populates="challenge", cascade="all, delete-orphan"
    )


class ChallengeParticipant(Base):
    __tablename__ = "challenge_participants"

    participant_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    challenge_id = Column(
        GUID(),
        ForeignKey("challenges.challenge_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(GUID(), nullable=False, index=True)
    progress = Column(Float, nullable=False, default=0.0)  # never decreases
    completed_at = Column(UTCDateTime(), nullable=True)  # written once
    joined_at = Column(UTCDateTime(), server_default=func.now(), nullable=False)

    challenge = relationship("Challenge", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participants_key"),
    )
