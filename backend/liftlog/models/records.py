from sqlalchemy import (
    Column,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime
from liftlog.domain.enums import RecordType


class PersonalRecord(Base):
    """Best value per (user, exercise, record type). Only ever raised, never lowered."""

    __tablename__ = "personal_records"

    record_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=False, index=True)
    exercise_id = Column(GUID(), ForeignKey("exercises.exercise_id"), nullable=False, index=True)
    record_type = Column(
        SAEnum(RecordType, name="record_type", native_enum=False, length=16), nullable=False
    )
    value = Column(Float, nullable=False)
    previous_record = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    reps = Column(Integer, nullable=True)
    time_seconds = Column(Integer, nullable=True)
    achieved_at = Column(UTCDateTime(), nullable=False)
    source_set_id = Column(
        GUID(), ForeignKey("workout_sets.set_id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "exercise_id", "record_type", name="uq_personal_records_key"
        ),
    )
