from sqlalchemy import Boolean, Column, String
from sqlalchemy.sql import func
import uuid

from liftlog.db.database import Base
from liftlog.db.types import GUID, UTCDateTime


class User(Base):
    """Account row owned by the identity service; read here for the admin capability."""

    __tablename__ = "users"

    user_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=True, index=True)
    display_name = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime(), server_default=func.now(), nullable=False)
