"""
Unit-of-work helper wrapping one engine operation in one transaction.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from liftlog.domain.errors import ConflictError, StoreError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run the enclosed block as a single transaction.

    Commits when the block finishes; rolls back and re-raises otherwise.
    Uniqueness violations become ConflictError and other database failures
    become StoreError. Nothing is retried here.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[TX] Integrity violation, rolled back: {e.orig}")
        raise ConflictError("Conflicting concurrent write") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[TX] Store failure, rolled back: {e}")
        raise StoreError("Record store unavailable") from e
    except Exception:
        db.rollback()
        raise
