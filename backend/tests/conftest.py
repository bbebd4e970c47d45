"""
Pytest configuration and fixtures.
"""

import os
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from liftlog.db.database import Base
from liftlog.domain.enums import ExerciseShape, MuscleGroup
from liftlog.models import Exercise, User  # registers every model with Base.metadata


# Use test database URL from env, or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


class FakeClock:
    """Controllable clock; call it to read the time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        # SQLite in-memory for fast tests
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        # Postgres for row locks and the partial unique index under real concurrency
        engine = create_engine(TEST_DATABASE_URL, echo=False)

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create a test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def override_get_db(test_db):
    """Override get_db dependency for FastAPI."""

    def _get_db():
        try:
            yield test_db
        finally:
            pass  # Don't close, we'll handle it in fixture

    return _get_db


@pytest.fixture(scope="function")
def client(override_get_db):
    """TestClient bound to the test database."""
    from fastapi.testclient import TestClient

    from liftlog.db.database import get_db
    from liftlog.main import app

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def clock():
    """Clock pinned to Wednesday 2026-10-14 10:00 UTC."""
    return FakeClock(datetime(2026, 10, 14, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def sample_user_id(test_db):
    """A registered, non-admin user."""
    user_id = uuid4()
    test_db.add(User(user_id=user_id, email=f"{user_id}@example.com", display_name="Sam"))
    test_db.commit()
    return user_id


@pytest.fixture
def other_user_id(test_db):
    user_id = uuid4()
    test_db.add(User(user_id=user_id, email=f"{user_id}@example.com", display_name="Alex"))
    test_db.commit()
    return user_id


@pytest.fixture
def admin_user_id(test_db):
    user_id = uuid4()
    test_db.add(User(user_id=user_id, email=f"{user_id}@example.com", is_admin=True))
    test_db.commit()
    return user_id


def _add_exercise(db, name, muscle_group, shape):
    exercise = Exercise(name=name, muscle_group=muscle_group, shape=shape)
    db.add(exercise)
    db.commit()
    return exercise


@pytest.fixture
def bench(test_db):
    """Weighted rep exercise."""
    return _add_exercise(test_db, "Bench Press", MuscleGroup.CHEST, ExerciseShape.REP_AND_WEIGHT)


@pytest.fixture
def pushup(test_db):
    """Bodyweight rep exercise."""
    return _add_exercise(test_db, "Push-up", MuscleGroup.CHEST, ExerciseShape.REP_BASED)


@pytest.fixture
def plank(test_db):
    """Timed exercise."""
    return _add_exercise(test_db, "Plank", MuscleGroup.CORE, ExerciseShape.TIMED)


@pytest.fixture
def add_workout(test_db):
    """
    Insert a session straight into the store, bypassing the engine.

    sets: iterable of dicts with exercise and any WorkoutSet value fields.
    Pass completed_at=None for an active session.
    """
    from liftlog.models import WorkoutSession, WorkoutSet

    def _add(user_id, completed_at, sets=(), duration=timedelta(hours=1)):
        started_at = (completed_at or datetime.now(timezone.utc)) - duration
        session = WorkoutSession(
            user_id=user_id,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=int(duration.total_seconds()) if completed_at else None,
        )
        test_db.add(session)
        test_db.flush()

        counts = {}
        for i, fields in enumerate(sets):
            fields = dict(fields)
            exercise = fields.pop("exercise")
            counts[exercise.exercise_id] = counts.get(exercise.exercise_id, 0) + 1
            test_db.add(
                WorkoutSet(
                    session_id=session.session_id,
                    exercise_id=exercise.exercise_id,
                    set_number=counts[exercise.exercise_id],
                    created_at=started_at + timedelta(minutes=i + 1),
                    **fields,
                )
            )
        test_db.commit()
        return session

    return _add
