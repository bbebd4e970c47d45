"""
Progress read endpoints: weekly metrics, user stats and personal records.
"""

from dataclasses import asdict
from uuid import UUID
from typing import List, Optional
from datetime import date, datetime
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from liftlog.db.database import get_db
from liftlog.domain.enums import RecordType
from liftlog.models.records import PersonalRecord
from liftlog.services.metrics_service import MetricsService, get_week_start
from liftlog.services.stats_service import StatsService
from liftlog.utils.auth import get_current_user_id
from liftlog.utils.clock import utcnow

router = APIRouter()


class WeeklyMetricsResponse(BaseModel):
    """Weekly metrics response model."""

    user_id: UUID
    week_start: date
    total_workouts: int
    total_volume: float
    exercises_count: int


class UserStatsResponse(BaseModel):
    user_id: UUID
    total_workouts: int
    total_sets: int
    total_volume: float
    total_prs: int
    current_streak: int
    longest_streak: int
    last_workout_at: Optional[datetime]


class PersonalRecordResponse(BaseModel):
    exercise_id: UUID
    record_type: RecordType
    value: float
    previous_record: Optional[float]
    weight: Optional[float]
    reps: Optional[int]
    time_seconds: Optional[int]
    achieved_at: datetime
    source_set_id: Optional[UUID]


def record_response(r: PersonalRecord) -> PersonalRecordResponse:
    return PersonalRecordResponse(
        exercise_id=r.exercise_id,
        record_type=r.record_type,
        value=r.value,
        previous_record=r.previous_record,
        weight=r.weight,
        reps=r.reps,
        time_seconds=r.time_seconds,
        achieved_at=r.achieved_at,
        source_set_id=r.source_set_id,
    )


@router.get(
    "/metrics/weekly",
    response_model=WeeklyMetricsResponse,
    status_code=status.HTTP_200_OK,
)
async def get_weekly_metrics(
    week_start: Optional[date] = Query(None, description="Any date in the week (defaults to current week)"),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Get weekly metrics for the caller.

    Weeks without a stored row read as zero.
    """
    week_start = get_week_start(week_start or utcnow())

    metrics = MetricsService(db).get_weekly_metrics(user_id, week_start)
    if metrics is None:
        return WeeklyMetricsResponse(
            user_id=user_id,
            week_start=week_start,
            total_workouts=0,
            total_volume=0.0,
            exercises_count=0,
        )

    return WeeklyMetricsResponse(
        user_id=metrics.user_id,
        week_start=metrics.week_start,
        total_workouts=metrics.total_workouts,
        total_volume=metrics.total_volume,
        exercises_count=metrics.exercises_count,
    )


@router.get(
    "/stats",
    response_model=UserStatsResponse,
    status_code=status.HTTP_200_OK,
)
async def get_user_stats(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    stats = StatsService(db).get_user_stats(user_id)
    return UserStatsResponse(**asdict(stats))


@router.get(
    "/records",
    response_model=List[PersonalRecordResponse],
    status_code=status.HTTP_200_OK,
)
async def get_personal_records(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """One headline record per exercise."""
    return [record_response(r) for r in StatsService(db).get_display_records(user_id)]


@router.get(
    "/records/{exercise_id}",
    response_model=List[PersonalRecordResponse],
    status_code=status.HTTP_200_OK,
)
async def get_exercise_records(
    exercise_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Every record type held for one exercise."""
    return [record_response(r) for r in StatsService(db).get_exercise_records(user_id, exercise_id)]
