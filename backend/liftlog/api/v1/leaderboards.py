"""
Leaderboard endpoints.
"""

from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from liftlog.db.database import get_db
from liftlog.services.leaderboard_service import (
    LeaderboardMetric,
    LeaderboardService,
    TimeRange,
)

router = APIRouter()


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: UUID
    display_name: Optional[str]
    value: float


@router.get(
    "/leaderboards/{metric}",
    response_model=List[LeaderboardEntryResponse],
    status_code=status.HTTP_200_OK,
)
async def get_leaderboard(
    metric: LeaderboardMetric,
    time_range: TimeRange = Query(TimeRange.ALL, description="week, month or all"),
    limit: Optional[int] = Query(None, ge=1, description="Capped at the configured maximum"),
    db: Session = Depends(get_db),
):
    """Global leaderboard for volume, workouts, streak or prs."""
    entries = LeaderboardService(db).get_leaderboard(metric, time_range, limit)
    return [
        LeaderboardEntryResponse(
            rank=e.rank, user_id=e.user_id, display_name=e.display_name, value=e.value
        )
        for e in entries
    ]
