"""
Achievement endpoints: a user's achievements and the admin catalog.
"""

from datetime import datetime
from uuid import UUID
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from liftlog.db.database import get_db
from liftlog.domain.enums import (
    AchievementCategory,
    AchievementRarity,
    MuscleGroup,
    RecordType,
)
from liftlog.models.achievements import Achievement, UserAchievement
from liftlog.services.achievement_service import AchievementService
from liftlog.utils.auth import get_current_user_id, require_admin

router = APIRouter()
admin_router = APIRouter()


class AchievementResponse(BaseModel):
    """Catalog entry."""

    achievement_id: UUID
    code: str
    name: str
    description: str
    category: AchievementCategory
    rarity: AchievementRarity
    icon: str
    threshold: float
    is_hidden: bool
    exercise_id: Optional[UUID] = None
    record_type: Optional[RecordType] = None
    muscle_group: Optional[MuscleGroup] = None


class UserAchievementResponse(BaseModel):
    """Catalog entry with the caller's earned state."""

    achievement: AchievementResponse
    earned: bool
    earned_at: Optional[datetime] = None
    notified: Optional[bool] = None


class EarnedAchievementResponse(BaseModel):
    """An achievement awarded by the current request."""

    achievement_id: UUID
    code: str
    name: str
    rarity: AchievementRarity
    icon: str
    earned_at: datetime


class MarkNotifiedRequest(BaseModel):
    achievement_ids: Optional[List[UUID]] = Field(
        None, description="Achievements to mark (all unnotified when omitted)"
    )


class MarkNotifiedResponse(BaseModel):
    updated: int


class AchievementCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1)
    description: str = ""
    category: AchievementCategory
    rarity: AchievementRarity = AchievementRarity.COMMON
    icon: str = "trophy"
    threshold: float = Field(1, ge=0)
    sort_order: int = 0
    is_hidden: bool = False
    exercise_id: Optional[UUID] = None
    record_type: Optional[RecordType] = None
    muscle_group: Optional[MuscleGroup] = None


class AchievementUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[AchievementCategory] = None
    rarity: Optional[AchievementRarity] = None
    icon: Optional[str] = None
    threshold: Optional[float] = Field(None, ge=0)
    sort_order: Optional[int] = None
    is_hidden: Optional[bool] = None
    exercise_id: Optional[UUID] = None
    record_type: Optional[RecordType] = None
    muscle_group: Optional[MuscleGroup] = None


def achievement_response(a: Achievement) -> AchievementResponse:
    return AchievementResponse(
        achievement_id=a.achievement_id,
        code=a.code,
        name=a.name,
        description=a.description,
        category=a.category,
        rarity=a.rarity,
        icon=a.icon,
        threshold=a.threshold,
        is_hidden=a.is_hidden,
        exercise_id=a.exercise_id,
        record_type=a.record_type,
        muscle_group=a.muscle_group,
    )


def earned_response(ua: UserAchievement) -> EarnedAchievementResponse:
    return EarnedAchievementResponse(
        achievement_id=ua.achievement_id,
        code=ua.achievement.code,
        name=ua.achievement.name,
        rarity=ua.achievement.rarity,
        icon=ua.achievement.icon,
        earned_at=ua.earned_at,
    )


@router.get(
    "/achievements",
    response_model=List[UserAchievementResponse],
    status_code=status.HTTP_200_OK,
)
async def list_achievements(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """All visible achievements with the caller's earned state; hidden ones show once earned."""
    views = AchievementService(db).list_for_user(user_id)
    return [
        UserAchievementResponse(
            achievement=achievement_response(v.achievement),
            earned=v.earned is not None,
            earned_at=v.earned.earned_at if v.earned else None,
            notified=v.earned.notified if v.earned else None,
        )
        for v in views
    ]


@router.get(
    "/achievements/unnotified",
    response_model=List[EarnedAchievementResponse],
    status_code=status.HTTP_200_OK,
)
async def list_unnotified_achievements(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [earned_response(ua) for ua in AchievementService(db).get_unnotified(user_id)]


@router.post(
    "/achievements/notified",
    response_model=MarkNotifiedResponse,
    status_code=status.HTTP_200_OK,
)
async def mark_achievements_notified(
    request: MarkNotifiedRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    updated = AchievementService(db).mark_notified(user_id, request.achievement_ids)
    return MarkNotifiedResponse(updated=updated)


@admin_router.post(
    "/achievements",
    response_model=AchievementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_achievement(
    request: AchievementCreateRequest,
    admin_id: UUID = Depends(require_admin),
    db: Session = Depends(get_db),
):
    fields = request.model_dump()
    achievement = AchievementService(db).create(
        admin_id,
        code=fields.pop("code"),
        name=fields.pop("name"),
        category=fields.pop("category"),
        **fields,
    )
    return achievement_response(achievement)


@admin_router.patch(
    "/achievements/{achievement_id}",
    response_model=AchievementResponse,
    status_code=status.HTTP_200_OK,
)
async def update_achievement(
    achievement_id: UUID,
    request: AchievementUpdateRequest,
    admin_id: UUID = Depends(require_admin),
    db: Session = Depends(get_db),
):
    achievement = AchievementService(db).update(
        admin_id, achievement_id, **request.model_dump(exclude_unset=True)
    )
    return achievement_response(achievement)


@admin_router.delete(
    "/achievements/{achievement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_achievement(
    achievement_id: UUID,
    admin_id: UUID = Depends(require_admin),
    db: Session = Depends(get_db),
):
    AchievementService(db).delete(admin_id, achievement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
