"""
Achievement catalog and earned-achievement reads.

Earning happens only in the progress fan-out. This service lists what a user
has earned, clears the celebration flag, and lets admins edit the catalog.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from liftlog.db.transaction import unit_of_work
from liftlog.domain.enums import AchievementCategory
from liftlog.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from liftlog.models.achievements import Achievement, UserAchievement
from liftlog.models.user import User

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "rarity",
    "icon",
    "threshold",
    "sort_order",
    "is_hidden",
    "exercise_id",
    "record_type",
    "muscle_group",
)


@dataclass
class AchievementView:
    """A catalog entry with the user's earned row, if any."""

    achievement: Achievement
    earned: Optional[UserAchievement] = None


class AchievementService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: UUID) -> List[AchievementView]:
        """
        Every visible achievement with the user's progress.

        Hidden achievements appear only once earned.
        """
        earned = {
            ua.achievement_id: ua
            for ua in self.db.query(UserAchievement).filter(UserAchievement.user_id == user_id)
        }
        catalog = self.db.query(Achievement).order_by(Achievement.sort_order, Achievement.code).all()
        return [
            AchievementView(achievement=a, earned=earned.get(a.achievement_id))
            for a in catalog
            if not a.is_hidden or a.achievement_id in earned
        ]

    def get_unnotified(self, user_id: UUID) -> List[UserAchievement]:
        return (
            self.db.query(UserAchievement)
            .filter(UserAchievement.user_id == user_id, UserAchievement.notified.is_(False))
            .order_by(UserAchievement.earned_at)
            .all()
        )

    def mark_notified(self, user_id: UUID, achievement_ids: Optional[List[UUID]] = None) -> int:
        """Clear the notified flag on the user's earned achievements (all when no ids given)."""
        with unit_of_work(self.db):
            query = self.db.query(UserAchievement).filter(
                UserAchievement.user_id == user_id, UserAchievement.notified.is_(False)
            )
            if achievement_ids is not None:
                query = query.filter(UserAchievement.achievement_id.in_(achievement_ids))
            updated = query.update({UserAchievement.notified: True}, synchronize_session="fetch")
        return updated

    # Admin catalog

    def create(self, actor_id: UUID, code: str, name: str, category: AchievementCategory, **fields) -> Achievement:
        """
        Add an achievement to the catalog.

        Raises:
            ForbiddenError: If the actor is not an admin
            ConflictError: If the code is already taken
        """
        self._require_admin(actor_id)
        with unit_of_work(self.db):
            if self.db.query(Achievement).filter(Achievement.code == code).first() is not None:
                raise ConflictError(f"Achievement code already exists: {code}")
            achievement = Achievement(code=code, name=name, category=category)
            self._apply(achievement, fields)
            self.db.add(achievement)
            self.db.flush()

        logger.info(f"[ACHIEVEMENT] Admin {actor_id} created {code}")
        return achievement

    def update(self, actor_id: UUID, achievement_id: UUID, **fields) -> Achievement:
        self._require_admin(actor_id)
        with unit_of_work(self.db):
            achievement = self.db.get(Achievement, achievement_id)
            if achievement is None:
                raise NotFoundError("Achievement", achievement_id)
            self._apply(achievement, fields)
            self.db.flush()

        logger.info(f"[ACHIEVEMENT] Admin {actor_id} updated {achievement.code}")
        return achievement

    def delete(self, actor_id: UUID, achievement_id: UUID) -> None:
        """Remove a catalog entry; earned rows go with it."""
        self._require_admin(actor_id)
        with unit_of_work(self.db):
            achievement = self.db.get(Achievement, achievement_id)
            if achievement is None:
                raise NotFoundError("Achievement", achievement_id)
            self.db.query(UserAchievement).filter(
                UserAchievement.achievement_id == achievement_id
            ).delete(synchronize_session=False)
            self.db.delete(achievement)

        logger.info(f"[ACHIEVEMENT] Admin {actor_id} deleted {achievement_id}")

    def _require_admin(self, actor_id: UUID) -> None:
        user = self.db.get(User, actor_id)
        if user is None or not user.is_admin:
            raise ForbiddenError("Admin access required")

    @staticmethod
    def _apply(achievement: Achievement, fields: dict) -> None:
        for key, value in fields.items():
            if key not in EDITABLE_FIELDS:
                raise ValidationError(f"Unknown achievement field: {key}", field=key)
            setattr(achievement, key, value)
        if achievement.threshold is not None and achievement.threshold < 0:
            raise ValidationError("threshold must be non-negative", field="threshold")
