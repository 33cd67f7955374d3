from typing import Optional

from sqlalchemy.orm import Session

from app.models.user import User
from app.models.gamification import LevelThreshold, XpAction
from app.models.notification import NotificationType
from app.schemas.progress import LevelInfo, LevelUpResult, XpResult
from app.services.notification_service import InAppNotificationService
from app.log import get_logger

logger = get_logger(__name__)


class LevelService:
    """XP and levels"""

    def __init__(self, db: Session):
        self.db = db
        self.notification_service = InAppNotificationService(db)

    def add_xp(self, user_id: int, action_type: str) -> XpResult:
        """
        Grant the XP configured for an action.

        Unknown or inactive actions grant nothing.
        """
        xp_action = (
            self.db.query(XpAction)
            .filter(XpAction.action_type == action_type, XpAction.is_active.is_(True))
            .first()
        )
        if not xp_action:
            return XpResult()

        user = self.db.get(User, user_id)
        if not user:
            return XpResult()

        user.xp_total = (user.xp_total or 0) + xp_action.xp_amount
        self.db.commit()
        logger.info(
            "event=xp.added | user_id=%s | action=%s | xp=%s | total=%s",
            user_id, action_type, xp_action.xp_amount, user.xp_total,
        )

        return XpResult(xp_added=xp_action.xp_amount, level_up=self.check_level_up(user_id))

    def check_level_up(self, user_id: int) -> LevelUpResult:
        """Move the user to the highest level their XP reaches"""
        user = self.db.get(User, user_id)
        if not user:
            return LevelUpResult()

        current_level = user.current_level or 1
        new_level = current_level
        new_threshold: Optional[LevelThreshold] = None
        for threshold in self.get_all_levels():
            if (user.xp_total or 0) >= threshold.xp_required:
                new_level = threshold.level
                new_threshold = threshold

        if new_level <= current_level:
            return LevelUpResult()

        user.current_level = new_level
        self.db.commit()

        level_name = (new_threshold.name if new_threshold else None) or f"Niveau {new_level}"
        level_icon = (new_threshold.icon if new_threshold else None) or "⭐"
        self.notification_service.create(
            user_id=user_id,
            type=NotificationType.LEVEL_UP.value,
            title=f"{level_icon} Bravo ! Tu passes au {level_name} !",
            body=f"Tu es maintenant niveau {new_level}. Continue comme ça !",
            data={"level": new_level, "levelName": level_name, "levelIcon": level_icon},
        )
        logger.info("event=level.up | user_id=%s | level=%s", user_id, new_level)

        return LevelUpResult(
            leveled_up=True,
            new_level=new_level,
            new_level_name=level_name,
            new_level_icon=level_icon,
        )

    def get_level_info(self, user_id: int) -> LevelInfo:
        user = self.db.get(User, user_id)
        if not user:
            return LevelInfo(
                xp_total=0,
                current_level=1,
                level_name="Débutant",
                level_icon="🌱",
                xp_for_next_level=50,
                xp_progress_in_level=0,
                progress_percent=0,
                is_max_level=False,
            )

        xp_total = user.xp_total or 0
        current_level = user.current_level or 1
        current = self.db.query(LevelThreshold).filter(LevelThreshold.level == current_level).first()
        following = self.db.query(LevelThreshold).filter(LevelThreshold.level == current_level + 1).first()

        level_name = (current.name if current else None) or f"Niveau {current_level}"
        level_icon = (current.icon if current else None) or "⭐"

        if not following:
            return LevelInfo(
                xp_total=xp_total,
                current_level=current_level,
                level_name=level_name,
                level_icon=level_icon,
                xp_for_next_level=0,
                xp_progress_in_level=0,
                progress_percent=100,
                is_max_level=True,
            )

        current_level_xp = current.xp_required if current else 0
        xp_in_level = max(0, xp_total - current_level_xp)
        xp_needed = following.xp_required - current_level_xp
        progress = min(100, max(0, round(xp_in_level / xp_needed * 100))) if xp_needed > 0 else 0

        return LevelInfo(
            xp_total=xp_total,
            current_level=current_level,
            level_name=level_name,
            level_icon=level_icon,
            xp_for_next_level=following.xp_required - xp_total,
            xp_progress_in_level=xp_in_level,
            progress_percent=progress,
            is_max_level=False,
        )

    def get_all_levels(self) -> list[LevelThreshold]:
        return self.db.query(LevelThreshold).order_by(LevelThreshold.level.asc()).all()

    def get_all_xp_actions(self) -> list[XpAction]:
        return self.db.query(XpAction).order_by(XpAction.xp_amount.desc()).all()
