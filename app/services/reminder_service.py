from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.log import get_logger
from app.models.notification import NotificationType
from app.models.restaurant import Restaurant
from app.models.user import User
from app.services.gamification_service import GamificationService
from app.services.mission_service import MissionService
from app.services.notification_service import InAppNotificationService

logger = get_logger(__name__)


class ReminderService:
    """Scheduled jobs: daily mission reminders, streak resets, pre-assignment"""

    def __init__(
        self,
        db: Session,
        mission_service: Optional[MissionService] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.mission_service = mission_service or MissionService(db, settings=self.settings)
        self.notification_service = InAppNotificationService(db)
        self.gamification_service = GamificationService(db)

    def get_eligible_users(self) -> list[User]:
        """Users whose restaurant follows a strategy"""
        return (
            self.db.query(User)
            .join(Restaurant, Restaurant.user_id == User.id)
            .filter(Restaurant.strategy_id.isnot(None))
            .order_by(User.id.asc())
            .all()
        )

    def current_local_time(self) -> str:
        return datetime.now(ZoneInfo(self.settings.reminder_timezone)).strftime("%H:%M")

    def send_daily_reminders(self, current_time: Optional[str] = None) -> dict:
        """
        Create the "Mission du jour" notification for every user whose
        reminder time is now.

        The reminder time is the recommended mission's template
        notification_time, else the user's, else the configured default.
        """
        current_time = current_time or self.current_local_time()
        created = skipped = failed = 0

        for user in self.get_eligible_users():
            try:
                missions = self.mission_service.get_today_missions(user.id)
                recommended = next((m for m in missions if m.is_recommended and m.is_pending), None)
                if not recommended:
                    skipped += 1
                    continue

                effective_time = (
                    recommended.mission_template.notification_time
                    or user.notification_time
                    or self.settings.default_notification_time
                )
                if effective_time != current_time:
                    skipped += 1
                    continue

                self.notification_service.create(
                    user_id=user.id,
                    title="Mission du jour 🔔",
                    body=recommended.mission_template.title,
                    type=NotificationType.MISSION_REMINDER.value,
                    data={"missionId": recommended.id, "url": "/missions"},
                )
                created += 1
            except Exception:
                self.db.rollback()
                failed += 1
                logger.exception("event=reminder.failed | user_id=%s", user.id)

        logger.info(
            "event=reminder.run | time=%s | created=%s | skipped=%s | failed=%s",
            current_time, created, skipped, failed,
        )
        return {"time": current_time, "created": created, "skipped": skipped, "failed": failed}

    def check_streaks(self) -> dict:
        """Reset the streaks of users who missed a day"""
        checked = reset = 0
        for user_id in self.gamification_service.get_users_with_active_streak():
            checked += 1
            if self.gamification_service.check_streak_reset(user_id):
                reset += 1
        logger.info("event=streak.check | checked=%s | reset=%s", checked, reset)
        return {"checked": checked, "reset": reset}

    def assign_all_missions(self) -> dict:
        """Create today's missions ahead of the first visit"""
        assigned = failed = 0
        for user in self.get_eligible_users():
            try:
                result = self.mission_service.assign_today_missions(user.id)
            except Exception:
                self.db.rollback()
                failed += 1
                logger.exception("event=mission.preassign_failed | user_id=%s", user.id)
                continue
            if result.error_code:
                failed += 1
            else:
                assigned += 1
        logger.info("event=mission.preassign | assigned=%s | failed=%s", assigned, failed)
        return {"assigned": assigned, "failed": failed}
