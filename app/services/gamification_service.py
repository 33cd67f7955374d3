from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.gamification import Streak, Badge, BadgeUnlock, BadgeCriteria
from app.models.mission import Mission, MissionStatus
from app.models.tutorial import TutorialCompletion
from app.schemas.progress import StreakInfo


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class GamificationService:
    """Streaks and badges"""

    def __init__(self, db: Session):
        self.db = db

    def _get_streak(self, user_id: int) -> Optional[Streak]:
        return self.db.query(Streak).filter(Streak.user_id == user_id).first()

    def update_streak(self, user_id: int, today: Optional[date] = None) -> Streak:
        """
        Record an activity for today.

        Same day: unchanged. Next day: +1. Longer gap: back to 1.
        """
        today = today or _utc_today()
        streak = self._get_streak(user_id)

        if not streak:
            streak = Streak(
                user_id=user_id,
                current_streak=1,
                longest_streak=1,
                last_activity_date=today,
            )
            self.db.add(streak)
            self.db.commit()
            self.db.refresh(streak)
            return streak

        last_activity = streak.last_activity_date
        if last_activity is None:
            streak.current_streak = 1
            streak.longest_streak = max(streak.longest_streak or 0, 1)
            streak.last_activity_date = today
        else:
            days_diff = (today - last_activity).days
            if days_diff == 1:
                streak.current_streak += 1
                streak.longest_streak = max(streak.longest_streak or 0, streak.current_streak)
                streak.last_activity_date = today
            elif days_diff > 1:
                streak.current_streak = 1
                streak.last_activity_date = today

        self.db.commit()
        self.db.refresh(streak)
        return streak

    def check_streak_reset(self, user_id: int, today: Optional[date] = None) -> bool:
        """Break the streak after a missed day; returns True when it was reset"""
        streak = self._get_streak(user_id)
        if not streak or not streak.last_activity_date:
            return False

        today = today or _utc_today()
        if (today - streak.last_activity_date).days > 1 and streak.current_streak > 0:
            streak.current_streak = 0
            self.db.commit()
            return True
        return False

    def get_users_with_active_streak(self) -> list[int]:
        rows = self.db.query(Streak.user_id).filter(Streak.current_streak > 0).all()
        return [row.user_id for row in rows]

    def get_streak_info(self, user_id: int, today: Optional[date] = None) -> StreakInfo:
        streak = self._get_streak(user_id)
        if not streak:
            return StreakInfo(encouragement=self.get_streak_encouragement(0, False))

        today = today or _utc_today()
        is_at_risk = (
            streak.current_streak > 0
            and streak.last_activity_date is not None
            and streak.last_activity_date != today
        )
        return StreakInfo(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            is_at_risk=is_at_risk,
            encouragement=self.get_streak_encouragement(streak.current_streak, is_at_risk),
        )

    @staticmethod
    def get_streak_encouragement(current_streak: int, is_at_risk: bool) -> str:
        if is_at_risk:
            return "Fais ta mission pour garder ton streak ! 🔥"
        if current_streak == 0:
            return "Commence ta série dès maintenant !"
        if current_streak == 1:
            return "Premier jour, c'est parti ! 💪"
        if current_streak <= 3:
            return f"{current_streak} jours de suite, continue comme ça !"
        if current_streak <= 7:
            return f"{current_streak} jours de suite, tu es en feu ! 🔥"
        if current_streak <= 14:
            return f"{current_streak} jours, tu es un chef ! 👨‍🍳"
        if current_streak <= 30:
            return f"{current_streak} jours, incroyable régularité ! ⭐"
        return f"{current_streak} jours, tu es une légende ! 🏆"

    def get_user_stats(self, user_id: int) -> dict:
        """Counters the badge criteria are evaluated against"""
        missions_completed = (
            self.db.query(Mission)
            .filter(Mission.user_id == user_id, Mission.status == MissionStatus.COMPLETED.value)
            .count()
        )
        tutorials_viewed = (
            self.db.query(TutorialCompletion)
            .filter(TutorialCompletion.user_id == user_id)
            .count()
        )
        streak = self._get_streak(user_id)

        return {
            BadgeCriteria.MISSIONS_COMPLETED.value: missions_completed,
            BadgeCriteria.STREAK_DAYS.value: streak.longest_streak if streak else 0,
            BadgeCriteria.TUTORIALS_VIEWED.value: tutorials_viewed,
        }

    def check_badge_unlocks(self, user_id: int) -> list[Badge]:
        """Unlock every badge whose criteria is now met, returns the new ones"""
        badges = self.db.query(Badge).filter(Badge.is_active.is_(True)).order_by(Badge.order.asc()).all()
        unlocked_ids = {
            row.badge_id
            for row in self.db.query(BadgeUnlock.badge_id).filter(BadgeUnlock.user_id == user_id).all()
        }
        stats = self.get_user_stats(user_id)

        newly_unlocked = []
        now = datetime.now(timezone.utc)
        for badge in badges:
            if badge.id in unlocked_ids:
                continue
            if stats.get(badge.criteria_type, 0) >= badge.criteria_value:
                self.db.add(BadgeUnlock(user_id=user_id, badge_id=badge.id, unlocked_at=now))
                newly_unlocked.append(badge)

        if newly_unlocked:
            self.db.commit()
        return newly_unlocked

    def get_user_badges(self, user_id: int) -> list[dict]:
        """All active badges with the unlock status of the user"""
        badges = self.db.query(Badge).filter(Badge.is_active.is_(True)).order_by(Badge.order.asc()).all()
        unlocks = {
            unlock.badge_id: unlock.unlocked_at
            for unlock in self.db.query(BadgeUnlock).filter(BadgeUnlock.user_id == user_id).all()
        }
        return [
            {
                "badge": badge,
                "unlocked": badge.id in unlocks,
                "unlocked_at": unlocks.get(badge.id),
            }
            for badge in badges
        ]
