from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Date, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class BadgeCriteria(str, enum.Enum):
    """What a badge counts"""
    MISSIONS_COMPLETED = "missions_completed"
    STREAK_DAYS = "streak_days"
    TUTORIALS_VIEWED = "tutorials_viewed"


class XpActionType(str, enum.Enum):
    MISSION_COMPLETED = "mission_completed"
    TUTORIAL_COMPLETED = "tutorial_completed"
    STREAK_DAY = "streak_day"
    FIRST_MISSION = "first_mission"
    FIRST_TUTORIAL = "first_tutorial"
    WEEKLY_STREAK = "weekly_streak"
    BADGE_EARNED = "badge_earned"


class Streak(Base):
    """Consecutive active days of a user"""
    __tablename__ = "streaks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Streak(user_id={self.user_id}, current={self.current_streak}, longest={self.longest_streak})>"


class Badge(Base):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String(50), nullable=False, default="")
    criteria_type = Column(String(50), nullable=False)
    criteria_value = Column(Integer, nullable=False)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Badge(slug={self.slug}, {self.criteria_type}>={self.criteria_value})>"


class BadgeUnlock(Base):
    __tablename__ = "badge_unlocks"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_badge_unlock_user_badge"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_id = Column(Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    unlocked_at = Column(DateTime(timezone=True), nullable=False)

    badge = relationship("Badge")


class LevelThreshold(Base):
    """XP needed to reach each level"""
    __tablename__ = "level_thresholds"

    id = Column(Integer, primary_key=True, index=True)
    level = Column(Integer, unique=True, nullable=False)
    xp_required = Column(Integer, nullable=False)
    name = Column(String(50), nullable=True)
    icon = Column(String(10), nullable=True)

    def __repr__(self):
        return f"<LevelThreshold(level={self.level}, xp_required={self.xp_required})>"


class XpAction(Base):
    """XP granted per action type"""
    __tablename__ = "xp_actions"

    id = Column(Integer, primary_key=True, index=True)
    action_type = Column(String(50), unique=True, nullable=False)
    xp_amount = Column(Integer, nullable=False)
    description = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
