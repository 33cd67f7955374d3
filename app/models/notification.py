from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from app.database import Base
import enum


class NotificationType(str, enum.Enum):
    MISSION_REMINDER = "mission_reminder"
    MISSION_COMPLETED = "mission_completed"
    STREAK_MILESTONE = "streak_milestone"
    BADGE_EARNED = "badge_earned"
    LEVEL_UP = "level_up"
    WEEKLY_SUMMARY = "weekly_summary"
    GENERAL = "general"


class InAppNotification(Base):
    """Notification shown in the app notification center"""
    __tablename__ = "in_app_notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(String(30), nullable=False, default=NotificationType.GENERAL.value)
    data = Column(JSON, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def __repr__(self):
        return f"<InAppNotification(id={self.id}, user_id={self.user_id}, type={self.type})>"
