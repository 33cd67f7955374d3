from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.notification import InAppNotification, NotificationType


class InAppNotificationService:
    """In-app notification center"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        title: str,
        body: str,
        type: str = NotificationType.GENERAL.value,
        data: Optional[dict] = None,
    ) -> InAppNotification:
        """Create a notification for a user"""
        notification = InAppNotification(
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            data=data,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_for_user(
        self,
        user_id: int,
        limit: Optional[int] = None,
        unread_only: bool = False,
    ) -> list[InAppNotification]:
        """Notifications of a user, newest first"""
        query = (
            self.db.query(InAppNotification)
            .filter(InAppNotification.user_id == user_id)
            .order_by(InAppNotification.created_at.desc(), InAppNotification.id.desc())
        )
        if unread_only:
            query = query.filter(InAppNotification.read_at.is_(None))
        if limit:
            query = query.limit(limit)
        return query.all()

    def count_unread(self, user_id: int) -> int:
        return (
            self.db.query(InAppNotification)
            .filter(InAppNotification.user_id == user_id, InAppNotification.read_at.is_(None))
            .count()
        )

    def mark_as_read(self, notification_id: int, user_id: int) -> bool:
        """Mark one notification as read; False when it does not belong to the user"""
        notification = (
            self.db.query(InAppNotification)
            .filter(InAppNotification.id == notification_id, InAppNotification.user_id == user_id)
            .first()
        )
        if not notification:
            return False

        if notification.read_at is None:
            notification.read_at = datetime.now(timezone.utc)
            self.db.commit()
        return True

    def mark_all_as_read(self, user_id: int) -> int:
        """Mark every unread notification as read, returns how many changed"""
        count = (
            self.db.query(InAppNotification)
            .filter(InAppNotification.user_id == user_id, InAppNotification.read_at.is_(None))
            .update({InAppNotification.read_at: datetime.now(timezone.utc)}, synchronize_session=False)
        )
        self.db.commit()
        return count
