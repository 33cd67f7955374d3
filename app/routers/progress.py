from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.routers.deps import get_user_or_404
from app.schemas.progress import (
    BadgeResponse,
    BadgeStatus,
    KeyMetric,
    LevelInfo,
    NotificationListResponse,
    NotificationResponse,
    StreakInfo,
    XpActionResponse,
)
from app.services.gamification_service import GamificationService
from app.services.level_service import LevelService
from app.services.notification_service import InAppNotificationService
from app.services.statistics_service import StatisticsService

router = APIRouter(prefix="/users/{user_id}", tags=["progress"])


@router.get("/streak", response_model=StreakInfo)
def get_streak(user: User = Depends(get_user_or_404), db: Session = Depends(get_db)):
    return GamificationService(db).get_streak_info(user.id)


@router.get("/badges", response_model=List[BadgeStatus])
def get_badges(user: User = Depends(get_user_or_404), db: Session = Depends(get_db)):
    return [
        BadgeStatus(
            badge=BadgeResponse.model_validate(item["badge"]),
            unlocked=item["unlocked"],
            unlocked_at=item["unlocked_at"],
        )
        for item in GamificationService(db).get_user_badges(user.id)
    ]


@router.get("/level", response_model=LevelInfo)
def get_level(user: User = Depends(get_user_or_404), db: Session = Depends(get_db)):
    return LevelService(db).get_level_info(user.id)


@router.get("/xp-actions", response_model=List[XpActionResponse])
def get_xp_actions(user: User = Depends(get_user_or_404), db: Session = Depends(get_db)):
    """What each action is worth, for the level screen"""
    return [XpActionResponse.model_validate(a) for a in LevelService(db).get_all_xp_actions()]


@router.get("/stats", response_model=List[KeyMetric])
def get_stats(user: User = Depends(get_user_or_404), db: Session = Depends(get_db)):
    return StatisticsService(db).get_key_metrics(user.id)


@router.get("/notifications", response_model=NotificationListResponse)
def get_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_user_or_404),
    db: Session = Depends(get_db),
):
    service = InAppNotificationService(db)
    return NotificationListResponse(
        unread_count=service.count_unread(user.id),
        notifications=[
            NotificationResponse.model_validate(n)
            for n in service.get_for_user(user.id, limit=limit, unread_only=unread_only)
        ],
    )


@router.post("/notifications/read-all")
def mark_all_notifications_read(user: User = Depends(get_user_or_404), db: Session = Depends(get_db)):
    return {"updated": InAppNotificationService(db).mark_all_as_read(user.id)}


@router.post("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    user: User = Depends(get_user_or_404),
    db: Session = Depends(get_db),
):
    if not InAppNotificationService(db).mark_as_read(notification_id, user.id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"status": "ok"}
