from pydantic import BaseModel, Field
from typing import Optional, Any
from datetime import datetime


class StreakInfo(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    is_at_risk: bool = False
    encouragement: str = ""


class LevelUpResult(BaseModel):
    leveled_up: bool = False
    new_level: Optional[int] = None
    new_level_name: Optional[str] = None
    new_level_icon: Optional[str] = None


class XpResult(BaseModel):
    xp_added: int = 0
    level_up: LevelUpResult = Field(default_factory=LevelUpResult)


class LevelInfo(BaseModel):
    xp_total: int
    current_level: int
    level_name: str
    level_icon: str
    xp_for_next_level: int
    xp_progress_in_level: int
    progress_percent: int
    is_max_level: bool


class BadgeResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    icon: str

    class Config:
        from_attributes = True


class BadgeStatus(BaseModel):
    badge: BadgeResponse
    unlocked: bool
    unlocked_at: Optional[datetime] = None


class NotificationResponse(BaseModel):
    id: int
    title: str
    body: str
    type: str
    data: Optional[dict[str, Any]] = None
    read_at: Optional[datetime] = None
    is_read: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class XpActionResponse(BaseModel):
    action_type: str
    xp_amount: int
    description: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class KeyMetric(BaseModel):
    type: str
    label: str
    value: float
    icon: str


class NotificationListResponse(BaseModel):
    unread_count: int
    notifications: list[NotificationResponse]
