from app.schemas.mission import (
    MissionErrorCode,
    TemplateSummary,
    MissionResponse,
    MissionResult,
    AssignmentResult,
    TodayMissionsResponse,
    PlannedDaysResponse,
    CaptionRequest,
    CaptionResponse,
    TutorialCompleteRequest,
)
from app.schemas.progress import (
    StreakInfo,
    LevelUpResult,
    XpResult,
    LevelInfo,
    BadgeResponse,
    BadgeStatus,
    NotificationResponse,
    KeyMetric,
    NotificationListResponse,
    XpActionResponse,
)

__all__ = [
    "MissionErrorCode",
    "TemplateSummary",
    "MissionResponse",
    "MissionResult",
    "AssignmentResult",
    "TodayMissionsResponse",
    "PlannedDaysResponse",
    "CaptionRequest",
    "CaptionResponse",
    "TutorialCompleteRequest",
    "StreakInfo",
    "LevelUpResult",
    "XpResult",
    "LevelInfo",
    "BadgeResponse",
    "BadgeStatus",
    "NotificationResponse",
    "KeyMetric",
    "NotificationListResponse",
    "XpActionResponse",
]
