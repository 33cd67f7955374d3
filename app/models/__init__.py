from app.models.user import User
from app.models.strategy import Strategy
from app.models.restaurant import Restaurant, PublicationRhythm, RestaurantType
from app.models.tutorial import Tutorial, TutorialCompletion, TutorialFeedback
from app.models.mission_template import MissionTemplate, MissionType, PUBLICATION_TYPES
from app.models.mission import Mission, MissionStatus
from app.models.gamification import (
    Streak,
    Badge,
    BadgeUnlock,
    BadgeCriteria,
    LevelThreshold,
    XpAction,
    XpActionType,
)
from app.models.notification import InAppNotification, NotificationType
from app.models.statistic import Statistic, MetricType

__all__ = [
    "User",
    "Strategy",
    "Restaurant",
    "PublicationRhythm",
    "RestaurantType",
    "Tutorial",
    "TutorialCompletion",
    "TutorialFeedback",
    "MissionTemplate",
    "MissionType",
    "PUBLICATION_TYPES",
    "Mission",
    "MissionStatus",
    "Streak",
    "Badge",
    "BadgeUnlock",
    "BadgeCriteria",
    "LevelThreshold",
    "XpAction",
    "XpActionType",
    "InAppNotification",
    "NotificationType",
    "Statistic",
    "MetricType",
]
