from app.services.mission_service import MissionService
from app.services.gamification_service import GamificationService
from app.services.level_service import LevelService
from app.services.notification_service import InAppNotificationService
from app.services.statistics_service import StatisticsService
from app.services.tutorial_service import TutorialService
from app.services.reminder_service import ReminderService
from app.services.ai_service import AIService

__all__ = [
    "MissionService",
    "GamificationService",
    "LevelService",
    "InAppNotificationService",
    "StatisticsService",
    "TutorialService",
    "ReminderService",
    "AIService",
]
