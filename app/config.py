from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Database
    database_url: str = "sqlite:///./missions.db"

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Cron endpoints (optional shared secret checked on X-Cron-Secret)
    cron_secret: str = ""

    # Anthropic Claude (caption suggestions)
    anthropic_api_key: str = ""
    claude_model: str = "claude-3-5-haiku-latest"

    # Daily mission assignment
    mission_lock_timeout_ms: int = 5000
    mission_history_limit: int = 20
    planned_days_ahead: int = 30

    # Reminders
    reminder_timezone: str = "Europe/Paris"
    default_notification_time: str = "10:00"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings"""
    return Settings()
