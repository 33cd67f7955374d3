from sqlalchemy import Column, Integer, String, Date, Float, ForeignKey, UniqueConstraint
from app.database import Base
import enum


class MetricType(str, enum.Enum):
    POSTS_COUNT = "posts_count"
    STORIES_COUNT = "stories_count"
    REELS_COUNT = "reels_count"
    TUTORIALS_VIEWED = "tutorials_viewed"
    MISSIONS_COMPLETED = "missions_completed"
    STREAK_MAX = "streak_max"


class Statistic(Base):
    """Daily snapshot of a cumulative metric"""
    __tablename__ = "statistics"
    __table_args__ = (
        UniqueConstraint("user_id", "metric_type", "recorded_at", name="uq_statistic_user_metric_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    metric_type = Column(String(30), nullable=False)
    value = Column(Float, nullable=False, default=0)
    recorded_at = Column(Date, nullable=False)

    def __repr__(self):
        return f"<Statistic(user_id={self.user_id}, {self.metric_type}={self.value}, day={self.recorded_at})>"
