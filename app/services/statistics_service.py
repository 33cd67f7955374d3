from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.mission import Mission, MissionStatus
from app.models.mission_template import MissionTemplate, MissionType
from app.models.tutorial import TutorialCompletion
from app.models.gamification import Streak
from app.models.statistic import Statistic, MetricType
from app.schemas.progress import KeyMetric

# Mission type -> counter it feeds
TYPE_METRICS = {
    MissionType.POST.value: MetricType.POSTS_COUNT.value,
    MissionType.STORY.value: MetricType.STORIES_COUNT.value,
    MissionType.REEL.value: MetricType.REELS_COUNT.value,
}


class StatisticsService:
    """Cumulative progress metrics, snapshotted per UTC day"""

    def __init__(self, db: Session):
        self.db = db

    def calculate_all_metrics(self, user_id: int) -> dict[str, int]:
        metrics = {metric.value: 0 for metric in MetricType}

        completed_types = (
            self.db.query(MissionTemplate.type)
            .join(Mission, Mission.mission_template_id == MissionTemplate.id)
            .filter(Mission.user_id == user_id, Mission.status == MissionStatus.COMPLETED.value)
            .all()
        )
        metrics[MetricType.MISSIONS_COMPLETED.value] = len(completed_types)
        for row in completed_types:
            metric = TYPE_METRICS.get(row.type)
            if metric:
                metrics[metric] += 1

        metrics[MetricType.TUTORIALS_VIEWED.value] = (
            self.db.query(TutorialCompletion).filter(TutorialCompletion.user_id == user_id).count()
        )
        streak = self.db.query(Streak).filter(Streak.user_id == user_id).first()
        metrics[MetricType.STREAK_MAX.value] = streak.longest_streak if streak else 0
        return metrics

    def calculate_daily_stats(self, user_id: int, day: Optional[date] = None) -> dict[str, int]:
        """Upsert today's snapshot of every metric"""
        day = day or datetime.now(timezone.utc).date()
        metrics = self.calculate_all_metrics(user_id)

        existing = {
            stat.metric_type: stat
            for stat in self.db.query(Statistic).filter(
                Statistic.user_id == user_id, Statistic.recorded_at == day
            )
        }
        for metric_type, value in metrics.items():
            stat = existing.get(metric_type)
            if stat:
                stat.value = value
            else:
                self.db.add(Statistic(user_id=user_id, metric_type=metric_type, value=value, recorded_at=day))

        self.db.commit()
        return metrics

    def get_key_metrics(self, user_id: int) -> list[KeyMetric]:
        metrics = self.calculate_all_metrics(user_id)
        return [
            KeyMetric(
                type=MetricType.MISSIONS_COMPLETED.value,
                label="Missions",
                value=metrics[MetricType.MISSIONS_COMPLETED.value],
                icon="✓",
            ),
            KeyMetric(
                type=MetricType.TUTORIALS_VIEWED.value,
                label="Tutoriels",
                value=metrics[MetricType.TUTORIALS_VIEWED.value],
                icon="📚",
            ),
            KeyMetric(
                type=MetricType.STREAK_MAX.value,
                label="Record streak",
                value=metrics[MetricType.STREAK_MAX.value],
                icon="🔥",
            ),
        ]

    def get_evolution(self, user_id: int, metric_type: str, limit: int = 30) -> list[dict]:
        """Recorded values of one metric, oldest first"""
        stats = (
            self.db.query(Statistic)
            .filter(Statistic.user_id == user_id, Statistic.metric_type == metric_type)
            .order_by(Statistic.recorded_at.desc())
            .limit(limit)
            .all()
        )
        return [{"date": stat.recorded_at.isoformat(), "value": stat.value} for stat in reversed(stats)]
