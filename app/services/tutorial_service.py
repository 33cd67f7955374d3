from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.log import get_logger
from app.models.tutorial import Tutorial, TutorialCompletion, TutorialFeedback
from app.models.gamification import XpActionType
from app.schemas.mission import MissionErrorCode, MissionResult
from app.services.level_service import LevelService
from app.services.mission_service import MissionService

logger = get_logger(__name__)


class TutorialService:
    """Tutorial completions and the tuto missions they close"""

    def __init__(self, db: Session, mission_service: Optional[MissionService] = None):
        self.db = db
        self.mission_service = mission_service or MissionService(db)
        self.level_service = LevelService(db)

    def get_completion(self, user_id: int, tutorial_id: int) -> Optional[TutorialCompletion]:
        return (
            self.db.query(TutorialCompletion)
            .filter(TutorialCompletion.user_id == user_id, TutorialCompletion.tutorial_id == tutorial_id)
            .first()
        )

    def complete_tutorial(
        self,
        user_id: int,
        tutorial_id: int,
        feedback: Optional[str] = None,
    ) -> MissionResult:
        """
        Record that the user finished a tutorial, then complete today's
        matching tuto mission if there is one.

        Recording is idempotent; XP for the tutorial is granted on the first
        completion only. The returned result carries the completed mission id,
        if any.
        """
        tutorial = (
            self.db.query(Tutorial)
            .filter(Tutorial.id == tutorial_id, Tutorial.is_active.is_(True))
            .first()
        )
        if not tutorial:
            return MissionResult.fail(MissionErrorCode.NOT_FOUND)

        if feedback is not None:
            feedback = TutorialFeedback(feedback).value

        first_completion = False
        completion = self.get_completion(user_id, tutorial_id)
        if completion is None:
            try:
                self.db.add(TutorialCompletion(
                    user_id=user_id,
                    tutorial_id=tutorial_id,
                    completed_at=datetime.now(timezone.utc),
                    feedback=feedback,
                ))
                self.db.commit()
                first_completion = True
            except IntegrityError:
                # Concurrent completion of the same tutorial
                self.db.rollback()
        elif feedback is not None:
            completion.feedback = feedback
            self.db.commit()

        if first_completion:
            logger.info("event=tutorial.completed | user_id=%s | tutorial_id=%s", user_id, tutorial_id)
            is_first_tutorial = (
                self.db.query(TutorialCompletion).filter(TutorialCompletion.user_id == user_id).count() == 1
            )
            self.level_service.add_xp(user_id, XpActionType.TUTORIAL_COMPLETED.value)
            if is_first_tutorial:
                self.level_service.add_xp(user_id, XpActionType.FIRST_TUTORIAL.value)

        result = self.mission_service.complete_tuto_mission(user_id, tutorial_id)
        if result.success:
            return result
        return MissionResult.ok()
