from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.models.user import User
from app.routers.deps import get_user_or_404
from app.routers.missions import get_mission_service
from app.schemas.mission import MissionErrorCode, MissionResult, TutorialCompleteRequest
from app.services.mission_service import MissionService
from app.services.tutorial_service import TutorialService

router = APIRouter(prefix="/users/{user_id}/tutorials", tags=["tutorials"])


@router.post("/{tutorial_id}/complete", response_model=MissionResult)
def complete_tutorial(
    tutorial_id: int,
    payload: Optional[TutorialCompleteRequest] = None,
    user: User = Depends(get_user_or_404),
    mission_service: MissionService = Depends(get_mission_service),
):
    """
    Mark a tutorial as watched

    mission_id is set when today's tuto mission got completed along the way.
    """
    result = TutorialService(mission_service.db, mission_service=mission_service).complete_tutorial(
        user.id,
        tutorial_id,
        feedback=payload.feedback if payload else None,
    )
    if result.error_code == MissionErrorCode.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Tutoriel introuvable")
    return result
