"""
Daily missions of a user

GET  /users/{user_id}/missions/today           today's missions (created on first call)
POST /users/{user_id}/missions/{id}/complete   complete / skip / reload
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.routers.deps import ensure_success, get_user_or_404, raise_for_error
from app.schemas.mission import (
    CaptionRequest,
    CaptionResponse,
    MissionErrorCode,
    MissionResponse,
    MissionResult,
    PlannedDaysResponse,
    TodayMissionsResponse,
)
from app.services.ai_service import AIService
from app.services.mission_service import MissionService

router = APIRouter(prefix="/users/{user_id}/missions", tags=["missions"])


def get_mission_service(db: Session = Depends(get_db)) -> MissionService:
    return MissionService(db)


def get_ai_service() -> AIService:
    return AIService(get_settings())


@router.get("/today", response_model=TodayMissionsResponse)
def get_today_missions(
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    """Today's missions; an empty list when the restaurant has no strategy"""
    result = service.assign_today_missions(user.id)
    if result.retryable:
        raise_for_error(result.error_code)

    return TodayMissionsResponse(
        day=service.clock().date(),
        missions=[MissionResponse.model_validate(m) for m in result.missions],
    )


@router.get("/today/recommended", response_model=MissionResponse)
def get_recommended_mission(
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    mission = service.get_today_mission(user.id)
    if not mission:
        raise HTTPException(status_code=404, detail="Aucune mission aujourd'hui")
    return mission


@router.post("/{mission_id}/complete", response_model=MissionResult)
def complete_mission(
    mission_id: int,
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    return ensure_success(service.complete_mission(mission_id, user.id))


@router.post("/{mission_id}/skip", response_model=MissionResult)
def skip_mission(
    mission_id: int,
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    return ensure_success(service.skip_mission(mission_id, user.id))


@router.post("/{mission_id}/reload", response_model=MissionResult)
def reload_mission(
    mission_id: int,
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    return ensure_success(service.reload_mission(mission_id, user.id))


@router.get("/history", response_model=List[MissionResponse])
def get_mission_history(
    limit: Optional[int] = Query(None, ge=1, le=100),
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    return service.get_mission_history(user.id, limit=limit)


@router.get("/planned-days", response_model=PlannedDaysResponse)
def get_planned_days(
    days_ahead: Optional[int] = Query(None, ge=1, le=90),
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
):
    """Upcoming publication days of the restaurant's rhythm"""
    rhythm = user.restaurant.publication_rhythm if user.restaurant else None
    return PlannedDaysResponse(
        rhythm=rhythm,
        days=service.get_planned_mission_days(rhythm, days_ahead=days_ahead),
    )


@router.post("/{mission_id}/caption", response_model=CaptionResponse)
def suggest_caption(
    mission_id: int,
    payload: Optional[CaptionRequest] = None,
    user: User = Depends(get_user_or_404),
    service: MissionService = Depends(get_mission_service),
    ai_service: AIService = Depends(get_ai_service),
):
    """Caption idea for a mission; caption is null when AI is unavailable"""
    mission = service.get_user_mission(mission_id, user.id)
    if not mission:
        raise_for_error(MissionErrorCode.NOT_FOUND)

    caption = ai_service.suggest_caption(
        mission,
        restaurant=user.restaurant,
        user_context=payload.context if payload else None,
    )
    return CaptionResponse(mission_id=mission.id, caption=caption)
