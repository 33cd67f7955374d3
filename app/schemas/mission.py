from pydantic import BaseModel, Field
from typing import Optional, Any, Literal
from datetime import datetime, date
import enum


class MissionErrorCode(str, enum.Enum):
    """Typed failures of the mission operations"""
    NOT_FOUND = "not_found"
    ALREADY_PROCESSED = "already_processed"
    ACTION_ALREADY_USED = "action_already_used"
    NO_STRATEGY = "no_strategy"
    NO_ALTERNATIVE = "no_alternative"
    LOCK_TIMEOUT = "lock_timeout"


# User-facing messages, kept short and free of internal detail
ERROR_MESSAGES = {
    MissionErrorCode.NOT_FOUND: "Mission introuvable",
    MissionErrorCode.ALREADY_PROCESSED: "Cette mission a déjà été traitée",
    MissionErrorCode.ACTION_ALREADY_USED: "Vous avez déjà utilisé votre action du jour",
    MissionErrorCode.NO_STRATEGY: "Configuration manquante",
    MissionErrorCode.NO_ALTERNATIVE: "Aucune autre mission disponible",
    MissionErrorCode.LOCK_TIMEOUT: "Vos missions sont en cours de préparation, réessayez dans un instant",
}


class TemplateSummary(BaseModel):
    """Template fields exposed with a mission"""
    id: int
    type: str
    title: str
    content_idea: str = ""
    tutorial_id: Optional[int] = None
    notification_time: Optional[str] = None

    class Config:
        from_attributes = True


class MissionResponse(BaseModel):
    """Mission as returned by the API"""
    id: int
    user_id: int
    slot_number: int
    status: str
    is_recommended: bool
    assigned_at: datetime
    completed_at: Optional[datetime] = None
    used_pass: bool = False
    used_reload: bool = False
    template: TemplateSummary = Field(validation_alias="mission_template")

    class Config:
        from_attributes = True
        populate_by_name = True


class MissionResult(BaseModel):
    """Outcome of complete / skip / reload"""
    success: bool
    error: Optional[str] = None
    error_code: Optional[MissionErrorCode] = None
    mission_id: Optional[int] = None
    mission: Optional[MissionResponse] = None

    @classmethod
    def ok(cls, mission_id: Optional[int] = None, mission: Optional[MissionResponse] = None) -> "MissionResult":
        return cls(success=True, mission_id=mission_id, mission=mission)

    @classmethod
    def fail(cls, code: Optional[MissionErrorCode] = None) -> "MissionResult":
        """Failure with its user-facing message; no code means a silent no-op"""
        return cls(
            success=False,
            error=ERROR_MESSAGES[code] if code else None,
            error_code=code,
        )


class AssignmentResult(BaseModel):
    """Today's missions, or the reason why none could be returned"""
    missions: list[Any] = []          # Mission ORM rows, ordered by slot
    error_code: Optional[MissionErrorCode] = None

    class Config:
        arbitrary_types_allowed = True

    @property
    def retryable(self) -> bool:
        return self.error_code == MissionErrorCode.LOCK_TIMEOUT


class TodayMissionsResponse(BaseModel):
    day: date
    missions: list[MissionResponse]


class PlannedDaysResponse(BaseModel):
    rhythm: Optional[str] = None
    days: list[date]


class CaptionRequest(BaseModel):
    context: Optional[str] = Field(default=None, max_length=1000)


class CaptionResponse(BaseModel):
    mission_id: int
    caption: Optional[str] = None


class TutorialCompleteRequest(BaseModel):
    feedback: Optional[Literal["useful", "not_useful"]] = None
