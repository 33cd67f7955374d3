from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.mission import MissionErrorCode, MissionResult, ERROR_MESSAGES

# Seconds a client should wait before retrying after a lock timeout
LOCK_RETRY_AFTER = "1"

ERROR_STATUS = {
    MissionErrorCode.NOT_FOUND: 404,
    MissionErrorCode.ALREADY_PROCESSED: 409,
    MissionErrorCode.ACTION_ALREADY_USED: 409,
    MissionErrorCode.NO_ALTERNATIVE: 409,
    MissionErrorCode.NO_STRATEGY: 409,
    MissionErrorCode.LOCK_TIMEOUT: 503,
}


def get_user_or_404(user_id: int, db: Session = Depends(get_db)) -> User:
    """Path dependency resolving {user_id}"""
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def raise_for_error(code: MissionErrorCode) -> None:
    headers = {"Retry-After": LOCK_RETRY_AFTER} if code == MissionErrorCode.LOCK_TIMEOUT else None
    raise HTTPException(
        status_code=ERROR_STATUS.get(code, 400),
        detail={"code": code.value, "message": ERROR_MESSAGES[code]},
        headers=headers,
    )


def ensure_success(result: MissionResult) -> MissionResult:
    if not result.success:
        if result.error_code:
            raise_for_error(result.error_code)
        raise HTTPException(status_code=400, detail="Action impossible")
    return result
