from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Header
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.log import request_ctx
from app.services.reminder_service import ReminderService

router = APIRouter(prefix="/cron", tags=["cron"])


def verify_cron_secret(x_cron_secret: Optional[str] = Header(None)):
    """
    Check the X-Cron-Secret header

    Only enforced when CRON_SECRET is set.
    """
    cron_secret = get_settings().cron_secret
    if cron_secret and x_cron_secret != cron_secret:
        raise HTTPException(status_code=403, detail="Invalid cron secret")


@router.post("/check-streaks")
def check_streaks(
    db: Session = Depends(get_db),
    _: None = Depends(verify_cron_secret),
):
    """
    Reset the streaks of users who skipped a day

    Schedule: once a day, shortly after midnight UTC
    """
    with request_ctx("cron-streak"):
        result = ReminderService(db).check_streaks()
    return {"status": "completed", "result": result}


@router.post("/daily-reminders")
def send_daily_reminders(
    current_time: Optional[str] = None,
    db: Session = Depends(get_db),
    _: None = Depends(verify_cron_secret),
):
    """
    "Mission du jour" in-app reminders

    Schedule: every minute; users whose reminder time (HH:MM, Europe/Paris)
    matches the current minute get notified.
    """
    with request_ctx("cron-remind"):
        result = ReminderService(db).send_daily_reminders(current_time=current_time)
    return {"status": "completed", "result": result}


@router.post("/assign-missions")
def assign_missions(
    db: Session = Depends(get_db),
    _: None = Depends(verify_cron_secret),
):
    """Create today's missions for every user with a strategy"""
    with request_ctx("cron-assign"):
        result = ReminderService(db).assign_all_missions()
    return {"status": "completed", "result": result}
