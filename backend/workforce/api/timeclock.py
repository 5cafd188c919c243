"""Time Clock API — cleaner clock in/out, status, attendance history.

Rules:
- One open shift per cleaner; a second clock-in is refused (409)
- Clock-out closes the most recent open shift; with nothing open it is a no-op
- Clocking in/out of a task moves it IN_PROGRESS / REVIEW
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workforce.core.database import get_db
from workforce.core.security import get_current_user, require_employee
from workforce.models.user import User
from workforce.models.timeclock import ClockLog
from workforce.schemas.timeclock import ClockLogOut
from workforce.services.reports import ReportService
from workforce.services.timeclock import TimeclockService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/employee", tags=["timeclock"])


# ── Clock In / Out ───────────────────────────────────────────────────

@router.post("/clock-in")
def clock_in(
    location: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start a shift without a task."""
    require_employee(current_user)
    log = TimeclockService(db).record_clock_in(current_user.id, location)
    return {"status": "clocked_in", "log": ClockLogOut.model_validate(log)}


@router.post("/clock-out")
def clock_out(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """End the current shift."""
    require_employee(current_user)
    log = TimeclockService(db).record_clock_out(current_user.id)
    return _clock_out_response(log)


@router.post("/tasks/{task_id}/clock-in")
def clock_in_to_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_employee(current_user)
    task, log = TimeclockService(db).clock_in_to_task(current_user.id, task_id)
    return {
        "status": "clocked_in",
        "task_status": task.status,
        "log": ClockLogOut.model_validate(log),
        "message": "Clocked in",
    }


@router.post("/tasks/{task_id}/clock-out")
def clock_out_from_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_employee(current_user)
    task, log = TimeclockService(db).clock_out_from_task(current_user.id, task_id)
    response = _clock_out_response(log)
    response["task_status"] = task.status
    return response


# ── Current Status ───────────────────────────────────────────────────

@router.get("/status")
def get_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Whether the cleaner is on shift, and for how long."""
    require_employee(current_user)
    return TimeclockService(db).current_status(current_user.id)


# ── History & Dashboard ──────────────────────────────────────────────

@router.get("/attendance-history")
def attendance_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_employee(current_user)
    return ReportService(db).attendance_history(current_user.id)


@router.get("/dashboard")
def dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_employee(current_user)
    return ReportService(db).employee_dashboard(current_user.id)


@router.get("/tasks")
def list_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The cleaner's tasks, soonest due first."""
    require_employee(current_user)
    return ReportService(db).worker_tasks(current_user.id)


@router.get("/payment-settings")
def payment_settings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The cleaner's own effective rates."""
    require_employee(current_user)
    return ReportService(db).effective_rates(current_user.id)


# ── Internal Helpers ─────────────────────────────────────────────────

def _clock_out_response(log: Optional[ClockLog]) -> dict:
    if log is None:
        return {"status": "not_clocked_in", "message": "No open shift to clock out of"}

    hours = (log.regular_hours or 0) + (log.overtime_hours or 0)
    return {
        "status": "clocked_out",
        "log": ClockLogOut.model_validate(log),
        "hours_worked": round(hours, 2),
        "message": f"Clocked out — {hours:.1f} hours",
    }
