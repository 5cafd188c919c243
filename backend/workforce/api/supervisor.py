"""Supervisor API — team overview, task sign-off, team reports."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workforce.core.database import get_db
from workforce.core.security import get_current_user, require_supervisor
from workforce.models.user import User
from workforce.schemas.assignment import AssignTaskRequest
from workforce.services.assignments import AssignmentService
from workforce.services.reports import ReportService
from workforce.services.timeclock import TimeclockService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/supervisor", tags=["supervisor"])


@router.get("/dashboard")
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Team stats, today's hours per cleaner and tasks waiting for review."""
    require_supervisor(current_user)
    return ReportService(db).supervisor_dashboard(current_user.id)


@router.get("/team")
def get_team(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Cleaners under the current supervisor with this week's hours."""
    require_supervisor(current_user)
    return ReportService(db).team_members(current_user.id)


@router.post("/tasks/{task_id}/complete")
def complete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Sign off a task a cleaner has clocked out of."""
    require_supervisor(current_user)
    task = TimeclockService(db).mark_task_complete(current_user.id, task_id)
    return {"id": task.id, "status": task.status, "message": "Task marked as completed"}


@router.post("/assign-task")
def assign_task(
    body: AssignTaskRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Assign a task to one of the supervisor's own cleaners."""
    require_supervisor(current_user)
    task = AssignmentService(db).assign(body, supervisor_id=current_user.id)
    return {"id": task.id, "title": task.title, "status": task.status, "cleaner_id": task.employee_id}


@router.get("/reports/tasks")
def task_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_supervisor(current_user)
    return ReportService(db).task_report(supervisor_id=current_user.id)


@router.get("/reports/attendance")
def attendance_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_supervisor(current_user)
    return ReportService(db).attendance_report(supervisor_id=current_user.id)


@router.get("/reports/performance")
def performance_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_supervisor(current_user)
    return ReportService(db).performance_report(supervisor_id=current_user.id)
