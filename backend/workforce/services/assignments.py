"""Task assignment, shared by the admin and supervisor routers.

A task due today or earlier (org-local date) starts as PENDING, anything
later or undated as UPCOMING.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from workforce.core.exceptions import PermissionDeniedError, WorkforceError
from workforce.models.assignment import Assignment, AssignmentStatus, Workplace
from workforce.models.user import User, UserRole
from workforce.schemas.assignment import AssignTaskRequest
from workforce.services.segmentation import as_utc, get_org_timezone, local_today, to_local

logger = logging.getLogger(__name__)


class AssignmentService:

    def __init__(self, db: Session, tz=None):
        self.db = db
        self.tz = tz or get_org_timezone()

    def initial_status(self, due_date: Optional[datetime], now: Optional[datetime] = None) -> str:
        if due_date and to_local(due_date, self.tz).date() <= local_today(now, self.tz):
            return AssignmentStatus.PENDING.value
        return AssignmentStatus.UPCOMING.value

    def assign(
        self,
        body: AssignTaskRequest,
        supervisor_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Assignment:
        """Create a task for a cleaner.

        With ``supervisor_id`` the cleaner must be on that supervisor's team.
        """
        cleaner = self.db.query(User).filter(
            User.id == body.cleaner_id,
            User.role == UserRole.EMPLOYEE.value,
        ).first()
        if not cleaner:
            raise WorkforceError("Cleaner not found")
        if supervisor_id is not None and cleaner.supervisor_id != supervisor_id:
            logger.warning(f"Supervisor {supervisor_id} tried to assign a task to cleaner {cleaner.id}")
            raise PermissionDeniedError("You can only assign tasks to your own cleaners")

        if body.workplace_id is not None:
            if not self.db.query(Workplace).filter(Workplace.id == body.workplace_id).first():
                raise WorkforceError("Workplace not found")

        status = self.initial_status(body.due_date, now or datetime.now(timezone.utc))
        task = Assignment(
            employee_id=cleaner.id,
            workplace_id=body.workplace_id,
            title=body.title,
            description=body.description,
            location=body.location or "",
            priority=body.priority,
            estimated_hours=body.estimated_hours,
            due_date=as_utc(body.due_date) if body.due_date else None,
            start_time=as_utc(body.start_time) if body.start_time else None,
            status=status,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Task {task.id} assigned to cleaner {cleaner.id} ({status})")
        return task
