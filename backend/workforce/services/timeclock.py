"""Clock-in / clock-out write path.

Task lifecycle driven from here:
    UPCOMING/PENDING --clock in--> IN_PROGRESS --clock out--> REVIEW --supervisor--> COMPLETED

Clock logs belong to the worker, not the task: clock-out closes the worker's
most recent open log whichever task triggered it. Both writes lock the
worker row first, and the partial unique index on open logs rejects a
second open log even if two requests slip past the check.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workforce.core.exceptions import (
    AlreadyClockedInError, InvalidClockOutError, NotFoundError, PermissionDeniedError,
)
from workforce.models.assignment import Assignment, AssignmentStatus
from workforce.models.timeclock import ClockLog
from workforce.models.user import User
from workforce.services.payroll import attribute_logs
from workforce.services.segmentation import as_utc, day_window, get_org_timezone, split_interval

logger = logging.getLogger(__name__)


class TimeclockService:

    def __init__(self, db: Session, tz=None):
        self.db = db
        self.tz = tz or get_org_timezone()

    # ── Reads ────────────────────────────────────────────────────────

    def open_log(self, worker_id: int) -> Optional[ClockLog]:
        return (
            self.db.query(ClockLog)
            .filter(ClockLog.employee_id == worker_id, ClockLog.clock_out.is_(None))
            .order_by(ClockLog.clock_in.desc())
            .first()
        )

    def current_status(self, worker_id: int, now: Optional[datetime] = None) -> dict:
        active = self.open_log(worker_id)
        if not active:
            return {"status": "not_clocked_in"}

        now = as_utc(now or datetime.now(timezone.utc))
        elapsed = (now - as_utc(active.clock_in)).total_seconds() / 3600.0
        return {
            "status": "clocked_in",
            "entry_id": active.id,
            "clock_in": as_utc(active.clock_in).isoformat(),
            "hours_elapsed": round(elapsed, 2),
            "location": active.location,
        }

    # ── Clock in / out ───────────────────────────────────────────────

    def record_clock_in(
        self,
        worker_id: int,
        location: Optional[str] = None,
        assignment_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ClockLog:
        """Open a new log for the worker. Refuses if one is already open."""
        log = self._open(worker_id, location, assignment_id, now)
        self._commit()
        self.db.refresh(log)
        logger.info(f"Worker {worker_id} clocked in at {log.clock_in.isoformat()} ({location or 'no location'})")
        return log

    def record_clock_out(self, worker_id: int, now: Optional[datetime] = None) -> Optional[ClockLog]:
        """Close the worker's open log. Returns None when nothing is open."""
        log = self._close(worker_id, now)
        if log is None:
            self.db.rollback()  # release the worker row lock
            logger.info(f"Clock-out for worker {worker_id} ignored: no open log")
            return None
        self._commit()
        self.db.refresh(log)
        logger.info(
            f"Worker {worker_id} clocked out, log {log.id}: "
            f"{log.regular_hours:.2f}h regular, {log.overtime_hours:.2f}h overtime"
        )
        return log

    def clock_in_to_task(self, worker_id: int, task_id: int, now: Optional[datetime] = None) -> Tuple[Assignment, ClockLog]:
        now = as_utc(now or datetime.now(timezone.utc))
        task = self._worker_task(worker_id, task_id)

        log = self._open(worker_id, task.workplace_label or None, task.id, now)
        task.status = AssignmentStatus.IN_PROGRESS.value
        task.start_time = now
        self._commit()
        self.db.refresh(log)
        logger.info(f"Worker {worker_id} clocked in to task {task_id}")
        return task, log

    def clock_out_from_task(
        self, worker_id: int, task_id: int, now: Optional[datetime] = None
    ) -> Tuple[Assignment, Optional[ClockLog]]:
        now = as_utc(now or datetime.now(timezone.utc))
        task = self._worker_task(worker_id, task_id)

        task.status = AssignmentStatus.REVIEW.value
        task.completed_at = now
        task.end_time = now
        log = self._close(worker_id, now)
        self._commit()
        if log is not None:
            self.db.refresh(log)
        else:
            logger.info(f"Task {task_id} moved to review but worker {worker_id} had no open log")
        return task, log

    def mark_task_complete(self, supervisor_id: int, task_id: int, now: Optional[datetime] = None) -> Assignment:
        task = self.db.query(Assignment).filter(Assignment.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found")
        if task.employee is None or task.employee.supervisor_id != supervisor_id:
            raise PermissionDeniedError("You can only complete tasks for your own cleaners")

        task.status = AssignmentStatus.COMPLETED.value
        task.completed_at = as_utc(now or datetime.now(timezone.utc))
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Supervisor {supervisor_id} completed task {task_id}")
        return task

    # ── Internal Helpers ─────────────────────────────────────────────

    def _lock_worker(self, worker_id: int) -> User:
        worker = self.db.query(User).filter(User.id == worker_id).with_for_update().first()
        if not worker:
            raise NotFoundError("Worker not found")
        return worker

    def _worker_task(self, worker_id: int, task_id: int) -> Assignment:
        task = self.db.query(Assignment).filter(Assignment.id == task_id).first()
        if not task or task.employee_id != worker_id:
            raise NotFoundError("Task not found")
        return task

    def _open(self, worker_id, location, assignment_id, now) -> ClockLog:
        self._lock_worker(worker_id)
        if self.open_log(worker_id) is not None:
            self.db.rollback()
            logger.warning(f"Worker {worker_id} tried to clock in twice")
            raise AlreadyClockedInError()

        log = ClockLog(
            employee_id=worker_id,
            assignment_id=assignment_id,
            clock_in=as_utc(now or datetime.now(timezone.utc)),
            clock_out=None,
            regular_hours=0.0,
            overtime_hours=0.0,
            location=location,
        )
        self.db.add(log)
        return log

    def _close(self, worker_id, now) -> Optional[ClockLog]:
        self._lock_worker(worker_id)
        log = self.open_log(worker_id)
        if log is None:
            return None

        now = as_utc(now or datetime.now(timezone.utc))
        if now <= as_utc(log.clock_in):
            log_id = log.id
            self.db.rollback()
            logger.warning(f"Refused clock-out of log {log_id} at {now.isoformat()}: not after its clock-in")
            raise InvalidClockOutError()
        log.clock_out = now
        self.db.flush()
        self._snapshot_hours(log)
        return log

    def _snapshot_hours(self, log: ClockLog):
        """Store this log's share of its days' regular/overtime split.

        Every closed log of the worker touching the same local days takes
        part, so a second shift on a day sees the hours of the first.
        """
        segments = split_interval(log.clock_in, log.clock_out, self.tz)
        if not segments:
            log.regular_hours = 0.0
            log.overtime_hours = 0.0
            return

        window_start = day_window(segments[0].day, self.tz)[0]
        window_end = day_window(segments[-1].day, self.tz)[1]
        same_days = (
            self.db.query(ClockLog)
            .filter(
                ClockLog.employee_id == log.employee_id,
                ClockLog.clock_out.isnot(None),
                ClockLog.clock_out > as_utc(window_start),
                ClockLog.clock_in < as_utc(window_end),
            )
            .order_by(ClockLog.clock_in.asc(), ClockLog.id.asc())
            .all()
        )
        share = attribute_logs(same_days, self.tz).get(log.id)
        log.regular_hours = share.regular if share else 0.0
        log.overtime_hours = share.overtime if share else 0.0

    def _commit(self):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Open clock log constraint hit, treating as duplicate clock-in")
            raise AlreadyClockedInError()
