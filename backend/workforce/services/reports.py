"""Read-only projections for the admin, supervisor and cleaner dashboards.

Hours and pay always come from the day-bucketed aggregation over raw clock
times; the per-log snapshot columns are only shown in the attendance tables.
Values are rounded to 2 decimals here, at the edge.
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from dateutil.parser import isoparse
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from workforce.core.config import settings
from workforce.core.exceptions import InvalidDateRangeError, NotFoundError
from workforce.models.assignment import Assignment, AssignmentStatus
from workforce.models.timeclock import ClockLog
from workforce.models.user import User, UserRole
from workforce.services.payroll import aggregate, attribute_logs, clock_interval, log_key
from workforce.services.rates import RateResolver
from workforce.services.segmentation import (
    as_utc, date_range_window, day_window, get_org_timezone, local_today, to_local, week_window,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (AssignmentStatus.IN_PROGRESS.value, AssignmentStatus.UPCOMING.value)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return isoparse(str(value)).date()
    except (TypeError, ValueError):
        raise InvalidDateRangeError(f"Invalid date: {value!r}")


def performance_rating(efficiency: float) -> str:
    if efficiency >= 95:
        return "Excellent"
    if efficiency >= 90:
        return "Good"
    return "Average"


class ReportService:

    def __init__(self, db: Session, tz=None):
        self.db = db
        self.tz = tz or get_org_timezone()
        self.rates = RateResolver(db)

    # ── Admin dashboard ──────────────────────────────────────────────

    def dashboard_stats(self, now: Optional[datetime] = None) -> dict:
        """Headcount, open work and this week's hours/payroll across cleaners.

        Each cleaner is aggregated on their own (the 8h threshold is per
        person per day) with their own rate, then summed.
        """
        week_start, week_end = week_window(now, self.tz)

        total_workers = self.db.query(func.count(User.id)).filter(
            User.role == UserRole.EMPLOYEE.value,
        ).scalar() or 0
        active_assignments = self.db.query(func.count(Assignment.id)).filter(
            Assignment.status.in_(ACTIVE_STATUSES),
        ).scalar() or 0

        by_worker = defaultdict(list)
        for log in self._closed_logs(week_start, week_end):
            by_worker[log.employee_id].append(log)

        workers = {}
        if by_worker:
            workers = {u.id: u for u in self.db.query(User).filter(User.id.in_(list(by_worker))).all()}

        hours = 0.0
        payroll = 0.0
        for worker_id, logs in by_worker.items():
            summary = aggregate(logs, self.rates.for_worker(workers.get(worker_id)), self.tz, week_start, week_end)
            hours += summary.total_hours
            payroll += summary.total_pay

        return {
            "total_workers": total_workers,
            "active_assignments": active_assignments,
            "hours_this_week": round(hours, 2),
            "payroll_this_week": round(payroll, 2),
            "week_start": week_start.date().isoformat(),
        }

    # ── Cleaner detail ───────────────────────────────────────────────

    def worker_detail(self, worker_id: int) -> dict:
        worker = self._worker(worker_id)
        logs = (
            self.db.query(ClockLog)
            .filter(ClockLog.employee_id == worker_id)
            .order_by(ClockLog.clock_in.desc())
            .limit(settings.WORKER_DETAIL_LOG_LIMIT)
            .all()
        )
        rates = self.rates.for_worker(worker)
        summary = aggregate(logs, rates, self.tz)

        # Most recent days first
        recent_days = sorted(summary.days, key=lambda d: d.day, reverse=True)[:settings.WORKER_DETAIL_DAY_LIMIT]
        total_regular = sum(d.regular for d in recent_days)
        total_overtime = sum(d.overtime for d in recent_days)

        tasks_completed = self.db.query(func.count(Assignment.id)).filter(
            Assignment.employee_id == worker_id,
            Assignment.status == AssignmentStatus.COMPLETED.value,
        ).scalar() or 0

        return {
            "id": worker.id,
            "name": worker.display_name,
            "email": worker.email,
            "phone": worker.phone,
            "supervisor": worker.supervisor.display_name if worker.supervisor else None,
            "status": worker.status,
            "tasks_completed": tasks_completed,
            "total_regular_hours": round(total_regular, 2),
            "total_overtime_hours": round(total_overtime, 2),
            # recent window is roughly three months of shifts
            "monthly_average": round((total_regular + total_overtime) / 3),
            "daily_records": [d.as_dict() for d in recent_days],
            "payment_settings": rates.as_dict(),
        }

    # ── Salary calculator ────────────────────────────────────────────

    def calculate_salary(self, worker_id: int, start_date, end_date) -> dict:
        """Pay for ``start_date``..``end_date``, both days included."""
        worker = self._worker(worker_id)
        start_day, end_day = _as_date(start_date), _as_date(end_date)
        if end_day < start_day:
            raise InvalidDateRangeError()

        window_start, window_end = date_range_window(start_day, end_day, self.tz)
        logs = self._closed_logs(window_start, window_end, worker_id)
        summary = aggregate(logs, self.rates.for_worker(worker), self.tz, window_start, window_end)

        logger.info(
            f"Salary for worker {worker_id} {start_day}..{end_day}: "
            f"{summary.total_hours:.2f}h, {summary.total_pay:.2f}"
        )
        return {
            "cleaner_id": worker.id,
            "cleaner_name": worker.display_name,
            "start_date": start_day.isoformat(),
            "end_date": end_day.isoformat(),
            **summary.as_dict(include_days=True),
        }

    def salary_calculator_workers(self) -> List[dict]:
        global_rate = self.rates.global_regular_rate()
        cleaners = self.db.query(User).filter(
            User.role == UserRole.EMPLOYEE.value,
        ).order_by(User.full_name).all()
        return [
            {
                "id": c.id,
                "name": c.display_name,
                "hourly_rate": float(c.hourly_rate) if c.hourly_rate is not None else global_rate,
            }
            for c in cleaners
        ]

    def effective_rates(self, worker_id: Optional[int] = None) -> dict:
        return self.rates.for_worker_id(worker_id).as_dict()

    # ── Cleaner views ────────────────────────────────────────────────

    def attendance_history(self, worker_id: int) -> List[dict]:
        """Every log of the worker with its share of daily overtime."""
        self._worker(worker_id)
        logs = (
            self.db.query(ClockLog)
            .options(joinedload(ClockLog.assignment).joinedload(Assignment.workplace))
            .filter(ClockLog.employee_id == worker_id)
            .order_by(ClockLog.clock_in.desc(), ClockLog.id.desc())
            .all()
        )

        interval = self._task_window_interval(logs)
        shares = attribute_logs(logs, self.tz, interval=interval)

        rows = []
        for log in logs:
            start, end = interval(log)
            share = shares.get(log_key(log))
            task = log.assignment
            rows.append({
                "id": log.id,
                "assignment_title": task.title if task else "",
                "date": to_local(start, self.tz).date().isoformat(),
                "clock_in": self._hhmm(start),
                "clock_out": self._hhmm(end) if end else "",
                "total_hours": round(share.total_hours, 2) if share else 0.0,
                "overtime": round(share.overtime, 2) if share else 0.0,
                "sunday_hours": round(share.sunday_hours, 2) if share else 0.0,
                "weekday_overtime_hours": round(share.weekday_overtime_hours, 2) if share else 0.0,
                "workplace": (task.workplace_label if task else "") or log.location or "Unknown",
                "status": "completed" if log.clock_out else "pending",
            })
        return rows

    def employee_dashboard(self, worker_id: int, now: Optional[datetime] = None) -> dict:
        worker = self._worker(worker_id)
        now = now or datetime.now(timezone.utc)
        today = local_today(now, self.tz)
        yesterday = today - timedelta(days=1)
        week_start, week_end = week_window(now, self.tz)
        last_week_start = week_start - timedelta(days=7)

        logs = self._closed_logs(last_week_start, week_end, worker_id)
        rates = self.rates.for_worker(worker)

        def hours_between(start, end):
            return round(aggregate(logs, rates, self.tz, start, end).total_hours, 2)

        assignments = self.db.query(Assignment).filter(
            Assignment.employee_id == worker_id,
        ).order_by(Assignment.due_date.asc()).all()

        def due_on(task, day):
            return task.due_date is not None and to_local(task.due_date, self.tz).date() == day

        recent = (
            self.db.query(ClockLog)
            .filter(ClockLog.employee_id == worker_id)
            .order_by(ClockLog.clock_in.desc())
            .limit(5)
            .all()
        )

        return {
            "hours_today": hours_between(*day_window(today, self.tz)),
            "hours_yesterday": hours_between(*day_window(yesterday, self.tz)),
            "hours_this_week": hours_between(week_start, week_end),
            "hours_last_week": hours_between(last_week_start, week_start),
            "to_do_today": sum(1 for a in assignments if due_on(a, today) and a.status != AssignmentStatus.COMPLETED.value),
            "done_today": sum(1 for a in assignments if due_on(a, today) and a.status == AssignmentStatus.COMPLETED.value),
            "to_do_yesterday": sum(1 for a in assignments if due_on(a, yesterday) and a.status != AssignmentStatus.COMPLETED.value),
            "done_yesterday": sum(1 for a in assignments if due_on(a, yesterday) and a.status == AssignmentStatus.COMPLETED.value),
            "attendance": [
                {
                    "id": log.id,
                    "clock_in": as_utc(log.clock_in).isoformat(),
                    "clock_out": as_utc(log.clock_out).isoformat() if log.clock_out else "",
                }
                for log in recent
            ],
        }

    def worker_tasks(self, worker_id: int) -> List[dict]:
        """The worker's tasks by due date; undated tasks last."""
        self._worker(worker_id)
        tasks = (
            self.db.query(Assignment)
            .options(joinedload(Assignment.workplace))
            .filter(Assignment.employee_id == worker_id)
            .order_by(Assignment.due_date.is_(None), Assignment.due_date.asc(), Assignment.id.asc())
            .all()
        )

        rows = []
        for task in tasks:
            duration = ""
            if task.start_time and task.end_time:
                hours = (as_utc(task.end_time) - as_utc(task.start_time)).total_seconds() / 3600.0
                duration = f"{hours:.2f}h"
            elif task.estimated_hours:
                duration = f"{task.estimated_hours:g}h"
            rows.append({
                "id": task.id,
                "title": task.title,
                "workplace": task.workplace_label,
                "description": task.description or "",
                "date": to_local(task.due_date, self.tz).date().isoformat() if task.due_date else "",
                "start_time": self._hhmm(task.start_time) if task.start_time else "",
                "end_time": self._hhmm(task.end_time) if task.end_time else "",
                "duration": duration,
                "status": task.status.lower(),
                "priority": task.priority or "",
                "completed_at": as_utc(task.completed_at).isoformat() if task.completed_at else None,
            })
        return rows

    # ── Supervisor views ─────────────────────────────────────────────

    def supervisor_dashboard(self, supervisor_id: int, now: Optional[datetime] = None) -> dict:
        """Team stats, each cleaner's hours today and the newest tasks awaiting review.

        Hours today come from the day-bucketed aggregation, so a shift that
        started yesterday counts only its part after midnight.
        """
        now = as_utc(now or datetime.now(timezone.utc))
        day_start, day_end = day_window(local_today(now, self.tz), self.tz)

        cleaners = self.db.query(User).filter(
            User.supervisor_id == supervisor_id,
            User.role == UserRole.EMPLOYEE.value,
        ).order_by(User.full_name).all()

        team_tasks = self.db.query(Assignment).join(User, Assignment.employee_id == User.id).filter(
            User.supervisor_id == supervisor_id,
        )
        active_tasks = team_tasks.filter(Assignment.status == AssignmentStatus.IN_PROGRESS.value).count()
        completed_today = team_tasks.filter(
            Assignment.status == AssignmentStatus.COMPLETED.value,
            Assignment.completed_at >= as_utc(day_start),
            Assignment.completed_at < as_utc(day_end),
        ).count()
        in_review = team_tasks.filter(Assignment.status == AssignmentStatus.REVIEW.value)
        reviews = in_review.order_by(Assignment.completed_at.desc(), Assignment.id.desc()).limit(5).all()

        members = []
        for cleaner in cleaners:
            logs = self._closed_logs(day_start, day_end, cleaner.id)
            hours = aggregate(logs, self.rates.for_worker(cleaner), self.tz, day_start, day_end).total_hours
            open_log = (
                self.db.query(ClockLog)
                .filter(ClockLog.employee_id == cleaner.id, ClockLog.clock_out.is_(None))
                .first()
            )
            members.append({
                "id": cleaner.id,
                "name": cleaner.display_name,
                "status": cleaner.status or ("active" if open_log else "offline"),
                "location": (open_log.location if open_log else None) or "Unknown",
                "hours_today": round(hours, 1),
            })

        pending_reviews = []
        for task in reviews:
            submitted = task.completed_at or task.updated_at or task.created_at
            hours_ago = round((now - as_utc(submitted)).total_seconds() / 3600) if submitted else 0
            pending_reviews.append({
                "id": task.id,
                "task": task.title,
                "cleaner": task.employee.display_name if task.employee else "",
                "completed": f"{hours_ago} hours ago",
                "priority": task.priority or "Medium",
            })

        return {
            "stats": {
                "team_size": len(cleaners),
                "active_tasks": active_tasks,
                "completed_today": completed_today,
                "alerts": in_review.count(),
            },
            "team_members": members,
            "pending_reviews": pending_reviews,
        }

    def team_members(self, supervisor_id: int, now: Optional[datetime] = None) -> List[dict]:
        week_start, week_end = week_window(now, self.tz)
        cleaners = self.db.query(User).filter(
            User.supervisor_id == supervisor_id,
            User.role == UserRole.EMPLOYEE.value,
        ).order_by(User.full_name).all()

        result = []
        for cleaner in cleaners:
            week_logs = self._closed_logs(week_start, week_end, cleaner.id)
            hours = aggregate(week_logs, self.rates.for_worker(cleaner), self.tz, week_start, week_end).total_hours
            latest = (
                self.db.query(ClockLog)
                .filter(ClockLog.employee_id == cleaner.id)
                .order_by(ClockLog.clock_in.desc())
                .first()
            )
            current_task = next((a for a in cleaner.assignments if a.status in ACTIVE_STATUSES), None)

            status = cleaner.status or "offline"
            if not cleaner.status and latest is not None and latest.clock_out is None:
                status = "active"

            result.append({
                "id": cleaner.id,
                "name": cleaner.display_name,
                "email": cleaner.email,
                "status": status,
                "current_task": current_task.title if current_task else "",
                "tasks_completed": sum(1 for a in cleaner.assignments if a.status == AssignmentStatus.COMPLETED.value),
                "hours_worked": round(hours, 2),
                "last_clock_in": self._hhmm(latest.clock_in) if latest else "N/A",
            })
        return result

    # ── Reports ──────────────────────────────────────────────────────

    def attendance_report(self, supervisor_id: Optional[int] = None) -> List[dict]:
        query = self.db.query(ClockLog).join(User, ClockLog.employee_id == User.id)
        if supervisor_id is not None:
            query = query.filter(User.supervisor_id == supervisor_id)
        logs = query.order_by(ClockLog.clock_in.desc()).all()

        return [
            {
                "id": log.id,
                "employee": log.employee.display_name if log.employee else "",
                "date": to_local(log.clock_in, self.tz).date().isoformat(),
                "check_in": self._hhmm(log.clock_in),
                "check_out": self._hhmm(log.clock_out) if log.clock_out else "",
                "hours": round((log.regular_hours or 0) + (log.overtime_hours or 0), 2),
            }
            for log in logs
        ]

    def task_report(self, supervisor_id: Optional[int] = None) -> List[dict]:
        query = self.db.query(Assignment).join(User, Assignment.employee_id == User.id)
        if supervisor_id is not None:
            query = query.filter(User.supervisor_id == supervisor_id)
        tasks = query.order_by(Assignment.created_at.desc(), Assignment.id.desc()).all()

        rows = []
        for task in tasks:
            completed = "-"
            if task.status == AssignmentStatus.COMPLETED.value and task.completed_at:
                completed = to_local(task.completed_at, self.tz).date().isoformat()
            rows.append({
                "id": task.id,
                "task": task.title,
                "assignee": task.employee.display_name if task.employee else "",
                "status": task.status,
                "completed_date": completed,
                "workplace": task.workplace.name if task.workplace else "",
            })
        return rows

    def performance_report(self, supervisor_id: Optional[int] = None) -> List[dict]:
        query = self.db.query(User).filter(User.role == UserRole.EMPLOYEE.value)
        if supervisor_id is not None:
            query = query.filter(User.supervisor_id == supervisor_id)

        rows = []
        for user in query.order_by(User.full_name).all():
            assigned = len(user.assignments)
            completed = sum(1 for a in user.assignments if a.status == AssignmentStatus.COMPLETED.value)
            efficiency = (completed / assigned * 100) if assigned else 0.0
            rows.append({
                "id": user.id,
                "employee": user.display_name,
                "tasks_completed": completed,
                "tasks_assigned": assigned,
                "efficiency": f"{efficiency:.1f}%",
                "rating": performance_rating(round(efficiency, 1)),
            })
        return rows

    # ── Internal Helpers ─────────────────────────────────────────────

    def _worker(self, worker_id: int) -> User:
        worker = self.db.query(User).filter(
            User.id == worker_id,
            User.role == UserRole.EMPLOYEE.value,
        ).first()
        if not worker:
            raise NotFoundError("Cleaner not found")
        return worker

    def _closed_logs(self, start: datetime, end: datetime, worker_id: Optional[int] = None) -> List[ClockLog]:
        """Closed logs overlapping ``[start, end)``."""
        query = self.db.query(ClockLog).filter(
            ClockLog.clock_out.isnot(None),
            ClockLog.clock_out > as_utc(start),
            ClockLog.clock_in < as_utc(end),
        )
        if worker_id is not None:
            query = query.filter(ClockLog.employee_id == worker_id)
        return query.order_by(ClockLog.clock_in.asc(), ClockLog.id.asc()).all()

    @staticmethod
    def _task_window_interval(logs):
        """Use the task's start/end instead of raw clock times when both are set,
        the log is closed and the window lies inside the log.

        Only the latest log of a task gets the window; a task clocked into
        twice would otherwise count its window once per log. A window reaching
        outside its log (the task clock-out closed a later shift, or nothing)
        is ignored and the log keeps its own clock times.
        """
        latest_for_task = {}
        for log in logs:
            if log.assignment_id is None:
                continue
            current = latest_for_task.get(log.assignment_id)
            if current is None or as_utc(log.clock_in) > as_utc(current.clock_in):
                latest_for_task[log.assignment_id] = log

        def interval(log):
            task = log.assignment
            if (task is not None and task.start_time and task.end_time and log.clock_out is not None
                    and latest_for_task.get(log.assignment_id) is log
                    and as_utc(log.clock_in) <= as_utc(task.start_time) < as_utc(task.end_time)
                    <= as_utc(log.clock_out)):
                return task.start_time, task.end_time
            return clock_interval(log)

        return interval

    def _hhmm(self, value: datetime) -> str:
        return to_local(value, self.tz).strftime("%H:%M")
