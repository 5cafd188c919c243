"""
Tests for the dashboard, salary calculator and report projections.
"""
import pytest

from conftest import local
from workforce.core.exceptions import InvalidDateRangeError, NotFoundError
from workforce.models import Assignment, AssignmentStatus, User, UserRole, Workplace
from workforce.services.reports import ReportService, performance_rating
from workforce.services.segmentation import as_utc
from workforce.services.timeclock import TimeclockService


@pytest.fixture
def reports(db, tz):
    return ReportService(db, tz)


@pytest.fixture
def second_cleaner(db, other_supervisor):
    user = User(
        email="liisa@test.fi",
        hashed_password="not-a-real-hash",
        full_name="Liisa Cleaner",
        role=UserRole.EMPLOYEE.value,
        supervisor_id=other_supervisor.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def paid_cleaner(db, cleaner):
    cleaner.hourly_rate = 20
    db.commit()
    return cleaner


def _task(db, worker, title, status, **kwargs):
    task = Assignment(employee_id=worker.id, title=title, status=status, **kwargs)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


class TestCalculateSalary:

    def test_end_date_is_inclusive(self, reports, paid_cleaner, add_log):
        add_log(paid_cleaner, local(2024, 1, 2, 8), local(2024, 1, 2, 18))   # Tuesday, 220
        add_log(paid_cleaner, local(2024, 1, 7, 9), local(2024, 1, 7, 15))   # Sunday, 240
        add_log(paid_cleaner, local(2024, 1, 8, 9), local(2024, 1, 8, 12))   # next Monday, excluded

        result = reports.calculate_salary(paid_cleaner.id, "2024-01-01", "2024-01-07")

        assert result["total_hours"] == 16.0
        assert result["total_regular_hours"] == 8.0
        assert result["weekday_overtime_hours"] == 2.0
        assert result["sunday_hours"] == 6.0
        assert result["total_pay"] == 460.0
        assert result["rates"]["regular_rate"] == 20.0
        assert [d["date"] for d in result["days"]] == ["2024-01-02", "2024-01-07"]

    def test_shift_crossing_range_end_is_clamped(self, reports, paid_cleaner, add_log):
        add_log(paid_cleaner, local(2024, 1, 6, 22), local(2024, 1, 7, 2))

        result = reports.calculate_salary(paid_cleaner.id, "2024-01-01", "2024-01-06")

        assert result["total_hours"] == 2.0
        assert result["sunday_hours"] == 0.0

    def test_single_day_range(self, reports, paid_cleaner, add_log):
        add_log(paid_cleaner, local(2024, 1, 3, 8), local(2024, 1, 3, 12))

        result = reports.calculate_salary(paid_cleaner.id, "2024-01-03", "2024-01-03")

        assert result["total_pay"] == 80.0

    def test_reversed_range(self, reports, cleaner):
        with pytest.raises(InvalidDateRangeError):
            reports.calculate_salary(cleaner.id, "2024-01-07", "2024-01-01")

    def test_unparseable_date(self, reports, cleaner):
        with pytest.raises(InvalidDateRangeError):
            reports.calculate_salary(cleaner.id, "last tuesday", "2024-01-01")

    def test_only_cleaners_have_salaries(self, reports, supervisor):
        with pytest.raises(NotFoundError):
            reports.calculate_salary(supervisor.id, "2024-01-01", "2024-01-07")

    def test_open_log_is_not_paid(self, reports, paid_cleaner, add_log):
        add_log(paid_cleaner, local(2024, 1, 3, 8))

        result = reports.calculate_salary(paid_cleaner.id, "2024-01-01", "2024-01-07")

        assert result["total_pay"] == 0.0

    def test_calculation_is_repeatable(self, reports, paid_cleaner, add_log):
        add_log(paid_cleaner, local(2024, 1, 2, 8), local(2024, 1, 2, 19))

        first = reports.calculate_salary(paid_cleaner.id, "2024-01-01", "2024-01-31")
        second = reports.calculate_salary(paid_cleaner.id, "2024-01-01", "2024-01-31")

        assert first == second


class TestDashboardStats:

    def test_threshold_is_per_cleaner(self, db, reports, cleaner, second_cleaner, add_log):
        # 6h each on the same Monday: no overtime for either of them
        add_log(cleaner, local(2024, 1, 15, 8), local(2024, 1, 15, 14))
        add_log(second_cleaner, local(2024, 1, 15, 8), local(2024, 1, 15, 14))
        _task(db, cleaner, "Stairwell", AssignmentStatus.IN_PROGRESS.value)
        _task(db, cleaner, "Lobby", AssignmentStatus.UPCOMING.value)
        _task(db, second_cleaner, "Windows", AssignmentStatus.COMPLETED.value)

        stats = reports.dashboard_stats(now=local(2024, 1, 17, 12))

        assert stats["total_workers"] == 2
        assert stats["active_assignments"] == 2
        assert stats["hours_this_week"] == 12.0
        assert stats["payroll_this_week"] == 300.0
        assert stats["week_start"] == "2024-01-15"

    def test_previous_week_is_excluded(self, reports, cleaner, add_log):
        add_log(cleaner, local(2024, 1, 12, 8), local(2024, 1, 12, 16))

        stats = reports.dashboard_stats(now=local(2024, 1, 17, 12))

        assert stats["hours_this_week"] == 0.0
        assert stats["payroll_this_week"] == 0.0


class TestWorkerViews:

    def test_worker_detail(self, reports, paid_cleaner, supervisor, add_log):
        add_log(paid_cleaner, local(2024, 1, 15, 8), local(2024, 1, 15, 18))
        add_log(paid_cleaner, local(2024, 1, 14, 10), local(2024, 1, 14, 12))

        detail = reports.worker_detail(paid_cleaner.id)

        assert detail["name"] == "Kalle Cleaner"
        assert detail["supervisor"] == "Sanna Supervisor"
        assert detail["total_regular_hours"] == 8.0
        assert detail["total_overtime_hours"] == 4.0
        assert [r["date"] for r in detail["daily_records"]] == ["2024-01-15", "2024-01-14"]
        assert detail["daily_records"][1]["is_sunday"] is True
        assert detail["payment_settings"] == {
            "regular_rate": 20.0, "overtime_rate": 30.0, "sunday_overtime_rate": 40.0,
        }

    def test_attendance_history_uses_task_window(self, db, reports, cleaner, add_log):
        workplace = Workplace(name="Pasila Depot", address="Ratapihantie 1")
        db.add(workplace)
        db.flush()
        task = _task(
            db, cleaner, "Floor wax", AssignmentStatus.REVIEW.value,
            workplace_id=workplace.id,
            start_time=as_utc(local(2024, 1, 16, 8)),
            end_time=as_utc(local(2024, 1, 16, 12)),
        )
        add_log(cleaner, local(2024, 1, 16, 7, 55), local(2024, 1, 16, 12, 10), assignment_id=task.id)
        add_log(cleaner, local(2024, 1, 16, 13), local(2024, 1, 16, 19), location="Kallio")

        rows = reports.attendance_history(cleaner.id)

        assert [r["clock_in"] for r in rows] == ["13:00", "08:00"]
        afternoon, morning = rows
        assert morning["workplace"] == "Pasila Depot"
        assert morning["total_hours"] == 4.0
        assert morning["overtime"] == 0.0
        assert afternoon["workplace"] == "Kallio"
        assert afternoon["total_hours"] == 6.0
        assert afternoon["overtime"] == 2.0

    def test_task_window_outside_its_log_is_ignored(self, db, tz, reports, cleaner):
        task = _task(db, cleaner, "Floor wax", AssignmentStatus.PENDING.value)
        clock = TimeclockService(db, tz)
        clock.clock_in_to_task(cleaner.id, task.id, now=local(2024, 1, 16, 8))
        clock.record_clock_out(cleaner.id, now=local(2024, 1, 16, 12))
        clock.record_clock_in(cleaner.id, now=local(2024, 1, 16, 13))
        clock.record_clock_out(cleaner.id, now=local(2024, 1, 16, 17))
        _, log = clock.clock_out_from_task(cleaner.id, task.id, now=local(2024, 1, 16, 18))
        assert log is None

        rows = reports.attendance_history(cleaner.id)

        assert sum(r["total_hours"] for r in rows) == 8.0
        assert sum(r["overtime"] for r in rows) == 0.0
        afternoon, morning = rows
        assert (morning["clock_in"], morning["clock_out"]) == ("08:00", "12:00")
        assert (afternoon["clock_in"], afternoon["clock_out"]) == ("13:00", "17:00")

    def test_worker_tasks(self, db, reports, cleaner):
        workplace = Workplace(name="Pasila Depot", address="Ratapihantie 1")
        db.add(workplace)
        db.flush()
        _task(db, cleaner, "Undated", AssignmentStatus.UPCOMING.value, estimated_hours=1.5)
        _task(
            db, cleaner, "Floor wax", AssignmentStatus.REVIEW.value,
            workplace_id=workplace.id, due_date=as_utc(local(2024, 1, 16, 9)),
            start_time=as_utc(local(2024, 1, 16, 8)), end_time=as_utc(local(2024, 1, 16, 10, 15)),
            completed_at=as_utc(local(2024, 1, 16, 10, 15)),
        )
        _task(db, cleaner, "Kitchen", AssignmentStatus.PENDING.value, location="Kallio",
              due_date=as_utc(local(2024, 1, 15, 23, 30)))

        rows = reports.worker_tasks(cleaner.id)

        assert [r["title"] for r in rows] == ["Kitchen", "Floor wax", "Undated"]
        kitchen, wax, undated = rows
        assert kitchen["date"] == "2024-01-15"
        assert kitchen["workplace"] == "Kallio"
        assert kitchen["status"] == "pending"
        assert kitchen["duration"] == ""
        assert wax["workplace"] == "Pasila Depot"
        assert (wax["start_time"], wax["end_time"], wax["duration"]) == ("08:00", "10:15", "2.25h")
        assert wax["completed_at"] is not None
        assert undated["date"] == ""
        assert undated["duration"] == "1.5h"

    def test_worker_tasks_unknown_worker(self, reports, supervisor):
        with pytest.raises(NotFoundError):
            reports.worker_tasks(supervisor.id)

    def test_attendance_history_open_log(self, reports, cleaner, add_log):
        add_log(cleaner, local(2024, 1, 16, 8))

        (row,) = reports.attendance_history(cleaner.id)

        assert row["clock_out"] == ""
        assert row["status"] == "pending"
        assert row["total_hours"] == 0.0

    def test_employee_dashboard(self, db, reports, cleaner, add_log):
        add_log(cleaner, local(2024, 1, 17, 8), local(2024, 1, 17, 12))   # today
        add_log(cleaner, local(2024, 1, 16, 8), local(2024, 1, 16, 10))   # yesterday
        add_log(cleaner, local(2024, 1, 10, 8), local(2024, 1, 10, 9))    # last week
        _task(db, cleaner, "Kitchen", AssignmentStatus.PENDING.value, due_date=as_utc(local(2024, 1, 17, 10)))
        _task(db, cleaner, "Sauna", AssignmentStatus.COMPLETED.value, due_date=as_utc(local(2024, 1, 17, 9)))
        _task(db, cleaner, "Garage", AssignmentStatus.COMPLETED.value, due_date=as_utc(local(2024, 1, 16, 9)))

        result = reports.employee_dashboard(cleaner.id, now=local(2024, 1, 17, 15))

        assert result["hours_today"] == 4.0
        assert result["hours_yesterday"] == 2.0
        assert result["hours_this_week"] == 6.0
        assert result["hours_last_week"] == 1.0
        assert result["to_do_today"] == 1
        assert result["done_today"] == 1
        assert result["to_do_yesterday"] == 0
        assert result["done_yesterday"] == 1
        assert len(result["attendance"]) == 3


class TestSupervisorViews:

    def test_supervisor_dashboard(self, db, reports, supervisor, cleaner, second_cleaner, add_log):
        add_log(cleaner, local(2024, 1, 16, 22), local(2024, 1, 17, 2))    # 2h after midnight
        add_log(cleaner, local(2024, 1, 17, 8), local(2024, 1, 17, 12, 30))
        add_log(cleaner, local(2024, 1, 17, 13), location="Kamppi")
        _task(db, cleaner, "Lobby", AssignmentStatus.IN_PROGRESS.value)
        _task(db, cleaner, "Sauna", AssignmentStatus.COMPLETED.value, completed_at=as_utc(local(2024, 1, 17, 9)))
        _task(db, cleaner, "Garage", AssignmentStatus.COMPLETED.value, completed_at=as_utc(local(2024, 1, 16, 9)))
        _task(db, cleaner, "Stairs", AssignmentStatus.REVIEW.value, completed_at=as_utc(local(2024, 1, 17, 12)))
        _task(db, second_cleaner, "Windows", AssignmentStatus.REVIEW.value, priority="High")

        result = reports.supervisor_dashboard(supervisor.id, now=local(2024, 1, 17, 15))

        assert result["stats"] == {"team_size": 1, "active_tasks": 1, "completed_today": 1, "alerts": 1}
        assert result["team_members"] == [{
            "id": cleaner.id,
            "name": "Kalle Cleaner",
            "status": "active",
            "location": "Kamppi",
            "hours_today": 6.5,
        }]
        (review,) = result["pending_reviews"]
        assert review["task"] == "Stairs"
        assert review["cleaner"] == "Kalle Cleaner"
        assert review["completed"] == "3 hours ago"
        assert review["priority"] == "Medium"

    def test_supervisor_dashboard_empty_team(self, reports, other_supervisor, cleaner):
        result = reports.supervisor_dashboard(other_supervisor.id, now=local(2024, 1, 17, 15))

        assert result["stats"]["team_size"] == 0
        assert result["team_members"] == []
        assert result["pending_reviews"] == []

    def test_team_members(self, reports, supervisor, cleaner, second_cleaner, add_log):
        add_log(cleaner, local(2024, 1, 15, 8), local(2024, 1, 15, 13))
        add_log(cleaner, local(2024, 1, 17, 7))

        team = reports.team_members(supervisor.id, now=local(2024, 1, 17, 12))

        assert len(team) == 1
        assert team[0]["name"] == "Kalle Cleaner"
        assert team[0]["status"] == "active"
        assert team[0]["hours_worked"] == 5.0
        assert team[0]["last_clock_in"] == "07:00"

    def test_task_report_is_scoped_to_team(self, db, reports, supervisor, cleaner, second_cleaner):
        _task(db, cleaner, "Stairwell", AssignmentStatus.COMPLETED.value, completed_at=as_utc(local(2024, 1, 15, 16)))
        _task(db, second_cleaner, "Windows", AssignmentStatus.UPCOMING.value)

        rows = reports.task_report(supervisor_id=supervisor.id)

        assert [r["task"] for r in rows] == ["Stairwell"]
        assert rows[0]["completed_date"] == "2024-01-15"
        assert len(reports.task_report()) == 2

    def test_attendance_report_uses_snapshot(self, reports, supervisor, cleaner, add_log):
        add_log(cleaner, local(2024, 1, 15, 8), local(2024, 1, 15, 18), regular_hours=8.0, overtime_hours=2.0)

        (row,) = reports.attendance_report(supervisor_id=supervisor.id)

        assert row["employee"] == "Kalle Cleaner"
        assert row["check_in"] == "08:00"
        assert row["check_out"] == "18:00"
        assert row["hours"] == 10.0

    def test_performance_report(self, db, reports, cleaner):
        _task(db, cleaner, "One", AssignmentStatus.COMPLETED.value)
        _task(db, cleaner, "Two", AssignmentStatus.PENDING.value)

        (row,) = reports.performance_report()

        assert row["tasks_completed"] == 1
        assert row["tasks_assigned"] == 2
        assert row["efficiency"] == "50.0%"
        assert row["rating"] == "Average"


@pytest.mark.parametrize("efficiency, rating", [
    (100.0, "Excellent"),
    (95.0, "Excellent"),
    (92.5, "Good"),
    (90.0, "Good"),
    (89.9, "Average"),
    (0.0, "Average"),
])
def test_performance_rating(efficiency, rating):
    assert performance_rating(efficiency) == rating
