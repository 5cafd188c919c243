"""Admin API — dashboard, cleaner detail, payment settings, salary calculator, reports."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel

from workforce.core.database import get_db
from workforce.core.security import get_current_user, require_admin
from workforce.models.user import User
from workforce.models.assignment import Workplace
from workforce.schemas.assignment import AssignTaskRequest
from workforce.schemas.timeclock import PaymentSettingsOut, PaymentSettingsUpdate
from workforce.services.assignments import AssignmentService
from workforce.services.rates import RateResolver
from workforce.services.reports import ReportService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"])


# ── Schemas ──────────────────────────────────────────────────────────

class WorkplaceRequest(BaseModel):
    name: str
    address: str


# ── Dashboard ────────────────────────────────────────────────────────

@router.get("/stats")
def get_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Cleaner count, active assignments, hours and payroll this week."""
    require_admin(current_user)
    return ReportService(db).dashboard_stats()


@router.get("/cleaner/{cleaner_id}")
def get_cleaner_detail(
    cleaner_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Daily work records, totals and effective rates for one cleaner."""
    require_admin(current_user)
    return ReportService(db).worker_detail(cleaner_id)


# ── Payment Settings ─────────────────────────────────────────────────

@router.get("/payment-settings")
def get_payment_settings(
    cleaner_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Effective rates, globally or for one cleaner."""
    require_admin(current_user)
    return ReportService(db).effective_rates(cleaner_id)


@router.post("/payment-settings", response_model=PaymentSettingsOut)
def update_payment_settings(
    body: PaymentSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record a new global regular rate. Previous rates are kept."""
    require_admin(current_user)
    return RateResolver(db).update_global(body.regular_rate, created_by_id=current_user.id)


@router.get("/payment-settings/history", response_model=list[PaymentSettingsOut])
def payment_settings_history(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    return RateResolver(db).store.history(limit)


# ── Salary Calculator ────────────────────────────────────────────────

@router.get("/salary-calculator/cleaners")
def salary_calculator_cleaners(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Cleaners for the calculator dropdown, with their effective hourly rate."""
    require_admin(current_user)
    return ReportService(db).salary_calculator_workers()


@router.get("/salary-calculator/calculate")
def calculate_salary(
    cleaner_id: int,
    start_date: str,
    end_date: str,  # inclusive
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    return ReportService(db).calculate_salary(cleaner_id, start_date, end_date)


# ── Reports ──────────────────────────────────────────────────────────

@router.get("/reports/tasks")
def task_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    return ReportService(db).task_report()


@router.get("/reports/attendance")
def attendance_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    return ReportService(db).attendance_report()


@router.get("/reports/performance")
def performance_reports(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    return ReportService(db).performance_report()


# ── Workplaces & Tasks ───────────────────────────────────────────────

@router.get("/workplaces")
def list_workplaces(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    workplaces = db.query(Workplace).order_by(Workplace.created_at.desc(), Workplace.id.desc()).all()
    return [{"id": w.id, "name": w.name, "address": w.address} for w in workplaces]


@router.post("/workplaces")
def create_workplace(
    body: WorkplaceRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_admin(current_user)
    if not body.name.strip() or not body.address.strip():
        raise HTTPException(status_code=400, detail="Name and address are required")

    workplace = Workplace(name=body.name.strip(), address=body.address.strip())
    db.add(workplace)
    db.commit()
    db.refresh(workplace)
    logger.info(f"Workplace {workplace.id} '{workplace.name}' created by {current_user.email}")
    return {"id": workplace.id, "name": workplace.name, "address": workplace.address}


@router.post("/assign-task")
def assign_task(
    body: AssignTaskRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Assign a task to a cleaner. Due today or earlier starts as PENDING."""
    require_admin(current_user)
    task = AssignmentService(db).assign(body)
    return {"id": task.id, "title": task.title, "status": task.status, "cleaner_id": task.employee_id}
