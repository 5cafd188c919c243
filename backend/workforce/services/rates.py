"""Hourly rate resolution.

A cleaner's own ``hourly_rate`` wins; otherwise the current global rate from
the payment settings history; otherwise DEFAULT_REGULAR_RATE so payroll works
before an admin has configured anything. Overtime and Sunday rates are always
derived from the regular rate, never stored per worker.
"""
import logging
from datetime import datetime, timezone
from typing import List, NamedTuple, Optional

from sqlalchemy.orm import Session

from workforce.core.config import settings
from workforce.core.exceptions import NotFoundError
from workforce.models.payroll import PaymentSettings
from workforce.models.user import User

logger = logging.getLogger(__name__)

OVERTIME_MULTIPLIER = settings.OVERTIME_MULTIPLIER
SUNDAY_MULTIPLIER = settings.SUNDAY_MULTIPLIER


def round2(value) -> float:
    return round(float(value), 2)


class EffectiveRates(NamedTuple):
    regular_rate: float
    overtime_rate: float
    sunday_rate: float

    def as_dict(self) -> dict:
        return {
            "regular_rate": self.regular_rate,
            "overtime_rate": self.overtime_rate,
            "sunday_overtime_rate": self.sunday_rate,
        }


def resolve_rates(regular_rate) -> EffectiveRates:
    regular = float(regular_rate)
    return EffectiveRates(
        regular_rate=round2(regular),
        overtime_rate=round2(regular * OVERTIME_MULTIPLIER),
        sunday_rate=round2(regular * SUNDAY_MULTIPLIER),
    )


class PaymentSettingsStore:
    """Append-only rate history with an explicit "current as of" lookup."""

    def __init__(self, db: Session):
        self.db = db

    def current(self, as_of: Optional[datetime] = None) -> Optional[PaymentSettings]:
        query = self.db.query(PaymentSettings)
        if as_of is not None:
            query = query.filter(PaymentSettings.created_at <= as_of)
        return query.order_by(
            PaymentSettings.created_at.desc(),
            PaymentSettings.id.desc(),
        ).first()

    def history(self, limit: int = 50) -> List[PaymentSettings]:
        return (
            self.db.query(PaymentSettings)
            .order_by(PaymentSettings.created_at.desc(), PaymentSettings.id.desc())
            .limit(limit)
            .all()
        )

    def append(
        self,
        regular_rate: float,
        created_by_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> PaymentSettings:
        row = PaymentSettings(
            regular_rate=round2(regular_rate),
            overtime_rate=round2(float(regular_rate) * OVERTIME_MULTIPLIER),
            created_by_id=created_by_id,
            created_at=now or datetime.now(timezone.utc),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row


class RateResolver:

    def __init__(self, db: Session):
        self.db = db
        self.store = PaymentSettingsStore(db)

    def global_regular_rate(self, as_of: Optional[datetime] = None) -> float:
        row = self.store.current(as_of)
        if row is None:
            logger.debug("No payment settings configured, using default rate %s", settings.DEFAULT_REGULAR_RATE)
            return float(settings.DEFAULT_REGULAR_RATE)
        return float(row.regular_rate)

    def for_worker(self, worker: Optional[User] = None, as_of: Optional[datetime] = None) -> EffectiveRates:
        if worker is not None and worker.hourly_rate is not None:
            return resolve_rates(worker.hourly_rate)
        return resolve_rates(self.global_regular_rate(as_of))

    def for_worker_id(self, worker_id: Optional[int] = None) -> EffectiveRates:
        if worker_id is None:
            return self.for_worker(None)
        worker = self.db.query(User).filter(User.id == worker_id).first()
        if not worker:
            raise NotFoundError("Cleaner not found")
        return self.for_worker(worker)

    def update_global(self, regular_rate: float, created_by_id: Optional[int] = None) -> PaymentSettings:
        row = self.store.append(regular_rate, created_by_id=created_by_id)
        logger.info(f"Global regular rate set to {row.regular_rate} by user {created_by_id}")
        return row
