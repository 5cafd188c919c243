"""Payment settings — append-only history of the global hourly rate."""
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from workforce.core.database import Base


class PaymentSettings(Base):
    """One row per rate change. The newest row as of a given instant is the
    effective rate; older rows are kept for audit and never updated."""
    __tablename__ = "payment_settings"

    id = Column(Integer, primary_key=True, index=True)

    regular_rate = Column(Numeric(10, 2), nullable=False)
    overtime_rate = Column(Numeric(10, 2), nullable=False)  # regular * 1.5 at time of change

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    created_by = relationship("User", foreign_keys=[created_by_id])
