"""Clock log model for cleaner attendance tracking.

One row per clock-in/clock-out pair. ``clock_out`` stays null while the shift
is running; the partial unique index guarantees a worker never has two open
rows at once.

``regular_hours``/``overtime_hours`` are a snapshot written at clock-out from
the day-bucketed classifier. Reports recompute from the raw timestamps.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from workforce.core.database import Base


class ClockLog(Base):
    """Individual clock-in / clock-out record."""
    __tablename__ = "clock_logs"
    __table_args__ = (
        Index(
            "uq_clock_logs_one_open_per_employee",
            "employee_id",
            unique=True,
            postgresql_where=text("clock_out IS NULL"),
            sqlite_where=text("clock_out IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Task whose clock-in opened this log (clock-out closes by recency, not by task)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=True, index=True)

    # Clock times
    clock_in = Column(DateTime(timezone=True), nullable=False, index=True)
    clock_out = Column(DateTime(timezone=True), nullable=True)

    # Snapshot at clock-out time
    regular_hours = Column(Float, default=0)
    overtime_hours = Column(Float, default=0)

    # Workplace name, or the task's free-text location
    location = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee = relationship("User", back_populates="clock_logs")
    assignment = relationship("Assignment", back_populates="clock_logs")

    @property
    def is_open(self) -> bool:
        return self.clock_out is None
