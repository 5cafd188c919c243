"""Assignment (task) and workplace models."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from workforce.core.database import Base
import enum


class AssignmentStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"  # cleaner clocked out, waiting for supervisor sign-off
    COMPLETED = "COMPLETED"


class Workplace(Base):
    __tablename__ = "workplaces"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    assignments = relationship("Assignment", back_populates="workplace")


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    workplace_id = Column(Integer, ForeignKey("workplaces.id"), nullable=True, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)  # fallback when no workplace is linked
    priority = Column(String, nullable=True)
    status = Column(String, default=AssignmentStatus.UPCOMING.value, nullable=False, index=True)

    due_date = Column(DateTime(timezone=True), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    estimated_hours = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee = relationship("User", back_populates="assignments")
    workplace = relationship("Workplace", back_populates="assignments")
    clock_logs = relationship("ClockLog", back_populates="assignment")

    @property
    def workplace_label(self) -> str:
        if self.workplace is not None:
            return self.workplace.name
        return self.location or ""
