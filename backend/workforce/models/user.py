from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from workforce.core.database import Base
import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    role = Column(String, default="employee", nullable=False)
    status = Column(String, nullable=True)  # free-form presence label shown to supervisors
    is_active = Column(Boolean, default=True)

    # Cleaner-specific fields
    hourly_rate = Column(Numeric(10, 2), nullable=True)  # null = use global payment settings
    supervisor_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    supervisor = relationship("User", remote_side=[id], backref="subordinates")
    assignments = relationship("Assignment", back_populates="employee", cascade="all, delete-orphan")
    clock_logs = relationship("ClockLog", back_populates="employee", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
