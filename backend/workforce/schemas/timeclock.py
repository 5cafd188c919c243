from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ClockLogOut(BaseModel):
    id: int
    employee_id: int
    assignment_id: Optional[int] = None
    clock_in: datetime
    clock_out: Optional[datetime] = None
    regular_hours: float = 0
    overtime_hours: float = 0
    location: Optional[str] = None

    class Config:
        from_attributes = True


class PaymentSettingsUpdate(BaseModel):
    regular_rate: float = Field(..., gt=0)


class PaymentSettingsOut(BaseModel):
    id: int
    regular_rate: float
    overtime_rate: float
    created_by_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
