from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AssignTaskRequest(BaseModel):
    cleaner_id: int
    title: str
    description: Optional[str] = None
    workplace_id: Optional[int] = None
    location: Optional[str] = None
    priority: Optional[str] = None
    estimated_hours: Optional[float] = None
    due_date: Optional[datetime] = None
    start_time: Optional[datetime] = None
