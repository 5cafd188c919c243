from workforce.models.user import User, UserRole
from workforce.models.assignment import Assignment, AssignmentStatus, Workplace
from workforce.models.timeclock import ClockLog
from workforce.models.payroll import PaymentSettings

__all__ = [
    "User",
    "UserRole",
    "Assignment",
    "AssignmentStatus",
    "Workplace",
    "ClockLog",
    "PaymentSettings",
]
