"""Domain errors raised by the service layer.

Routers don't translate these one by one: main.py maps every WorkforceError
to a JSON response using its ``status_code``.
"""
from fastapi import status


class WorkforceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Request could not be processed"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class NotFoundError(WorkforceError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Entity not found"


class PermissionDeniedError(WorkforceError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Not allowed"


class AlreadyClockedInError(WorkforceError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already clocked in. Clock out first."


class InvalidDateRangeError(WorkforceError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "End date must not be before start date"


class InvalidClockOutError(WorkforceError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Clock-out must be after clock-in"
