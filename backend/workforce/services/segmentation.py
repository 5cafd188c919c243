"""Split clock intervals into local-calendar-day segments.

Overtime is judged per calendar day, so every interval is cut at local
midnight before anything is summed. "Local" is always the organization
timezone from settings, never the server's zone; naive datetimes coming out
of the database are UTC.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, NamedTuple, Optional, Tuple

import pytz
from dateutil.relativedelta import relativedelta, MO

from workforce.core.config import settings

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0
SUNDAY = 6  # date.weekday()


class Segment(NamedTuple):
    day: date
    start: datetime
    end: datetime
    hours: float

    @property
    def day_key(self) -> str:
        return self.day.isoformat()

    @property
    def is_sunday(self) -> bool:
        return self.day.weekday() == SUNDAY


def get_org_timezone():
    return pytz.timezone(settings.ORG_TIMEZONE)


def to_local(value: datetime, tz=None) -> datetime:
    """Convert to the org zone. Naive values are taken as UTC."""
    tz = tz or get_org_timezone()
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(tz)


def as_utc(value: datetime) -> datetime:
    """Normalize for storage and queries; sqlite drops offsets on write."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def local_midnight(day: date, tz=None) -> datetime:
    tz = tz or get_org_timezone()
    return tz.localize(datetime.combine(day, time.min))


def local_today(now: Optional[datetime] = None, tz=None) -> date:
    now = now or datetime.now(pytz.utc)
    return to_local(now, tz).date()


def day_window(day: date, tz=None) -> Tuple[datetime, datetime]:
    """[midnight, next midnight) for a local day."""
    return local_midnight(day, tz), local_midnight(day + timedelta(days=1), tz)


def week_window(now: Optional[datetime] = None, tz=None) -> Tuple[datetime, datetime]:
    """Monday 00:00 to the following Monday 00:00, local time."""
    monday = local_today(now, tz) + relativedelta(weekday=MO(-1))
    return local_midnight(monday, tz), local_midnight(monday + timedelta(days=7), tz)


def date_range_window(start_date: date, end_date: date, tz=None) -> Tuple[datetime, datetime]:
    """Inclusive date range as a half-open instant window."""
    return local_midnight(start_date, tz), local_midnight(end_date + timedelta(days=1), tz)


def split_interval(
    start,
    end,
    tz=None,
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
) -> List[Segment]:
    """Cut ``[start, end)`` at every local midnight.

    Segments are contiguous and ordered; their hours add up to the clamped
    interval length. Anything that isn't a proper interval (missing end,
    end not after start, non-datetime values) gives an empty list.
    """
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return []

    tz = tz or get_org_timezone()
    start = to_local(start, tz)
    end = to_local(end, tz)

    if window_start is not None:
        start = max(start, to_local(window_start, tz))
    if window_end is not None:
        end = min(end, to_local(window_end, tz))

    segments = []
    seg_start = start
    while seg_start < end:
        day = seg_start.date()
        boundary = local_midnight(day + timedelta(days=1), tz)
        seg_end = boundary if boundary < end else end
        hours = (seg_end - seg_start).total_seconds() / SECONDS_PER_HOUR
        segments.append(Segment(day=day, start=seg_start, end=seg_end, hours=hours))
        seg_start = seg_end

    return segments
