"""Daily regular/overtime classification.

Rules:
- Mon–Sat: first 8 hours of the day are regular, the rest is overtime (1.5x)
- Sunday: every hour is overtime (2x)

The 8 hours are a budget for the whole day, not per shift: two 5h shifts on
a Tuesday are 8h regular + 2h overtime.
"""
from typing import Any, Iterable, List, NamedTuple, Optional, Tuple

from workforce.core.config import settings
from workforce.services.segmentation import Segment

REGULAR_HOURS_PER_DAY = settings.REGULAR_HOURS_PER_DAY


class DayHours(NamedTuple):
    regular: float
    overtime: float


class SegmentHours(NamedTuple):
    owner: Any  # whatever the caller attached to the segment, usually a ClockLog
    segment: Segment
    regular: float
    overtime: float


def classify_day(hours: float, is_sunday: bool, threshold: Optional[float] = None) -> DayHours:
    if threshold is None:
        threshold = REGULAR_HOURS_PER_DAY
    if hours <= 0:
        return DayHours(0.0, 0.0)
    if is_sunday:
        return DayHours(0.0, hours)
    regular = min(threshold, hours)
    return DayHours(regular, max(0.0, hours - threshold))


def allocate_day(
    segments: Iterable[Tuple[Any, Segment]],
    is_sunday: bool,
    threshold: Optional[float] = None,
) -> List[SegmentHours]:
    """Split one day's segments into regular/overtime, earliest first.

    ``segments`` are ``(owner, segment)`` pairs that all fall on the same
    local day. Earlier segments use up the regular budget; whichever
    segment crosses the threshold carries the overtime. Segments starting
    at the same instant keep their input order.
    """
    if threshold is None:
        threshold = REGULAR_HOURS_PER_DAY

    ordered = sorted(segments, key=lambda pair: pair[1].start)
    allocated = []
    remaining = threshold
    for owner, seg in ordered:
        if is_sunday:
            allocated.append(SegmentHours(owner, seg, 0.0, seg.hours))
            continue
        regular = min(remaining, seg.hours)
        remaining -= regular
        allocated.append(SegmentHours(owner, seg, regular, seg.hours - regular))
    return allocated
