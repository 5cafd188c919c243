"""Hours and pay aggregation over clock logs.

Pipeline: logs -> local-day segments -> per-day totals -> regular/overtime
per day -> pay. Weekday overtime is priced at the overtime rate, Sunday
hours at the Sunday rate.

Nothing here touches the database. Logs are anything with ``clock_in`` and
``clock_out`` attributes; open or broken logs are skipped so a report never
fails on dirty data, it just undercounts. Numbers are not rounded here,
callers round for display via ``as_dict``.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from workforce.services.hours import allocate_day, classify_day
from workforce.services.rates import EffectiveRates
from workforce.services.segmentation import Segment, SUNDAY, split_interval

logger = logging.getLogger(__name__)

Interval = Tuple[Optional[datetime], Optional[datetime]]


def clock_interval(log) -> Interval:
    return getattr(log, "clock_in", None), getattr(log, "clock_out", None)


def log_key(log):
    key = getattr(log, "id", None)
    return key if key is not None else id(log)


@dataclass
class DayBreakdown:
    day: date
    hours: float
    regular: float
    overtime: float

    @property
    def is_sunday(self) -> bool:
        return self.day.weekday() == SUNDAY

    @property
    def day_key(self) -> str:
        return self.day.isoformat()

    def as_dict(self, digits: int = 2) -> dict:
        return {
            "date": self.day_key,
            "hours": round(self.regular, digits),
            "overtime": round(self.overtime, digits),
            "total_hours": round(self.hours, digits),
            "is_sunday": self.is_sunday,
        }


@dataclass
class PayrollSummary:
    rates: EffectiveRates
    days: List[DayBreakdown] = field(default_factory=list)
    total_regular_hours: float = 0.0
    weekday_overtime_hours: float = 0.0
    sunday_hours: float = 0.0
    regular_pay: float = 0.0
    overtime_pay: float = 0.0

    @property
    def total_overtime_hours(self) -> float:
        return self.weekday_overtime_hours + self.sunday_hours

    @property
    def total_hours(self) -> float:
        return self.total_regular_hours + self.total_overtime_hours

    @property
    def total_pay(self) -> float:
        return self.regular_pay + self.overtime_pay

    def as_dict(self, digits: int = 2, include_days: bool = False) -> dict:
        result = {
            "total_regular_hours": round(self.total_regular_hours, digits),
            "total_overtime_hours": round(self.total_overtime_hours, digits),
            "weekday_overtime_hours": round(self.weekday_overtime_hours, digits),
            "sunday_hours": round(self.sunday_hours, digits),
            "total_hours": round(self.total_hours, digits),
            "regular_pay": round(self.regular_pay, digits),
            "overtime_pay": round(self.overtime_pay, digits),
            "total_pay": round(self.total_pay, digits),
            "rates": self.rates.as_dict(),
        }
        if include_days:
            result["days"] = [d.as_dict(digits) for d in self.days]
        return result


@dataclass
class LogHours:
    total_hours: float = 0.0
    regular: float = 0.0
    overtime: float = 0.0
    sunday_hours: float = 0.0
    weekday_overtime_hours: float = 0.0


def bucket_segments(
    logs: Iterable[Any],
    tz=None,
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
    interval: Callable[[Any], Interval] = clock_interval,
) -> Dict[date, List[Tuple[Any, Segment]]]:
    """Group every log's day segments by local date."""
    buckets = defaultdict(list)
    for log in logs:
        start, end = interval(log)
        if end is None:
            continue  # still clocked in
        segments = split_interval(start, end, tz, window_start, window_end)
        if not segments and window_start is None and window_end is None:
            logger.warning(f"Skipping malformed clock log {log_key(log)}: {start!r} -> {end!r}")
        for seg in segments:
            buckets[seg.day].append((log, seg))
    return buckets


def aggregate(
    logs: Iterable[Any],
    rates: EffectiveRates,
    tz=None,
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
) -> PayrollSummary:
    """Total regular/overtime hours and pay for one worker's logs."""
    summary = PayrollSummary(rates=rates)
    buckets = bucket_segments(logs, tz, window_start, window_end)

    for day in sorted(buckets):
        hours = sum(seg.hours for _, seg in buckets[day])
        is_sunday = day.weekday() == SUNDAY
        classified = classify_day(hours, is_sunday)
        summary.days.append(DayBreakdown(day=day, hours=hours, regular=classified.regular,
                                         overtime=classified.overtime))

        summary.total_regular_hours += classified.regular
        summary.regular_pay += classified.regular * rates.regular_rate
        if is_sunday:
            summary.sunday_hours += classified.overtime
            summary.overtime_pay += classified.overtime * rates.sunday_rate
        else:
            summary.weekday_overtime_hours += classified.overtime
            summary.overtime_pay += classified.overtime * rates.overtime_rate

    return summary


def attribute_logs(
    logs: Iterable[Any],
    tz=None,
    interval: Callable[[Any], Interval] = clock_interval,
) -> Dict[Any, LogHours]:
    """Per-log share of the day-bucketed regular/overtime split.

    Keys are log ids. Logs that contribute nothing (open, malformed) are
    absent from the result. Logs starting at the same instant draw on the
    regular budget in log id order, whatever order they come in.
    """
    per_log = {}
    buckets = bucket_segments(logs, tz, interval=interval)
    for day, pairs in buckets.items():
        is_sunday = day.weekday() == SUNDAY
        pairs = sorted(pairs, key=lambda pair: (pair[1].start, log_key(pair[0])))
        for allocated in allocate_day(pairs, is_sunday):
            entry = per_log.setdefault(log_key(allocated.owner), LogHours())
            entry.total_hours += allocated.segment.hours
            entry.regular += allocated.regular
            entry.overtime += allocated.overtime
            if is_sunday:
                entry.sunday_hours += allocated.overtime
            else:
                entry.weekday_overtime_hours += allocated.overtime
    return per_log
