"""
Leads Dashboard Hub — Time Window Resolver
=============================================

Turns a dashboard range selection into concrete instants.

Functions:
  resolve_window()      - Range code / explicit dates -> TimeWindow
  previous_window()     - Immediately preceding window of equal length
  materialize_window()  - Replace an unbounded start with a concrete one
  iter_days()           - Every calendar date a window touches
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterator, Optional, Union

from models.lead_models import RangeSpec, TimeWindow
from scripts.lib.config import get_timezone
from scripts.lib.errors import WindowError

RELATIVE_RANGES = {
    "7d": 7,
    "15d": 15,
    "30d": 30,
    "60d": 60,
    "90d": 90,
}
ALL_TIME = "all"

# All-time window with no records to anchor on
ALL_TIME_FALLBACK_DAYS = 30


def localize(instant: datetime, tz: tzinfo) -> datetime:
    """Express an instant in tz. Naive values are read as wall time in tz."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    """Last representable instant of the day (23:59:59.999999)."""
    return datetime.combine(day, time.max, tzinfo=tz)


def _now(now: Optional[datetime], tz: tzinfo) -> datetime:
    if now is None:
        return datetime.now(tz)
    return localize(now, tz)


def resolve_window(
    spec: Union[RangeSpec, str],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> TimeWindow:
    """
    Resolve a range selection into a TimeWindow.

    Args:
        spec: RangeSpec, or a bare range code such as "30d" or "all".
        now: Reference instant (defaults to the current time).
        tz: Dashboard timezone (defaults to DASHBOARD_TIMEZONE).

    Returns:
        TimeWindow. For "all" the start is None (unbounded).

    Raises:
        WindowError: Unknown range code or a start date after the end date.
    """
    tz = tz or get_timezone()
    if isinstance(spec, str):
        spec = RangeSpec(code=spec)

    if spec.code is not None:
        code = spec.code.strip().lower()
        current = _now(now, tz)
        if code == ALL_TIME:
            return TimeWindow(start=None, end=current)
        if code not in RELATIVE_RANGES:
            raise WindowError(
                f"Unknown range '{spec.code}'. Expected one of: "
                f"{', '.join([*RELATIVE_RANGES, ALL_TIME])}",
                range_spec=spec.code,
            )
        return TimeWindow(
            start=current - timedelta(days=RELATIVE_RANGES[code]),
            end=current,
        )

    first = spec.date_from
    last = spec.date_to or first
    if first > last:
        raise WindowError(
            f"Range start {first.isoformat()} is after its end {last.isoformat()}",
            range_spec=f"{first.isoformat()}..{last.isoformat()}",
        )
    return TimeWindow(start=start_of_day(first, tz), end=end_of_day(last, tz))


def is_day_aligned(window: TimeWindow, tz: tzinfo) -> bool:
    """True when the window runs from the start of one local day to the end of another."""
    if window.is_unbounded:
        return False
    return (
        localize(window.start, tz).time() == time.min
        and localize(window.end, tz).time() == time.max
    )


def previous_window(window: TimeWindow, tz: Optional[tzinfo] = None) -> TimeWindow:
    """
    The window of equal length ending the instant before `window` starts.

    A day-aligned window moves back by whole calendar days, so the previous
    period covers the same number of local days. Any other window (the
    relative "7d" ... "90d" codes) moves back by its exact span plus one
    microsecond. Either way prev.end + 1µs == window.start.

    Raises:
        WindowError: The window is unbounded.
    """
    if window.is_unbounded:
        raise WindowError("An unbounded window has no previous period", range_spec=ALL_TIME)
    tz = tz or get_timezone()

    if is_day_aligned(window, tz):
        days = timedelta(days=window.days_in(tz))
        first = localize(window.start, tz).date() - days
        last = localize(window.end, tz).date() - days
        return TimeWindow(start=start_of_day(first, tz), end=end_of_day(last, tz))

    shift = (window.end - window.start) + timedelta(microseconds=1)
    return TimeWindow(start=window.start - shift, end=window.end - shift)


def materialize_window(
    window: TimeWindow,
    earliest: Optional[datetime] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> TimeWindow:
    """
    Give an unbounded window a concrete start.

    The start becomes the beginning of the earliest record's day, or
    ALL_TIME_FALLBACK_DAYS before the window end when there are no records.
    Bounded windows are returned unchanged.
    """
    if not window.is_unbounded:
        return window

    tz = tz or get_timezone()
    end = localize(window.end, tz)
    if earliest is not None:
        first_day = min(localize(earliest, tz).date(), end.date())
        return TimeWindow(start=start_of_day(first_day, tz), end=end)

    anchor = localize(now, tz) if now is not None else end
    start = min(anchor - timedelta(days=ALL_TIME_FALLBACK_DAYS), end)
    return TimeWindow(start=start, end=end)


def iter_days(window: TimeWindow, tz: Optional[tzinfo] = None) -> Iterator[date]:
    """Yield every calendar date in the window, in order."""
    if window.is_unbounded:
        raise WindowError("Cannot enumerate days of an unbounded window", range_spec=ALL_TIME)
    tz = tz or get_timezone()
    day = localize(window.start, tz).date()
    last = localize(window.end, tz).date()
    while day <= last:
        yield day
        day += timedelta(days=1)
