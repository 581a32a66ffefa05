"""
Leads Dashboard Hub — Date Bucketing
=======================================

Builds the dense calendar skeleton the lead chart is drawn on: one bucket
per calendar day of the window, no gaps, each pre-seeded with zero for
every series so a quiet day reads as 0 rather than missing.

Skeleton days and lead placement both go through day_of(), so a lead
always lands in the bucket of its own local calendar day.
"""
from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional

from models.lead_models import DayBucket, MetricMode, TimeWindow
from scripts.lib.config import get_timezone
from scripts.lib.errors import SchemaValidationError
from scripts.leads.time_window import iter_days, localize, materialize_window

TOTAL_KEY = "total"
CONNECTED_KEY = "connected"
AGGREGATE_KEYS = (TOTAL_KEY, CONNECTED_KEY)
CONNECTED_SUFFIX = "_connected"

DAY_KEY_FORMAT = "%d/%m"
DAY_KEY_FORMAT_WITH_YEAR = "%d/%m/%Y"


def day_of(instant: datetime, tz: tzinfo) -> date:
    """Local calendar day of an instant."""
    return localize(instant, tz).date()


def format_day_key(day: date, with_year: bool = False) -> str:
    return day.strftime(DAY_KEY_FORMAT_WITH_YEAR if with_year else DAY_KEY_FORMAT)


def day_key(instant: datetime, tz: tzinfo) -> str:
    return format_day_key(day_of(instant, tz))


def connected_key(agent_id: str) -> str:
    return f"{agent_id}{CONNECTED_SUFFIX}"


def is_reserved_key(agent_id: str) -> bool:
    """Agent ids that would share a counter with an aggregate or connected series."""
    return agent_id in AGGREGATE_KEYS or agent_id.endswith(CONNECTED_SUFFIX)


def default_series_keys(agent_ids: Iterable[Optional[str]]) -> List[str]:
    """Distinct usable agent ids, sorted. Reserved ids get no per-agent series."""
    return sorted({a for a in agent_ids if a and not is_reserved_key(a)})


def series_keys_for(agent_ids: Iterable[str]) -> List[str]:
    """
    Expand agent ids into their total and connected series keys.

    Raises:
        SchemaValidationError: An agent id collides with a reserved series key.
    """
    keys: List[str] = []
    for agent_id in agent_ids:
        if is_reserved_key(agent_id):
            raise SchemaValidationError(
                f"Agent id '{agent_id}' collides with a reserved series key",
                field="agent_ids",
            )
        keys.append(agent_id)
        keys.append(connected_key(agent_id))
    return list(dict.fromkeys(keys))


def chart_keys(agent_id: str, mode: MetricMode) -> List[str]:
    """Which per-day counts a chart reads for an agent in a metric mode."""
    if mode == "total":
        return [agent_id]
    if mode == "connected":
        return [connected_key(agent_id)]
    if mode == "comparison":
        return [agent_id, connected_key(agent_id)]
    raise ValueError(f"Unknown metric mode: {mode}")


def build_skeleton(
    window: TimeWindow,
    series_keys: Iterable[str],
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> List[DayBucket]:
    """
    Zero-filled, chronologically ordered day buckets spanning the window.

    Args:
        window: Window to cover. An unbounded window falls back to the
            trailing ALL_TIME_FALLBACK_DAYS so the result is never empty.
        series_keys: Keys to seed; "total" and "connected" are always added.
        tz: Dashboard timezone.
        now: Reference instant for the unbounded fallback.

    Returns:
        One DayBucket per calendar day. date_key is "dd/mm", or "dd/mm/yyyy"
        when the window is long enough for "dd/mm" to repeat.
    """
    tz = tz or get_timezone()
    if window.is_unbounded:
        window = materialize_window(window, None, now, tz)

    keys = list(dict.fromkeys([*series_keys, *AGGREGATE_KEYS]))
    days = sorted(iter_days(window, tz))

    with_year = len({format_day_key(d) for d in days}) != len(days)
    return [
        DayBucket(
            day=d,
            date_key=format_day_key(d, with_year=with_year),
            counts={key: 0 for key in keys},
        )
        for d in days
    ]
