"""
Leads Dashboard Hub — Metrics Aggregator
===========================================

Folds fetched lead records into the chart skeleton and the window KPIs.

Counting rules, per lead inside the window with a readable created_at:
  total                  +1
  <agent_id>             +1   (agent selected as a series)
  connected              +1   (interaction_count > threshold)
  <agent_id>_connected   +1   (connected and agent selected)

KPIs count exactly the leads the store returned for the active filter;
agent selection is the store's job and is not re-applied here. Every series
variant is always filled, so switching metric mode needs no recomputation.

Functions:
  aggregate()         - Chart series + current and previous KPIs
  get_chart_series()  - Chart series only
  get_kpis()          - Scalars for a list of leads
"""
from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from models.lead_models import (
    METRIC_MODES,
    AggregateResult,
    DayBucket,
    KpiSnapshot,
    LeadRecord,
    MetricMode,
    TimeWindow,
)
from scripts.lib.config import get_timezone
from scripts.lib.errors import SchemaValidationError
from scripts.lib.logger import setup_logger
from scripts.leads.bucketing import (
    CONNECTED_KEY,
    TOTAL_KEY,
    build_skeleton,
    connected_key,
    day_of,
    series_keys_for,
)
from scripts.leads.classifier import is_connected
from scripts.leads.time_window import localize, materialize_window, previous_window

logger = setup_logger("aggregator")


def _in_window(instant: datetime, window: TimeWindow) -> bool:
    return window.start <= instant <= window.end


def _placeable(leads: Iterable[LeadRecord], tz: tzinfo) -> tuple[list[tuple[LeadRecord, datetime]], int]:
    """Split leads into (lead, local created_at) pairs and a count of unplaceable ones."""
    placed = []
    skipped = 0
    for lead in leads:
        if lead.created_at is None:
            skipped += 1
            continue
        placed.append((lead, localize(lead.created_at, tz)))
    return placed, skipped


def _count(
    placed: Sequence[tuple[LeadRecord, datetime]],
    window: Optional[TimeWindow],
    threshold: int,
) -> KpiSnapshot:
    total = 0
    connected = 0
    for lead, created in placed:
        if window is not None and not _in_window(created, window):
            continue
        total += 1
        if is_connected(lead, threshold):
            connected += 1
    return KpiSnapshot.from_counts(total, connected)


def get_kpis(
    leads: Iterable[LeadRecord],
    threshold: int,
    tz: Optional[tzinfo] = None,
) -> KpiSnapshot:
    """KPIs over every lead with a readable created_at."""
    placed, _ = _placeable(leads, tz or get_timezone())
    return _count(placed, None, threshold)


def aggregate(
    leads: Iterable[LeadRecord],
    window: TimeWindow,
    previous_leads: Iterable[LeadRecord] = (),
    series_keys: Iterable[str] = (),
    threshold: int = 3,
    metric_mode: MetricMode = "total",
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> AggregateResult:
    """
    Build the chart series and the current/previous KPI snapshots.

    Args:
        leads: Leads fetched for `window`.
        window: Current window. An unbounded window starts at the earliest
            lead's day (or the 30-day fallback when there are none).
        previous_leads: Leads fetched for the previous window.
        series_keys: Selected agent ids; each gets a total and a connected series.
        threshold: Interactions a lead must exceed to count as connected.
        metric_mode: Echoed back for the chart consumer.
        tz: Dashboard timezone.
        now: Reference instant for the unbounded fallback.

    Returns:
        AggregateResult with the materialised window.
    """
    if metric_mode not in METRIC_MODES:
        raise SchemaValidationError(f"Unknown metric mode: {metric_mode}", field="metric_mode")

    tz = tz or get_timezone()
    agents = list(dict.fromkeys(series_keys))
    selected = set(agents)

    placed, skipped = _placeable(leads, tz)
    if skipped:
        logger.debug("Skipped %d lead(s) without a readable created_at", skipped)

    unbounded = window.is_unbounded
    if unbounded:
        earliest = min((created for _, created in placed), default=None)
        window = materialize_window(window, earliest, now, tz)

    series = build_skeleton(window, series_keys_for(agents), tz)
    by_day: Dict = {bucket.day: bucket for bucket in series}

    total = 0
    connected = 0
    for lead, created in placed:
        if not _in_window(created, window):
            continue
        bucket: DayBucket = by_day[day_of(created, tz)]
        counts = bucket.counts
        is_agent_series = lead.agent_id is not None and lead.agent_id in selected
        lead_connected = is_connected(lead, threshold)

        counts[TOTAL_KEY] += 1
        total += 1
        if is_agent_series:
            counts[lead.agent_id] += 1
        if lead_connected:
            counts[CONNECTED_KEY] += 1
            connected += 1
            if is_agent_series:
                counts[connected_key(lead.agent_id)] += 1

    previous_placed, previous_skipped = _placeable(previous_leads, tz)
    if unbounded:
        previous = _count(previous_placed, None, threshold)
    else:
        previous = _count(previous_placed, previous_window(window, tz), threshold)

    logger.debug(
        "Aggregated %d lead(s) into %d day bucket(s) (%d connected)",
        total, len(series), connected,
    )
    return AggregateResult(
        window=window,
        series=series,
        current=KpiSnapshot.from_counts(total, connected),
        previous=previous,
        metric_mode=metric_mode,
        skipped_records=skipped + previous_skipped,
    )


def get_chart_series(
    leads: Iterable[LeadRecord],
    window: TimeWindow,
    series_keys: Iterable[str],
    threshold: int,
    mode: MetricMode = "total",
    tz: Optional[tzinfo] = None,
) -> List[DayBucket]:
    """Chart series for a window; the previous period is not needed here."""
    return aggregate(
        leads, window, (), series_keys, threshold, mode, tz=tz,
    ).series
