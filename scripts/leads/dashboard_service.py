"""
Leads Dashboard Hub — Dashboard Service
==========================================

One dashboard refresh, end to end:

  range -> current window -> previous window
        -> fetch both concurrently (join before computing)
        -> aggregate -> trends -> prorated goals

An all-time request has nothing before it, so its previous period is empty
and only one fetch is made.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, tzinfo
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from models.lead_models import (
    DashboardSettings,
    DashboardSnapshot,
    LeadFilter,
    LeadRecord,
    MetricMode,
    RangeSpec,
)
from scripts.lib.config import get_timezone
from scripts.lib.errors import DataFetchError
from scripts.lib.lead_store import fetch_leads
from scripts.lib.logger import setup_logger
from scripts.leads.aggregator import aggregate
from scripts.leads.bucketing import chart_keys, default_series_keys
from scripts.leads.targets import goal_progress, proportional_target
from scripts.leads.time_window import previous_window, resolve_window
from scripts.leads.trend import trend

logger = setup_logger("dashboard_service")

Fetcher = Callable[[LeadFilter], Awaitable[List[LeadRecord]]]


async def _no_leads() -> List[LeadRecord]:
    return []


async def build_dashboard(
    range_spec: Union[RangeSpec, str],
    agent_ids: Optional[Sequence[str]] = None,
    metric_mode: MetricMode = "total",
    settings: Optional[DashboardSettings] = None,
    fetch: Optional[Fetcher] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DashboardSnapshot:
    """
    Compute the full dashboard for one filter state.

    Args:
        range_spec: Range code ("7d" ... "90d", "all") or explicit dates.
        agent_ids: Selected agents; None or empty selects every agent.
        metric_mode: Which per-agent series the chart shows.
        settings: Threshold and targets; defaults when omitted.
        fetch: Lead store query (async). Defaults to fetch_leads.
            Failures propagate as DataFetchError.
        now: Reference instant.
        tz: Dashboard timezone.
    """
    tz = tz or get_timezone()
    fetch = fetch or fetch_leads
    settings = settings or DashboardSettings()
    threshold = settings.interaction_threshold
    agents = list(agent_ids) if agent_ids else None

    window = resolve_window(range_spec, now=now, tz=tz)
    current_filter = LeadFilter(
        window_start=window.start,
        window_end=window.end,
        agent_ids=agents,
        threshold=threshold,
    )

    prior = None
    if window.is_unbounded:
        previous_fetch = _no_leads()
    else:
        prior = previous_window(window, tz)
        previous_fetch = fetch(current_filter.model_copy(
            update={"window_start": prior.start, "window_end": prior.end},
        ))

    results = await asyncio.gather(fetch(current_filter), previous_fetch, return_exceptions=True)
    errors = [r for r in results if isinstance(r, BaseException)]
    if errors:
        failure = next((e for e in errors if isinstance(e, DataFetchError)), errors[0])
        for error in errors:
            if error is not failure:
                logger.error("Concurrent lead fetch also failed: %s", error)
        raise failure
    leads, previous_leads = results

    series_keys = agents or default_series_keys(lead.agent_id for lead in leads)
    result = aggregate(
        leads,
        window,
        previous_leads,
        series_keys=series_keys,
        threshold=threshold,
        metric_mode=metric_mode,
        tz=tz,
        now=now,
    )
    current, previous = result.current, result.previous

    # Goals follow the selected range; all-time keeps the whole monthly target
    total_goal = proportional_target(settings.total_leads_target, window, tz)
    connected_goal = proportional_target(settings.connected_leads_target, window, tz)

    logger.info(
        "Dashboard built: %d lead(s), %d connected, %d day(s), mode=%s",
        current.total_leads, current.connected_leads, len(result.series), metric_mode,
    )
    return DashboardSnapshot(
        window=result.window,
        previous_window=prior,
        metric_mode=metric_mode,
        threshold=threshold,
        series=result.series,
        series_labels={agent: settings.agent_names.get(agent, agent) for agent in series_keys},
        chart_keys={agent: chart_keys(agent, metric_mode) for agent in series_keys},
        current=current,
        previous=previous,
        trends={
            "total_leads": trend(current.total_leads, previous.total_leads),
            "connected_leads": trend(current.connected_leads, previous.connected_leads),
            "connectivity_rate": trend(current.connectivity_rate, previous.connectivity_rate),
        },
        goals={
            "total_leads": goal_progress(current.total_leads, total_goal),
            "connected_leads": goal_progress(current.connected_leads, connected_goal),
            "connectivity_rate": goal_progress(
                current.connectivity_rate, settings.connectivity_target,
            ),
        },
        skipped_records=result.skipped_records,
    )
