"""
Leads Dashboard Hub — Metrics Router
=======================================
Lead chart series, KPIs, trends and prorated goals.

Range selection (shared by every endpoint that takes one):
  range=7d|15d|30d|60d|90d|all     relative window ending now
  from=YYYY-MM-DD[&to=YYYY-MM-DD]  explicit window (to defaults to from)

Endpoints:
  GET /api/metrics/dashboard  - Chart + KPIs + previous period + trends + goals
  GET /api/metrics/chart      - Gap-free daily series for the selected agents
  GET /api/metrics/kpis       - Window KPIs (total, connected, connectivity rate)
  GET /api/metrics/trend      - Percent change between two values
  GET /api/metrics/target     - Monthly target prorated to a window
"""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query

from dashboard.api.common import load_settings, raise_http, range_spec_from_query
from models.lead_models import LeadFilter
from scripts.lib.lead_store import fetch_leads
from scripts.leads.aggregator import aggregate
from scripts.leads.bucketing import chart_keys, default_series_keys
from scripts.leads.dashboard_service import build_dashboard
from scripts.leads.targets import proportional_target
from scripts.leads.time_window import resolve_window
from scripts.leads.trend import trend

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


@router.get("/dashboard")
async def dashboard(
    range_code: Optional[str] = Query(None, alias="range", description="Relative range code"),
    date_from: Optional[date] = Query(None, alias="from", description="Explicit start date"),
    date_to: Optional[date] = Query(None, alias="to", description="Explicit end date"),
    agents: Optional[List[str]] = Query(None, description="Selected agent ids"),
    mode: str = Query("total", description="total | connected | comparison"),
    threshold: Optional[int] = Query(None, ge=0, description="Override the interaction threshold"),
):
    """Everything the dashboard page shows for one filter state."""
    try:
        spec = range_spec_from_query(range_code, date_from, date_to)
        settings = await load_settings(threshold)
        snapshot = await build_dashboard(
            spec, agent_ids=agents, metric_mode=mode, settings=settings,
        )
        return snapshot.model_dump(mode="json")
    except Exception as e:
        raise_http(e, "dashboard")


@router.get("/chart")
async def chart_series(
    range_code: Optional[str] = Query(None, alias="range"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    agents: Optional[List[str]] = Query(None),
    mode: str = Query("total"),
    threshold: Optional[int] = Query(None, ge=0),
):
    """Daily buckets with every series variant filled."""
    try:
        spec = range_spec_from_query(range_code, date_from, date_to)
        settings = await load_settings(threshold)
        window = resolve_window(spec)
        leads = await fetch_leads(LeadFilter(
            window_start=window.start, window_end=window.end, agent_ids=agents,
        ))
        series_keys = agents or default_series_keys(lead.agent_id for lead in leads)
        result = aggregate(
            leads, window,
            series_keys=series_keys,
            threshold=settings.interaction_threshold,
            metric_mode=mode,
        )
        return {
            "window": result.window.model_dump(mode="json"),
            "mode": mode,
            "series": [bucket.model_dump(mode="json") for bucket in result.series],
            "chart_keys": {agent: chart_keys(agent, mode) for agent in series_keys},
            "labels": {agent: settings.agent_names.get(agent, agent) for agent in series_keys},
        }
    except Exception as e:
        raise_http(e, "chart series")


@router.get("/kpis")
async def window_kpis(
    range_code: Optional[str] = Query(None, alias="range"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    agents: Optional[List[str]] = Query(None),
    threshold: Optional[int] = Query(None, ge=0),
):
    """KPIs for the selected window and for the period right before it."""
    try:
        spec = range_spec_from_query(range_code, date_from, date_to)
        settings = await load_settings(threshold)
        snapshot = await build_dashboard(spec, agent_ids=agents, settings=settings)
        return {
            "window": snapshot.window.model_dump(mode="json"),
            "threshold": snapshot.threshold,
            "current": snapshot.current.model_dump(),
            "previous": snapshot.previous.model_dump(),
            "trends": {k: v.model_dump() for k, v in snapshot.trends.items()},
        }
    except Exception as e:
        raise_http(e, "KPIs")


@router.get("/trend")
async def value_trend(
    current: float = Query(..., description="Current period value"),
    previous: float = Query(..., description="Previous period value"),
):
    """Percent change and direction between two values."""
    return trend(current, previous).model_dump()


@router.get("/target")
async def prorated_target(
    monthly_target: Optional[float] = Query(None, description="Monthly target (defaults to settings)"),
    range_code: Optional[str] = Query(None, alias="range"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
):
    """A monthly target spread over the selected window day by day."""
    try:
        spec = range_spec_from_query(range_code, date_from, date_to)
        if monthly_target is None:
            monthly_target = (await load_settings()).total_leads_target
        window = resolve_window(spec)
        return {
            "window": window.model_dump(mode="json"),
            "monthly_target": monthly_target,
            "target": proportional_target(monthly_target, window),
        }
    except Exception as e:
        raise_http(e, "target")
