"""
Leads Dashboard Hub — Leads Router
=====================================
Lead table queries and the change hook that drives live refresh.

Endpoints:
  GET  /api/leads          - Paginated lead table (range, agents, status)
  GET  /api/leads/agents   - Agents that own at least one lead
  POST /api/leads/notify   - Lead table changed (database webhook target)
"""
from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Query

from dashboard.api.common import load_settings, raise_http, range_spec_from_query
from dashboard.api.websocket import ws_manager
from models.lead_models import LeadFilter
from scripts.lib.lead_store import DEFAULT_PAGE_SIZE, list_agents, list_leads
from scripts.leads.time_window import resolve_window

router = APIRouter(prefix="/api/leads", tags=["leads"])

LEAD_STATUSES = ("all", "connected", "cold")


@router.get("")
async def leads_table(
    range_code: Optional[str] = Query(None, alias="range"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    agents: Optional[List[str]] = Query(None, description="Selected agent ids"),
    status: str = Query("all", description="all | connected | cold"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
):
    """One page of leads, newest first, with connected/cold status per row."""
    if status not in LEAD_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown status: {status}")
    try:
        spec = range_spec_from_query(range_code, date_from, date_to)
        settings = await load_settings()
        window = resolve_window(spec)
        lead_filter = LeadFilter(
            window_start=window.start,
            window_end=window.end,
            agent_ids=agents,
            status=status,
            threshold=settings.interaction_threshold,
        )
        result = await asyncio.to_thread(list_leads, lead_filter, page, page_size)
        return {
            **result.model_dump(mode="json"),
            "threshold": settings.interaction_threshold,
            "agent_names": settings.agent_names,
        }
    except Exception as e:
        raise_http(e, "lead table")


@router.get("/agents")
async def agents():
    """Distinct agent ids with their configured display names."""
    try:
        agent_ids = await asyncio.to_thread(list_agents)
        settings = await load_settings()
        return {
            "agents": [
                {"id": agent_id, "name": settings.agent_names.get(agent_id, agent_id)}
                for agent_id in agent_ids
            ],
            "count": len(agent_ids),
        }
    except Exception as e:
        raise_http(e, "agent list")


@router.post("/notify")
async def lead_change(payload: Optional[Dict[str, Any]] = Body(None)):
    """
    Signal that the lead table changed.

    Point a Supabase database webhook on the lead table here. Every live
    dashboard recomputes; an older refresh still in flight is discarded.
    """
    event = (payload or {}).get("type", "UPDATE")
    await ws_manager.broadcast({"event": "leads_changed", "data": {"type": event}})
    scheduled = ws_manager.notify_lead_change()
    return {"status": "accepted", "refreshes": scheduled}
