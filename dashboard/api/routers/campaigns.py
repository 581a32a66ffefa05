"""
Leads Dashboard Hub — Campaigns Router
=========================================
Campaign display names and lead counts per campaign.

Endpoints:
  GET /api/campaigns/name     - Display name for one UTM campaign string
  GET /api/campaigns/summary  - Campaign log rows grouped by display name
"""
from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Query

from dashboard.api.common import raise_http
from scripts.lib.config import CAMPAIGN_LOG_TABLE
from scripts.lib.supabase_client import query_table
from scripts.leads.campaigns import extract_campaign_name, summarize_campaigns

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])


@router.get("/name")
async def campaign_name(value: Optional[str] = Query(None, description="Raw utm_campaign value")):
    """Human-readable name for a bracketed UTM campaign string."""
    return {"value": value, "name": extract_campaign_name(value)}


@router.get("/summary")
async def campaign_summary(
    search: Optional[str] = Query(None, description="Filter by display name"),
    limit: int = Query(500, ge=1, le=5000, description="Max log rows to read"),
):
    """Latest campaign_log rows with per-campaign counts, busiest first."""
    try:
        logs = await asyncio.to_thread(
            query_table, CAMPAIGN_LOG_TABLE, order_by="created_at", limit=limit,
        )
        return summarize_campaigns(logs, search=search)
    except Exception as e:
        raise_http(e, "campaign summary")
