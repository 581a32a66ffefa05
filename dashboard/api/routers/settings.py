"""
Leads Dashboard Hub — Settings Router
========================================
Interaction threshold, KPI targets and agent display names.

Endpoints:
  GET /api/settings  - Current settings (defaults when no row exists)
  PUT /api/settings  - Update any subset of the settings
"""
from __future__ import annotations

import asyncio

from fastapi import APIRouter

from dashboard.api.common import raise_http
from models.lead_models import SettingsUpdate
from scripts.lib.settings_service import get_settings, update_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def read_settings():
    """Get the dashboard settings."""
    settings = await asyncio.to_thread(get_settings)
    return settings.model_dump()


@router.put("")
async def write_settings(update: SettingsUpdate):
    """Update the dashboard settings and return the stored result."""
    try:
        settings = await asyncio.to_thread(update_settings, update)
        return settings.model_dump()
    except Exception as e:
        raise_http(e, "settings")
