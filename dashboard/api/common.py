"""
Leads Dashboard Hub — Router Helpers
=======================================
Range parsing, settings loading and error mapping shared by the routers.
"""
from __future__ import annotations

import asyncio
from datetime import date
from typing import Optional

from fastapi import HTTPException
from pydantic import ValidationError

from models.lead_models import DashboardSettings, RangeSpec
from scripts.lib.errors import DataError, DataFetchError, SchemaValidationError, WindowError
from scripts.lib.logger import setup_logger
from scripts.lib.settings_service import get_settings

logger = setup_logger("api_common")


def range_spec_from_query(
    range_code: Optional[str],
    date_from: Optional[date],
    date_to: Optional[date],
) -> RangeSpec:
    """Explicit dates win over a range code; no selection means the last 30 days."""
    try:
        if date_from is not None:
            return RangeSpec(date_from=date_from, date_to=date_to)
        return RangeSpec(code=range_code or "30d")
    except ValidationError as e:
        raise WindowError(str(e)) from e


def raise_http(e: Exception, what: str):
    """Map hub errors onto HTTP responses."""
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, (WindowError, SchemaValidationError)):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, DataFetchError):
        logger.error("%s: lead store fetch failed: %s", what, e)
        raise HTTPException(status_code=502, detail=f"Failed to fetch data for {what}")
    if isinstance(e, DataError):
        logger.error("%s: %s", what, e)
        raise HTTPException(status_code=502, detail=f"Failed to store {what}")
    logger.error("%s failed: %s", what, e)
    raise HTTPException(status_code=500, detail=f"Failed to compute {what}")


async def load_settings(threshold: Optional[int] = None) -> DashboardSettings:
    """Current settings, optionally with a per-request threshold override."""
    settings = await asyncio.to_thread(get_settings)
    if threshold is not None:
        settings = settings.model_copy(update={"interaction_threshold": threshold})
    return settings
