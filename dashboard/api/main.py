"""
Leads Dashboard Hub — API Server
===================================

Live API layer over the Supabase lead table: daily lead charts, KPIs with
period-over-period trends, prorated goals, the lead table and settings.

Route groups:
  /api/health        - Health check
  /api/metrics/*     - Chart series, KPIs, trends, prorated targets
  /api/leads/*       - Lead table, agent list, change notifications
  /api/settings      - Threshold, targets, agent display names
  /api/campaigns/*   - Campaign display names and counts
  /ws/dashboard      - WebSocket live feed
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app):
    """Application startup and shutdown."""
    logger.info("Starting Leads Dashboard Hub...")

    # Supabase connection check
    try:
        from scripts.lib.supabase_client import get_client
        get_client()
        logger.info("Supabase connected")
    except Exception as e:
        logger.warning("Supabase not available: %s", e)

    logger.info("Leads Dashboard Hub ready")
    yield
    logger.info("Shutting down Leads Dashboard Hub...")


# ─── App Setup ────────────────────────────────────────────────

cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:8001"
).split(",")

app = FastAPI(
    title="Leads Dashboard Hub",
    version=VERSION,
    description="Marketing leads analytics — daily series, KPIs, trends and goals",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Include Routers ──────────────────────────────────────────

from dashboard.api.routers.metrics import router as metrics_router
from dashboard.api.routers.leads import router as leads_router
from dashboard.api.routers.settings import router as settings_router
from dashboard.api.routers.campaigns import router as campaigns_router

app.include_router(metrics_router)
app.include_router(leads_router)
app.include_router(settings_router)
app.include_router(campaigns_router)


# ─── WebSocket ────────────────────────────────────────────────

from dashboard.api.websocket import websocket_endpoint, ws_manager

app.add_api_websocket_route("/ws/dashboard", websocket_endpoint)


# ─── Health ───────────────────────────────────────────────────

@app.get("/api/health", tags=["system"])
async def health():
    """Health check with service status."""
    supabase_ok = False
    try:
        from scripts.lib.supabase_client import get_client
        get_client()
        supabase_ok = True
    except Exception as e:
        logger.debug("Health check: Supabase unavailable: %s", e)

    from scripts.lib.config import DASHBOARD_TIMEZONE

    return {
        "status": "healthy",
        "service": "Leads Dashboard Hub",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "timezone": DASHBOARD_TIMEZONE,
        "integrations": {
            "supabase": supabase_ok,
        },
        "websocket_connections": ws_manager.connection_count,
    }
