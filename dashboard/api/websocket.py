"""
Leads Dashboard Hub — WebSocket Manager
==========================================
Manages WebSocket connections and pushes recomputed dashboards when leads change.

Client messages:
  {"type": "subscribe", "range": "30d", "agents": [...], "mode": "total"}
  {"type": "subscribe", "from": "2024-03-01", "to": "2024-03-03"}
  {"type": "refresh"}
  {"type": "ping"}

Server events:
  connected, dashboard_update, dashboard_error, pong

Usage:
    from dashboard.api.websocket import ws_manager, websocket_endpoint

    # After the lead table changes:
    ws_manager.notify_lead_change()

    # In FastAPI:
    app.add_api_websocket_route("/ws/dashboard", websocket_endpoint)
"""
from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from models.lead_models import RangeSpec
from scripts.lib.errors import HubError
from scripts.lib.logger import setup_logger
from scripts.lib.settings_service import get_settings
from scripts.leads.dashboard_service import build_dashboard
from scripts.leads.live_refresh import LatestOnlyRunner

logger = setup_logger("websocket")


class Subscription:
    """Filter state of one connected dashboard plus its refresh runner."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.range_spec: Optional[RangeSpec] = None
        self.agent_ids: Optional[List[str]] = None
        self.metric_mode = "total"
        self.runner = LatestOnlyRunner(f"ws-{id(websocket)}")

    def update(self, message: Dict[str, Any]):
        """Apply a subscribe message. Raises ValidationError on a bad range."""
        if message.get("from"):
            self.range_spec = RangeSpec(date_from=message["from"], date_to=message.get("to"))
        else:
            self.range_spec = RangeSpec(code=message.get("range") or "30d")
        self.agent_ids = message.get("agents") or None
        self.metric_mode = message.get("mode") or "total"

    async def compute(self) -> Dict[str, Any]:
        settings = await asyncio.to_thread(get_settings)
        snapshot = await build_dashboard(
            self.range_spec,
            agent_ids=self.agent_ids,
            metric_mode=self.metric_mode,
            settings=settings,
        )
        return snapshot.model_dump(mode="json")


class WebSocketManager:
    """Manages active WebSocket connections, their subscriptions and broadcasts."""

    def __init__(self):
        self._subscriptions: Dict[WebSocket, Subscription] = {}
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro) -> asyncio.Task:
        """Run a refresh in the background, holding a reference until it finishes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def connect(self, websocket: WebSocket) -> Subscription:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        subscription = Subscription(websocket)
        self._subscriptions[websocket] = subscription
        logger.info(
            "WebSocket connected. Active connections: %d", len(self._subscriptions)
        )
        return subscription

    def disconnect(self, websocket: WebSocket):
        """Remove a disconnected WebSocket and stop its refresh."""
        subscription = self._subscriptions.pop(websocket, None)
        if subscription is not None:
            subscription.runner.cancel()
        logger.info(
            "WebSocket disconnected. Active connections: %d", len(self._subscriptions)
        )

    async def broadcast(self, message: Dict[str, Any]):
        """Send a message to all connected clients."""
        if not self._subscriptions:
            return

        payload = json.dumps(
            {
                **message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            default=str,
        )

        disconnected = set()
        for ws in list(self._subscriptions):
            try:
                await ws.send_text(payload)
            except Exception:
                disconnected.add(ws)

        for ws in disconnected:
            self.disconnect(ws)

    async def send_to(self, websocket: WebSocket, message: Dict[str, Any]):
        """Send a message to a specific connection."""
        payload = json.dumps(
            {
                **message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            default=str,
        )
        try:
            await websocket.send_text(payload)
        except Exception:
            self.disconnect(websocket)

    async def refresh(self, subscription: Subscription):
        """Recompute one subscriber's dashboard; stale results are dropped."""
        if subscription.range_spec is None:
            return
        try:
            data = await subscription.runner.submit(subscription.compute)
        except HubError as e:
            logger.error("Live refresh failed: %s", e)
            await self.send_to(subscription.websocket, {
                "event": "dashboard_error",
                "data": {"code": e.code, "message": str(e)},
            })
            return
        except Exception as e:
            logger.exception("Live refresh crashed: %s", e)
            await self.send_to(subscription.websocket, {
                "event": "dashboard_error",
                "data": {"code": "INTERNAL_ERROR", "message": "Dashboard refresh failed"},
            })
            return
        if data is None:
            return
        await self.send_to(subscription.websocket, {
            "event": "dashboard_update",
            "data": data,
        })

    def notify_lead_change(self) -> int:
        """
        Schedule a refresh for every subscriber after the lead table changed.

        Returns:
            Number of refreshes scheduled.
        """
        subscriptions = [s for s in self._subscriptions.values() if s.range_spec is not None]
        for subscription in subscriptions:
            self.spawn(self.refresh(subscription))
        logger.info("Lead change: %d live refresh(es) scheduled", len(subscriptions))
        return len(subscriptions)

    @property
    def connection_count(self) -> int:
        return len(self._subscriptions)


# Singleton manager
ws_manager = WebSocketManager()


async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for dashboard live updates.

    Clients connect to ws://host/ws/dashboard, send a subscribe message with
    their filter state and receive a dashboard_update after it and after every
    lead change.
    """
    subscription = await ws_manager.connect(websocket)

    await ws_manager.send_to(websocket, {
        "event": "connected",
        "data": {"message": "Connected to Leads Dashboard Hub live feed"},
    })

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue

            kind = msg.get("type")
            if kind == "ping":
                await ws_manager.send_to(websocket, {"event": "pong", "data": {}})
            elif kind == "subscribe":
                try:
                    subscription.update(msg)
                except ValidationError as e:
                    await ws_manager.send_to(websocket, {
                        "event": "dashboard_error",
                        "data": {"code": "INVALID_WINDOW", "message": str(e)},
                    })
                    continue
                ws_manager.spawn(ws_manager.refresh(subscription))
            elif kind == "refresh":
                ws_manager.spawn(ws_manager.refresh(subscription))
    except WebSocketDisconnect:
        ws_manager.disconnect(websocket)
    except Exception:
        ws_manager.disconnect(websocket)
