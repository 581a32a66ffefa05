"""
Leads Dashboard Hub — Live Refresh
=====================================

Lead-table change notifications are only a signal to recompute. Results are
keyed by filter state, not by request, so when a new refresh starts before
the previous one finished the older one is cancelled and its result
discarded (last write wins).

Usage:
    runner = LatestOnlyRunner("ws-42")
    snapshot = await runner.submit(lambda: build_dashboard("30d"))
    if snapshot is None:
        ...  # superseded by a newer refresh
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from scripts.lib.logger import setup_logger

logger = setup_logger("live_refresh")

T = TypeVar("T")


class LatestOnlyRunner:
    """Runs at most one refresh at a time; newer submissions cancel older ones."""

    def __init__(self, name: str = "refresh"):
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self):
        """Cancel the in-flight refresh, if any."""
        self._generation += 1
        if self.busy:
            self._task.cancel()

    async def submit(self, factory: Callable[[], Awaitable[T]]) -> Optional[T]:
        """
        Start a refresh, cancelling any refresh still in flight.

        Returns:
            The refresh result, or None when a newer submission (or cancel())
            superseded this one.
        """
        self.cancel()
        generation = self._generation
        task = asyncio.ensure_future(factory())
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("[%s] refresh %d superseded", self.name, generation)
                return None
            raise

        if generation != self._generation:
            logger.debug("[%s] discarding stale refresh %d", self.name, generation)
            return None
        return result
