"""Periodic metadata refresh.

Calls the controller's refresh on a fixed interval without forcing a sync, so
the sync clock still decides whether the backend is asked to resync.
"""

from __future__ import annotations

import asyncio
import contextlib

from kubeconfig_updater.observability import get_logger

from .metadata_sync import MetadataSyncController

logger = get_logger(__name__)

TIMER_TRIGGER = "timer"


class AutoRefreshScheduler:
    """Runs controller.refresh(force=False) every interval_seconds."""

    def __init__(self, controller: MetadataSyncController, interval_seconds: float):
        """Initialize the scheduler.

        Args:
            controller: Controller to refresh
            interval_seconds: Seconds between refreshes
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self.controller = controller
        self.interval_seconds = interval_seconds

        self._task: asyncio.Task | None = None
        self._running = False
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the refresh loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._refresh_loop())
        logger.info("Auto refresh started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the refresh loop."""
        self._running = False

        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

        logger.info("Auto refresh stopped")

    async def _refresh_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.ticks += 1
                await self.controller.refresh(force=False, trigger=TIMER_TRIGGER)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Auto refresh loop error", error=str(e), exc_info=True)
