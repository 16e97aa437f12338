"""Cluster metadata sync controller.

Runs the refresh protocol against the backend:

    READY --refresh()--> SYNCING --> FETCHING --> READY

The sync phase only runs when forced or when the sync clock reports stale
metadata. The fetch phase always runs. A failing phase is logged and reported
through ``last_error`` and the ``errors`` stream; it never aborts the cycle and
never propagates to the caller.

Overlapping refreshes are not serialized. Each runs its full sequence and the
last fetch to complete determines ``items``. Callers that need at most one
refresh in flight must enforce it themselves (see ``is_refreshing``).
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable
from datetime import datetime

from kubeconfig_updater.clients.protocols import ClusterService
from kubeconfig_updater.models import (
    AggregatedClusterMetadata,
    ErrorOccurred,
    RefreshPhase,
    SyncState,
)
from kubeconfig_updater.observability import RefreshContext, get_logger

from .observable import EventStream, ObservableValue
from .sync_clock import SyncClock, utc_now

logger = get_logger(__name__)


class RefreshPhaseError(Exception):
    """Raised (and recorded) when a refresh phase fails."""

    phase: RefreshPhase

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.__cause__ = cause


class SyncPhaseError(RefreshPhaseError):
    """The backend sync request failed."""

    phase = RefreshPhase.SYNC


class FetchPhaseError(RefreshPhaseError):
    """The backend fetch request failed."""

    phase = RefreshPhase.FETCH


class MetadataSyncController:
    """Owns the cluster metadata collection and its refresh lifecycle.

    Observers read ``state``, ``items`` and ``last_error`` (observable values)
    and subscribe to ``errors`` for one ErrorOccurred per failure.
    """

    def __init__(
        self,
        cluster_service: ClusterService,
        clock: SyncClock,
        now: Callable[[], datetime] = utc_now,
    ):
        """Initialize the controller.

        Args:
            cluster_service: Backend cluster metadata capability
            clock: Sync clock deciding staleness
            now: Time source for sync instants and error timestamps
        """
        self._service = cluster_service
        self.clock = clock
        self._now = now

        self.state: ObservableValue[SyncState] = ObservableValue(SyncState.READY, "state")
        self.items: ObservableValue[list[AggregatedClusterMetadata]] = ObservableValue(
            [], "items"
        )
        self.last_error: ObservableValue[Exception | None] = ObservableValue(None, "last_error")
        self.errors: EventStream[ErrorOccurred] = EventStream("errors")

        self._refresh_ids = itertools.count(1)
        self._occurrence_ids = itertools.count(1)
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def is_refreshing(self) -> bool:
        return self.state.value != SyncState.READY

    def get_pending_count(self) -> int:
        """Number of scheduled refreshes that have not finished."""
        return len(self._tasks)

    async def refresh(self, force: bool = False, trigger: str | None = None) -> None:
        """Run one refresh cycle.

        Args:
            force: Sync with the backend even if the clock is not stale
            trigger: Label of what started the refresh, for logging
        """
        with RefreshContext(next(self._refresh_ids), trigger):
            self.items.set([])
            self.last_error.set(None)

            try:
                if force or self.clock.should_resync():
                    await self._sync()
                else:
                    logger.debug(
                        "Skipping backend sync, metadata is fresh",
                        elapsed_minutes=self.clock.elapsed_minutes(),
                    )

                await self._fetch()
            finally:
                self.state.set(SyncState.READY)
                logger.debug("Fetch cluster metadata done", items=len(self.items.value))

    def schedule_refresh(
        self, force: bool = False, trigger: str | None = None
    ) -> asyncio.Task[None]:
        """Start a refresh in the background without waiting for it.

        Must be called from within a running event loop.
        """
        task = asyncio.create_task(self.refresh(force=force, trigger=trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_pending(self) -> None:
        """Wait for all scheduled refreshes to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _sync(self) -> None:
        logger.debug("Requesting backend cluster metadata sync")
        self.state.set(SyncState.SYNCING)

        try:
            response = await self._service.sync_available_clusters()
        except Exception as e:
            logger.error(
                "Cluster metadata sync failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            self._record_error(SyncPhaseError(f"Cluster metadata sync failed: {e}", cause=e))
            return

        if response is not None and not response.ok:
            logger.error(
                "Cluster metadata sync rejected",
                status=response.status,
                message=response.message,
            )
            detail = response.message or response.status
            self._record_error(SyncPhaseError(f"Cluster metadata sync rejected: {detail}"))
            return

        self.clock.mark_synced(self._now())

    async def _fetch(self) -> None:
        logger.debug("Requesting backend cluster metadata fetch")
        self.state.set(SyncState.FETCHING)

        try:
            clusters = await self._service.get_available_clusters()
        except Exception as e:
            logger.error(
                "Cluster metadata fetch failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            self._record_error(FetchPhaseError(f"Cluster metadata fetch failed: {e}", cause=e))
            return

        self.items.set(list(clusters))
        logger.info("Fetched cluster metadata", clusters=len(clusters))

    def _record_error(self, error: RefreshPhaseError) -> None:
        self.last_error.set(error)
        self.errors.emit(
            ErrorOccurred(
                error=error,
                occurrence_id=next(self._occurrence_ids),
                occurred_at=self._now(),
                phase=error.phase,
            )
        )
