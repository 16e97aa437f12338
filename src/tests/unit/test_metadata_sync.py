"""Tests for the metadata sync controller."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from kubeconfig_updater.clients import ClusterServiceError
from kubeconfig_updater.models import (
    AggregatedClusterMetadata,
    CommonResponse,
    RefreshPhase,
    ResultCode,
    SyncState,
)
from kubeconfig_updater.services import (
    FetchPhaseError,
    MetadataSyncController,
    SyncClock,
    SyncPhaseError,
)
from kubeconfig_updater.services.sync_clock import LAST_SYNCED_KEY


@pytest.fixture
def sync_clock(memory_store, clock):
    return SyncClock(memory_store, now=clock)


@pytest.fixture
def controller(mock_cluster_service, sync_clock, clock):
    return MetadataSyncController(mock_cluster_service, sync_clock, now=clock)


@pytest.fixture
def error_events(controller):
    events = []
    controller.errors.subscribe(events.append)
    return events


@pytest.fixture
def state_changes(controller):
    changes = []
    controller.state.subscribe(lambda new, old: changes.append(new))
    return changes


class TestRefreshSequence:
    async def test_initial_state_is_ready(self, controller):
        assert controller.state.value == SyncState.READY
        assert controller.items.value == []
        assert controller.last_error.value is None

    async def test_stale_clock_syncs_then_fetches(
        self, controller, mock_cluster_service, sample_clusters, state_changes
    ):
        """Test a never-synced clock runs both phases in order."""
        await controller.refresh()

        mock_cluster_service.sync_available_clusters.assert_awaited_once()
        mock_cluster_service.get_available_clusters.assert_awaited_once()
        assert state_changes == [SyncState.SYNCING, SyncState.FETCHING, SyncState.READY]
        assert controller.items.value == sample_clusters

    async def test_both_phases_succeed(
        self, controller, sync_clock, clock, sample_clusters, error_events
    ):
        """Test success marks the clock at refresh time and fires no error."""
        await controller.refresh(force=True)

        assert sync_clock.last_synced == clock()
        assert controller.items.value == sample_clusters
        assert controller.last_error.value is None
        assert error_events == []

    async def test_fresh_clock_skips_sync(
        self, controller, sync_clock, clock, mock_cluster_service, state_changes
    ):
        """Test force=False with fresh metadata only fetches."""
        sync_clock.mark_synced(clock() - timedelta(minutes=1))

        await controller.refresh(force=False)

        mock_cluster_service.sync_available_clusters.assert_not_awaited()
        mock_cluster_service.get_available_clusters.assert_awaited_once()
        assert state_changes == [SyncState.FETCHING, SyncState.READY]

    async def test_force_syncs_even_when_fresh(
        self, controller, sync_clock, clock, mock_cluster_service
    ):
        sync_clock.mark_synced(clock())

        await controller.refresh(force=True)

        mock_cluster_service.sync_available_clusters.assert_awaited_once()

    async def test_synced_ten_minutes_ago_resyncs(
        self, memory_store, clock, mock_cluster_service
    ):
        """Test interval=5 and lastSynced 10 minutes ago triggers a sync."""
        memory_store.set_item(LAST_SYNCED_KEY, (clock() - timedelta(minutes=10)).isoformat())
        controller = MetadataSyncController(
            mock_cluster_service, SyncClock(memory_store, resync_interval_minutes=5, now=clock), clock
        )
        states = []
        controller.state.subscribe(lambda new, old: states.append(new))

        await controller.refresh(force=False)

        mock_cluster_service.sync_available_clusters.assert_awaited_once()
        mock_cluster_service.get_available_clusters.assert_awaited_once()
        assert states == [SyncState.SYNCING, SyncState.FETCHING, SyncState.READY]
        assert controller.state.value == SyncState.READY

    async def test_items_preserve_service_order(self, controller, mock_cluster_service):
        clusters = [
            AggregatedClusterMetadata.model_validate({"metadata": {"clusterName": name}})
            for name in ("zeta", "alpha", "mid")
        ]
        mock_cluster_service.get_available_clusters.return_value = clusters

        await controller.refresh()

        assert [c.cluster_name for c in controller.items.value] == ["zeta", "alpha", "mid"]


class TestItemsLifecycle:
    async def test_items_cleared_before_sync_starts(
        self, controller, mock_cluster_service, sample_clusters
    ):
        """Test observers see an empty collection during the sync phase."""
        controller.items.set(list(sample_clusters))
        seen_during_sync = []

        async def sync():
            seen_during_sync.append(list(controller.items.value))
            return CommonResponse()

        mock_cluster_service.sync_available_clusters = AsyncMock(side_effect=sync)

        await controller.refresh(force=True)

        assert seen_during_sync == [[]]
        assert controller.items.value == sample_clusters

    async def test_items_cleared_notification_comes_first(self, controller, sample_clusters):
        controller.items.set(list(sample_clusters))
        assignments = []
        controller.items.subscribe(lambda new, old: assignments.append(len(new)))

        await controller.refresh()

        assert assignments == [0, len(sample_clusters)]


class TestPhaseFailures:
    async def test_sync_failure_still_fetches(
        self, controller, sync_clock, mock_cluster_service, sample_clusters, error_events
    ):
        """Test a failed sync is recorded and the fetch still runs."""
        mock_cluster_service.sync_available_clusters.side_effect = ClusterServiceError(
            "connection refused", "SyncAvailableClusters"
        )

        await controller.refresh(force=True)

        assert sync_clock.last_synced is None
        assert controller.items.value == sample_clusters
        assert controller.state.value == SyncState.READY
        assert len(error_events) == 1
        assert error_events[0].phase == RefreshPhase.SYNC
        assert isinstance(controller.last_error.value, SyncPhaseError)
        assert isinstance(controller.last_error.value.__cause__, ClusterServiceError)

    async def test_rejected_sync_is_a_failure(
        self, controller, sync_clock, mock_cluster_service, error_events
    ):
        mock_cluster_service.sync_available_clusters.return_value = CommonResponse(
            status=ResultCode.SERVER_ERROR, message="resolver crashed"
        )

        await controller.refresh(force=True)

        assert sync_clock.last_synced is None
        assert len(error_events) == 1
        assert "resolver crashed" in str(error_events[0].error)

    async def test_fetch_failure_leaves_items_empty(
        self, controller, mock_cluster_service, sample_clusters, error_events
    ):
        controller.items.set(list(sample_clusters))
        mock_cluster_service.get_available_clusters.side_effect = TimeoutError("timed out")

        await controller.refresh()

        assert controller.items.value == []
        assert controller.state.value == SyncState.READY
        assert len(error_events) == 1
        assert isinstance(error_events[0].error, FetchPhaseError)
        assert error_events[0].phase == RefreshPhase.FETCH

    async def test_both_phases_fail(self, controller, mock_cluster_service, error_events):
        """Test each failure is its own event and the last one wins."""
        mock_cluster_service.sync_available_clusters.side_effect = RuntimeError("sync down")
        mock_cluster_service.get_available_clusters.side_effect = RuntimeError("fetch down")

        await controller.refresh(force=True)

        assert [e.phase for e in error_events] == [RefreshPhase.SYNC, RefreshPhase.FETCH]
        assert isinstance(controller.last_error.value, FetchPhaseError)
        assert controller.state.value == SyncState.READY

    async def test_refresh_never_raises(self, controller, mock_cluster_service):
        mock_cluster_service.sync_available_clusters.side_effect = Exception("boom")
        mock_cluster_service.get_available_clusters.side_effect = Exception("boom")

        await controller.refresh(force=True)

        assert controller.state.value == SyncState.READY

    async def test_identical_errors_are_distinct_occurrences(
        self, controller, mock_cluster_service, error_events
    ):
        mock_cluster_service.get_available_clusters.side_effect = RuntimeError("unavailable")

        await controller.refresh()
        await controller.refresh()

        assert len(error_events) == 2
        assert error_events[0].message == error_events[1].message
        assert error_events[0].occurrence_id < error_events[1].occurrence_id

    async def test_last_error_cleared_by_next_cycle(self, controller, mock_cluster_service):
        mock_cluster_service.get_available_clusters.side_effect = RuntimeError("unavailable")
        await controller.refresh()
        assert controller.last_error.value is not None

        mock_cluster_service.get_available_clusters.side_effect = None
        await controller.refresh()

        assert controller.last_error.value is None

    async def test_controller_usable_after_errors(
        self, controller, mock_cluster_service, sample_clusters
    ):
        mock_cluster_service.get_available_clusters.side_effect = RuntimeError("unavailable")
        await controller.refresh()

        mock_cluster_service.get_available_clusters.side_effect = None
        await controller.refresh()

        assert controller.items.value == sample_clusters

    async def test_cancelled_refresh_returns_to_ready(self, controller, mock_cluster_service):
        started = asyncio.Event()

        async def hang():
            started.set()
            await asyncio.sleep(3600)

        mock_cluster_service.sync_available_clusters = AsyncMock(side_effect=hang)

        task = controller.schedule_refresh(force=True)
        await started.wait()
        assert controller.state.value == SyncState.SYNCING

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert controller.state.value == SyncState.READY


class TestScheduling:
    async def test_schedule_refresh_does_not_block(self, controller, mock_cluster_service):
        release = asyncio.Event()

        async def slow_fetch():
            await release.wait()
            return []

        mock_cluster_service.get_available_clusters = AsyncMock(side_effect=slow_fetch)

        task = controller.schedule_refresh()
        await asyncio.sleep(0)
        assert controller.get_pending_count() == 1
        assert controller.is_refreshing is True

        release.set()
        await task

        assert controller.get_pending_count() == 0
        assert controller.is_refreshing is False

    async def test_wait_pending(self, controller, mock_cluster_service):
        controller.schedule_refresh()
        controller.schedule_refresh()

        await controller.wait_pending()

        assert controller.get_pending_count() == 0
        assert mock_cluster_service.get_available_clusters.await_count == 2

    async def test_overlapping_refreshes_last_fetch_wins(
        self, controller, mock_cluster_service
    ):
        """Test overlapping refreshes are not serialized."""
        first_release = asyncio.Event()
        first = [AggregatedClusterMetadata.model_validate({"metadata": {"clusterName": "first"}})]
        second = [AggregatedClusterMetadata.model_validate({"metadata": {"clusterName": "second"}})]
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            if calls == 1:
                await first_release.wait()
                return first
            return second

        mock_cluster_service.get_available_clusters = AsyncMock(side_effect=fetch)

        slow = controller.schedule_refresh()
        await asyncio.sleep(0)
        await controller.refresh()
        assert controller.items.value == second

        first_release.set()
        await slow

        assert controller.items.value == first
        assert controller.state.value == SyncState.READY
