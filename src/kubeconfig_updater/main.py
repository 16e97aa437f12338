"""Kubeconfig updater client application.

Wires the client core together:
- Local key-value storage and the persistent sync clock
- Backend client (cluster metadata and credential resolvers)
- Metadata sync controller with error notifications
- Optional periodic refresh
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from kubeconfig_updater.clients import KubeconfigServiceClient
from kubeconfig_updater.config import Settings, get_settings
from kubeconfig_updater.observability import get_logger, setup_logging
from kubeconfig_updater.repositories import CredResolverRepository
from kubeconfig_updater.services import (
    AutoRefreshScheduler,
    MetadataSyncController,
    NotificationCenter,
    SyncClock,
    register_error_notifications,
)
from kubeconfig_updater.services.observable import Unsubscribe
from kubeconfig_updater.storage import JsonFileKeyValueStore, KeyValueStore

logger = get_logger(__name__)

STARTUP_TRIGGER = "startup"


@dataclass
class ClientApplication:
    """Explicitly wired client components."""

    settings: Settings
    store: KeyValueStore
    client: KubeconfigServiceClient
    clock: SyncClock
    controller: MetadataSyncController
    cred_resolvers: CredResolverRepository
    notifications: NotificationCenter
    scheduler: AutoRefreshScheduler | None = None
    _unsubscribers: list[Unsubscribe] = field(default_factory=list)

    async def start(self) -> None:
        """Start background work: optional initial refresh and the timer."""
        logger.info("Starting kubeconfig updater client", version=self.settings.app_version)

        if self.settings.sync.refresh_on_start:
            self.controller.schedule_refresh(force=False, trigger=STARTUP_TRIGGER)

        if self.scheduler is not None:
            await self.scheduler.start()

    async def stop(self) -> None:
        """Stop background work and release the backend connection."""
        logger.info("Shutting down kubeconfig updater client")

        if self.scheduler is not None:
            await self.scheduler.stop()

        await self.controller.wait_pending()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

        await self.client.close()

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator[ClientApplication]:
        """Run the application for the duration of the block."""
        await self.start()
        try:
            yield self
        finally:
            await self.stop()


def create_application(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    client: KubeconfigServiceClient | None = None,
) -> ClientApplication:
    """Build the client from settings.

    Args:
        settings: Settings to use (defaults to get_settings())
        store: Key-value store override (defaults to the JSON file store)
        client: Backend client override

    Returns:
        Wired ClientApplication, not yet started
    """
    settings = settings or get_settings()

    store = store or JsonFileKeyValueStore(settings.storage.path)
    client = client or KubeconfigServiceClient(
        settings.cluster_service.url,
        timeout=settings.cluster_service.timeout_seconds,
        connect_timeout=settings.cluster_service.connect_timeout_seconds,
    )

    clock = SyncClock(store, resync_interval_minutes=settings.sync.resync_interval_minutes)
    controller = MetadataSyncController(client, clock)
    notifications = NotificationCenter(max_entries=settings.notifications.max_entries)

    scheduler = None
    if settings.sync.auto_refresh_seconds > 0:
        scheduler = AutoRefreshScheduler(controller, settings.sync.auto_refresh_seconds)

    app = ClientApplication(
        settings=settings,
        store=store,
        client=client,
        clock=clock,
        controller=controller,
        cred_resolvers=CredResolverRepository(client),
        notifications=notifications,
        scheduler=scheduler,
    )
    app._unsubscribers.append(register_error_notifications(controller.errors, notifications))

    logger.debug(
        "Client application created",
        backend_url=settings.cluster_service.url,
        storage_path=str(getattr(store, "path", "memory")),
        resync_interval_minutes=settings.sync.resync_interval_minutes,
    )
    return app


@asynccontextmanager
async def run_client(settings: Settings | None = None) -> AsyncIterator[ClientApplication]:
    """Configure logging, build the client and run it.

    Usage:
        async with run_client() as app:
            await app.controller.refresh(force=True, trigger="user")
    """
    settings = settings or get_settings()
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)

    app = create_application(settings)
    async with app.lifespan():
        yield app
