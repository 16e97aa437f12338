"""Client-side services: sync clock, metadata controller, notifications."""

from .auto_refresh import AutoRefreshScheduler
from .metadata_sync import (
    FetchPhaseError,
    MetadataSyncController,
    RefreshPhaseError,
    SyncPhaseError,
)
from .notifications import (
    NotificationCenter,
    notification_key,
    register_error_notifications,
)
from .observable import EventStream, ObservableValue
from .sync_clock import LAST_SYNCED_KEY, NEVER_SYNCED, SyncClock

__all__ = [
    "AutoRefreshScheduler",
    "EventStream",
    "FetchPhaseError",
    "LAST_SYNCED_KEY",
    "MetadataSyncController",
    "NEVER_SYNCED",
    "NotificationCenter",
    "ObservableValue",
    "RefreshPhaseError",
    "SyncClock",
    "SyncPhaseError",
    "notification_key",
    "register_error_notifications",
]
