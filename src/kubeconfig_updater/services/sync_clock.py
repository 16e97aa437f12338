"""Persistent sync clock.

Remembers when cluster metadata was last synchronized with the backend and
decides whether it is stale. The instant survives restarts through the local
key-value store under the ``lastSynced`` key as an ISO-8601 string.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from kubeconfig_updater.observability import get_logger
from kubeconfig_updater.storage import KeyValueStore, PersistenceError

logger = get_logger(__name__)

LAST_SYNCED_KEY = "lastSynced"
DEFAULT_RESYNC_INTERVAL_MINUTES = 5

# Persisted in place of "never synced"; always stale
NEVER_SYNCED = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SyncClock:
    """Tracks the last sync instant and decides staleness."""

    def __init__(
        self,
        store: KeyValueStore,
        resync_interval_minutes: int = DEFAULT_RESYNC_INTERVAL_MINUTES,
        now: Callable[[], datetime] = utc_now,
    ):
        """Initialize the clock from persisted state.

        Args:
            store: Durable key-value store holding the last sync instant
            resync_interval_minutes: Whole minutes after which a resync is due
            now: Time source (injectable for tests)
        """
        self._store = store
        self._now = now
        self.resync_interval_minutes = resync_interval_minutes
        self._last_synced = self._load()

    @property
    def resync_interval_minutes(self) -> int:
        return self._resync_interval_minutes

    @resync_interval_minutes.setter
    def resync_interval_minutes(self, minutes: int) -> None:
        if minutes < 0:
            raise ValueError("resync_interval_minutes must be >= 0")
        self._resync_interval_minutes = minutes

    @property
    def last_synced(self) -> datetime | None:
        """Last successful sync, or None if never synced."""
        return self._last_synced

    def _load(self) -> datetime | None:
        try:
            raw = self._store.get_item(LAST_SYNCED_KEY)
        except PersistenceError as e:
            logger.warning("Failed to read last sync time", error=str(e))
            return None

        if not raw:
            return None

        try:
            value = _as_aware(datetime.fromisoformat(raw))
        except ValueError:
            logger.warning("Ignoring malformed last sync time", value=raw)
            return None

        if value <= NEVER_SYNCED:
            return None
        return value

    def _persist(self, value: datetime | None) -> None:
        stored = (value or NEVER_SYNCED).isoformat()
        try:
            self._store.set_item(LAST_SYNCED_KEY, stored)
        except PersistenceError as e:
            # The in-memory value stays authoritative for this process
            logger.warning("Failed to persist last sync time", value=stored, error=str(e))

    def elapsed_minutes(self) -> int | None:
        """Whole minutes since the last sync (truncated), or None if never synced."""
        if self._last_synced is None:
            return None
        elapsed = self._now() - self._last_synced
        return int(elapsed.total_seconds() / 60)

    def should_resync(self) -> bool:
        """Check if cached metadata is stale.

        Returns:
            True if never synced or at least resync_interval_minutes whole
            minutes have passed since the last sync
        """
        elapsed = self.elapsed_minutes()
        if elapsed is None:
            return True
        return elapsed >= self._resync_interval_minutes

    def mark_synced(self, time: datetime) -> None:
        """Record a successful sync and persist it immediately.

        Args:
            time: Instant of the sync (naive values are taken as UTC)
        """
        time = _as_aware(time)
        if self._last_synced is not None and time < self._last_synced:
            logger.warning(
                "Ignoring sync time older than the recorded one",
                time=time.isoformat(),
                last_synced=self._last_synced.isoformat(),
            )
            return

        self._last_synced = time
        self._persist(time)
        logger.debug("Marked metadata as synced", last_synced=time.isoformat())

    def reset(self) -> None:
        """Forget the last sync so the next staleness check is true."""
        self._last_synced = None
        self._persist(None)
        logger.debug("Reset last sync time")
