"""Transient notifications.

NotificationCenter is the queue a UI layer drains to show snackbars. Error
streams from services are bridged into it with register_error_notifications.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime

from kubeconfig_updater.models import ErrorOccurred, Notification, NotificationVariant
from kubeconfig_updater.observability import get_logger

from .observable import EventStream, Unsubscribe

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 10


def notification_key(event: ErrorOccurred) -> str:
    """Build a readable, per-occurrence key such as '2024-05-01 10:00:00.123456 #3'."""
    return f"{event.occurred_at:%Y-%m-%d %H:%M:%S.%f} #{event.occurrence_id}"


class NotificationCenter:
    """Bounded queue of transient notifications.

    Keys must be unique; pushing an existing key replaces that entry. When the
    queue is full the oldest entry is dropped.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._entries: deque[Notification] = deque()
        self.pushed: EventStream[Notification] = EventStream("notifications")

    @property
    def entries(self) -> list[Notification]:
        return list(self._entries)

    def push(self, notification: Notification) -> None:
        self._remove(notification.key)
        self._entries.append(notification)
        while len(self._entries) > self.max_entries:
            dropped = self._entries.popleft()
            logger.debug("Dropped oldest notification", key=dropped.key)
        self.pushed.emit(notification)

    def dismiss(self, key: str) -> bool:
        """Remove a notification.

        Returns:
            True if removed, False if not found
        """
        return self._remove(key)

    def clear(self) -> None:
        self._entries.clear()

    def _remove(self, key: str) -> bool:
        for entry in self._entries:
            if entry.key == key:
                self._entries.remove(entry)
                return True
        return False


def register_error_notifications(
    errors: EventStream[ErrorOccurred],
    center: NotificationCenter,
    format_message: Callable[[ErrorOccurred], str] = lambda event: event.message,
) -> Unsubscribe:
    """Push one error notification per error occurrence.

    Args:
        errors: Error stream to observe
        center: Destination queue
        format_message: Builds the displayed text from an event

    Returns:
        Callable that stops the bridge
    """

    def on_error(event: ErrorOccurred) -> None:
        logger.debug("Got error event", occurrence_id=event.occurrence_id, phase=event.phase)
        center.push(
            Notification(
                key=notification_key(event),
                message=format_message(event),
                variant=NotificationVariant.ERROR,
                created_at=datetime.now(UTC),
            )
        )

    return errors.subscribe(on_error)
