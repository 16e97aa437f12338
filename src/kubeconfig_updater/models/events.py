"""Lifecycle and event models for the metadata sync controller.

Note: events are ephemeral (delivered to in-process subscribers only)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import Field

from .base import KubeconfigBaseModel


class SyncState(str, Enum):
    """Lifecycle state of a refresh cycle."""

    READY = "ready"
    SYNCING = "in-sync"
    FETCHING = "fetch"


class RefreshPhase(str, Enum):
    """Phase of a refresh cycle an error came from."""

    SYNC = "sync"
    FETCH = "fetch"


@dataclass(frozen=True)
class ErrorOccurred:
    """One error emission from the controller.

    occurrence_id is unique and increasing per controller, so two errors with
    the same text are still two events.
    """

    error: Exception
    occurrence_id: int
    occurred_at: datetime
    phase: RefreshPhase

    @property
    def message(self) -> str:
        return str(self.error)


class NotificationVariant(str, Enum):
    """Visual severity of a transient notification."""

    DEFAULT = "default"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(KubeconfigBaseModel):
    """Transient message queued for display."""

    key: str = Field(min_length=1, description="Unique key of this notification")
    message: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime | None = None
