"""Observable values and event streams.

Lightweight in-process publish/subscribe used to expose controller state to
the rest of the application. Subscribers are plain callables invoked
synchronously, in subscription order, on the thread that publishes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from kubeconfig_updater.observability import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class EventStream(Generic[T]):
    """Broadcasts events to subscribers.

    Every emit reaches every subscriber; nothing is coalesced. A failing
    subscriber is logged and does not prevent delivery to the others.
    """

    def __init__(self, name: str = "events"):
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register a subscriber.

        Returns:
            Callable that removes the subscription (safe to call twice)
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: T) -> int:
        """Deliver event to all subscribers.

        Returns:
            Number of subscribers that handled the event without raising
        """
        delivered = 0
        for callback in list(self._subscribers):
            try:
                callback(event)
                delivered += 1
            except Exception as e:
                logger.warning(
                    "Subscriber failed to handle event",
                    stream=self.name,
                    error=str(e),
                    exc_info=True,
                )
        return delivered

    def get_subscriber_count(self) -> int:
        """Get number of subscribers."""
        return len(self._subscribers)


class ObservableValue(Generic[T]):
    """Holds a value and notifies subscribers on every assignment.

    Subscribers receive (new_value, old_value). Assigning an equal value still
    notifies: an assignment is an event in its own right.
    """

    def __init__(self, initial: T, name: str = "value"):
        self.name = name
        self._value = initial
        self._changes: EventStream[tuple[T, T]] = EventStream(name)

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self.set(new_value)

    def get(self) -> T:
        return self._value

    def set(self, new_value: T) -> None:
        old_value = self._value
        self._value = new_value
        self._changes.emit((new_value, old_value))

    def subscribe(self, callback: Callable[[T, T], None]) -> Unsubscribe:
        """Register callback(new_value, old_value)."""
        return self._changes.subscribe(lambda change: callback(*change))

    def get_subscriber_count(self) -> int:
        return self._changes.get_subscriber_count()

    def __repr__(self) -> str:
        return f"ObservableValue({self.name}={self._value!r})"
