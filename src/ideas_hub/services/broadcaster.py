"""Fan-out of state-change events to connected realtime subscribers."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any

from ideas_hub.schemas.event import EventKind, EventMessage
from ideas_hub.utils.time import now_iso

logger = logging.getLogger(__name__)

WriteFn = Callable[[EventMessage], None]

_SUBSCRIBER_IDS = itertools.count(1)


class SubscriberState(str, Enum):
    """Lifecycle of a realtime subscriber."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class Subscriber:
    """One connected client and the callable used to write to it.

    ``write`` must not block. It raises to signal that the connection is
    gone or can no longer keep up.
    """

    def __init__(self, write: WriteFn) -> None:
        self.id = next(_SUBSCRIBER_IDS)
        self.state = SubscriberState.CONNECTING
        self._write = write

    @property
    def is_open(self) -> bool:
        return self.state is SubscriberState.OPEN

    def send(self, message: EventMessage) -> None:
        if self.state is SubscriberState.CLOSED:
            raise ConnectionError(f"subscriber {self.id} is closed")
        self._write(message)


class Broadcaster:
    """Registry of open subscribers.

    ``publish`` never raises: a subscriber whose write fails is closed and
    dropped while delivery to the others continues.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, Subscriber] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, write: WriteFn) -> Subscriber:
        """Register a new subscriber, open it and send the greeting."""
        subscriber = Subscriber(write)
        with self._lock:
            self._subscribers[subscriber.id] = subscriber
        subscriber.state = SubscriberState.OPEN
        self._deliver(subscriber, EventMessage(kind="hello", payload={"ts": now_iso()}))
        logger.debug("subscriber %d open (%d active)", subscriber.id, len(self))
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Close and remove a subscriber. Safe to call any number of times."""
        with self._lock:
            removed = self._subscribers.pop(subscriber.id, None)
        subscriber.state = SubscriberState.CLOSED
        if removed is not None:
            logger.debug("subscriber %d closed (%d active)", subscriber.id, len(self))

    def _deliver(self, subscriber: Subscriber, message: EventMessage) -> bool:
        try:
            subscriber.send(message)
        except Exception as exc:
            logger.warning("dropping subscriber %d after write failure: %s", subscriber.id, exc)
            self.unsubscribe(subscriber)
            return False
        return True

    def _fan_out(self, message: EventMessage) -> int:
        with self._lock:
            targets = list(self._subscribers.values())
        return sum(1 for subscriber in targets if self._deliver(subscriber, message))

    def publish(self, kind: EventKind, payload: dict[str, Any]) -> int:
        """Push an event to every open subscriber; return how many received it."""
        return self._fan_out(EventMessage(kind=kind, payload=payload))

    def heartbeat(self) -> int:
        """Send a keep-alive to every subscriber, dropping dead ones."""
        return self._fan_out(EventMessage(kind="heartbeat", payload={"ts": now_iso()}))
