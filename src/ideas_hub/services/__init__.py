"""Business logic services for the Ideas Hub application."""

from __future__ import annotations

from ideas_hub.core.settings import settings

from .broadcaster import Broadcaster, Subscriber, SubscriberState
from .ideas import IdeaStore
from .snapshot import SnapshotFile


class _ServiceRegistry:
    """Process-wide broadcaster and store, created on first use."""

    _broadcaster: Broadcaster | None = None
    _store: IdeaStore | None = None

    @classmethod
    def broadcaster(cls) -> Broadcaster:
        if cls._broadcaster is None:
            cls._broadcaster = Broadcaster()
        return cls._broadcaster

    @classmethod
    def store(cls) -> IdeaStore:
        if cls._store is None:
            store = IdeaStore(emit=cls.broadcaster().publish)
            if settings.data_file:
                SnapshotFile(settings.data_file).attach(store)
            cls._store = store
        return cls._store


def get_broadcaster() -> Broadcaster:
    """Return the singleton realtime broadcaster."""
    return _ServiceRegistry.broadcaster()


def get_idea_store() -> IdeaStore:
    """Return the singleton idea store wired to the broadcaster."""
    return _ServiceRegistry.store()


__all__ = [
    "Broadcaster",
    "IdeaStore",
    "SnapshotFile",
    "Subscriber",
    "SubscriberState",
    "get_broadcaster",
    "get_idea_store",
]
