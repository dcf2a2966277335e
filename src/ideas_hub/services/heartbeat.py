"""Periodic keep-alive for realtime subscribers."""

from __future__ import annotations

import asyncio
import logging

from ideas_hub.services.broadcaster import Broadcaster

logger = logging.getLogger(__name__)


class HeartbeatWorker:
    """Sends a heartbeat to every subscriber on a fixed interval.

    Subscribers whose connection has gone away fail the write and are
    dropped by the broadcaster.
    """

    def __init__(self, broadcaster: Broadcaster, interval_seconds: float) -> None:
        self.broadcaster = broadcaster
        self.interval = max(0.1, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background heartbeat loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background heartbeat loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                delivered = self.broadcaster.heartbeat()
                logger.debug("heartbeat delivered to %d subscribers", delivered)
