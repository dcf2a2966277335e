"""Server-Sent Events stream of idea, like and comment changes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from ideas_hub.api.v1.dependencies import BroadcasterDep, SettingsDep
from ideas_hub.schemas.event import EventMessage
from ideas_hub.services.broadcaster import Broadcaster, Subscriber

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class QueueWriter:
    """Write callable handing broadcaster messages to a stream's event loop.

    Broadcasts may come from any thread, so messages are queued through
    ``call_soon_threadsafe``. Writing to a closed or saturated stream raises,
    which makes the broadcaster drop the subscriber.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, maxsize: int) -> None:
        self._loop = loop
        self.queue: asyncio.Queue[EventMessage] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def __call__(self, message: EventMessage) -> None:
        if self.closed:
            raise ConnectionError("stream closed")
        if self.queue.full():
            raise BufferError("subscriber queue full")
        self._loop.call_soon_threadsafe(self._offer, message)

    def _offer(self, message: EventMessage) -> None:
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.closed = True

    def close(self) -> None:
        self.closed = True


async def event_stream(
    request: Request,
    broadcaster: Broadcaster,
    subscriber: Subscriber,
    writer: QueueWriter,
    *,
    retry_ms: int,
    poll_seconds: float,
) -> AsyncIterator[str]:
    """Yield SSE frames for one subscriber until it disconnects or is dropped."""
    try:
        yield f"retry: {retry_ms}\n\n"
        while subscriber.is_open and not writer.closed:
            try:
                message = await asyncio.wait_for(writer.queue.get(), timeout=poll_seconds)
            except TimeoutError:
                if await request.is_disconnected():
                    break
                continue
            yield message.to_sse()
    finally:
        writer.close()
        broadcaster.unsubscribe(subscriber)


@router.get("/events")
@router.get("/ideas/stream")
async def stream_events(
    request: Request,
    broadcaster: BroadcasterDep,
    app_settings: SettingsDep,
) -> StreamingResponse:
    """Open a realtime stream.

    The first event is ``hello``; keep-alive comments follow on the heartbeat
    interval, and every successful mutation is pushed as it happens.
    """
    writer = QueueWriter(asyncio.get_running_loop(), app_settings.subscriber_queue_size)
    subscriber = broadcaster.subscribe(writer)
    stream = event_stream(
        request,
        broadcaster,
        subscriber,
        writer,
        retry_ms=app_settings.sse_retry_ms,
        poll_seconds=max(0.1, app_settings.heartbeat_interval_seconds),
    )
    return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)
