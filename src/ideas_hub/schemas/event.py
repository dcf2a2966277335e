"""Realtime event envelope."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field

EventKind = Literal[
    "hello",
    "heartbeat",
    "idea_created",
    "idea_updated",
    "idea_deleted",
    "like_changed",
    "comment_added",
    "comment_updated",
    "comment_deleted",
]


class EventMessage(BaseModel):
    """A message pushed to realtime subscribers."""

    kind: EventKind
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_sse(self) -> str:
        """Render the message as a Server-Sent Events frame.

        Heartbeats are sent as SSE comments so browsers keep the connection
        open without dispatching an event.
        """
        if self.kind == "heartbeat":
            return ":\n\n"
        data = json.dumps(self.payload, separators=(",", ":"))
        return f"event: {self.kind}\ndata: {data}\n\n"
