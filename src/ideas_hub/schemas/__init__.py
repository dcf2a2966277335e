"""Pydantic schemas for the public API surface."""

from .comment import CommentPublic
from .event import EventMessage
from .idea import IdeaPublic, LikeState

__all__ = [
    "CommentPublic",
    "EventMessage",
    "IdeaPublic",
    "LikeState",
]
