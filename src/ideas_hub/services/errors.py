"""Typed failures raised by the idea engagement services."""

from __future__ import annotations


class IdeasError(Exception):
    """Base exception for all idea, like and comment failures."""


class ValidationError(IdeasError):
    """Raised when a required field is missing or blank.

    The operation is not applied.
    """


class NotFound(IdeasError):
    """Raised when an idea or comment ID does not resolve."""


class IdeaNotFound(NotFound):
    """Raised for an unknown or deleted idea."""

    def __init__(self, idea_id: str) -> None:
        super().__init__("idea not found")
        self.idea_id = idea_id


class CommentNotFound(NotFound):
    """Raised for an unknown comment under an existing idea."""

    def __init__(self, idea_id: str, comment_id: str) -> None:
        super().__init__("comment not found")
        self.idea_id = idea_id
        self.comment_id = comment_id
