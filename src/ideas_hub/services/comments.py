"""Per-idea ordered comment lists."""

from __future__ import annotations

import logging
import secrets
from dataclasses import asdict, dataclass
from typing import Any

from ideas_hub.services.errors import CommentNotFound, IdeaNotFound, ValidationError
from ideas_hub.utils.time import now_iso

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR_NAME = "Member"


def new_comment_id() -> str:
    """Return a fresh opaque comment ID."""
    return f"cmt_{secrets.token_urlsafe(8)}"


def clean_text(text: object) -> str:
    """Return trimmed comment text, raising ``ValidationError`` when blank."""
    value = text.strip() if isinstance(text, str) else ""
    if not value:
        raise ValidationError("text required")
    return value


@dataclass
class Author:
    """Display identity attached to a comment."""

    name: str = DEFAULT_AUTHOR_NAME
    id: str = ""


@dataclass
class Comment:
    """A single comment on an idea."""

    id: str
    text: str
    author_name: str
    author_id: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class CommentStore:
    """Map of idea ID -> comments in insertion order.

    Like ``LikeLedger`` it performs no locking of its own.
    """

    def __init__(self) -> None:
        self._rows: dict[str, list[Comment]] = {}

    def open_row(self, idea_id: str, comments: list[Comment] | None = None) -> None:
        self._rows[idea_id] = list(comments or [])

    def drop_row(self, idea_id: str) -> None:
        self._rows.pop(idea_id, None)

    def _row(self, idea_id: str) -> list[Comment]:
        try:
            return self._rows[idea_id]
        except KeyError:
            raise IdeaNotFound(idea_id) from None

    def _find(self, idea_id: str, comment_id: str) -> tuple[int, Comment]:
        for index, comment in enumerate(self._row(idea_id)):
            if comment.id == comment_id:
                return index, comment
        raise CommentNotFound(idea_id, comment_id)

    def count(self, idea_id: str) -> int:
        return len(self._row(idea_id))

    def list(self, idea_id: str) -> list[Comment]:
        """Return the comments of an idea, oldest first."""
        return list(self._row(idea_id))

    def add(self, idea_id: str, text: object, author: Author | None = None) -> Comment:
        """Append a comment.

        Raises:
            ValidationError: If the text is blank.
            IdeaNotFound: If the idea has no comment row.
        """
        row = self._row(idea_id)
        body = clean_text(text)
        author = author or Author()
        stamp = now_iso()
        comment = Comment(
            id=new_comment_id(),
            text=body,
            author_name=author.name.strip() or DEFAULT_AUTHOR_NAME,
            author_id=author.id.strip(),
            created_at=stamp,
            updated_at=stamp,
        )
        row.append(comment)
        logger.debug("comment added idea=%s comment=%s", idea_id, comment.id)
        return comment

    def edit(self, idea_id: str, comment_id: str, text: object) -> Comment:
        """Replace the text of an existing comment and refresh ``updated_at``."""
        _, comment = self._find(idea_id, comment_id)
        comment.text = clean_text(text)
        comment.updated_at = now_iso()
        return comment

    def delete(self, idea_id: str, comment_id: str) -> Comment:
        """Remove a comment and return it."""
        index, comment = self._find(idea_id, comment_id)
        del self._row(idea_id)[index]
        logger.debug("comment deleted idea=%s comment=%s", idea_id, comment_id)
        return comment
