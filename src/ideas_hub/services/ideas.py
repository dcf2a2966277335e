"""Idea store: records, derived counts and the per-idea lock discipline.

``IdeaStore`` is the single owner of the idea records, the ``LikeLedger``
and the ``CommentStore``. Every read and write of an idea's state goes
through one of its methods while holding that idea's lock, so a like toggle,
an explicit like set, a comment add and an idea delete on the same idea can
never interleave. Operations on different ideas run independently.
"""

from __future__ import annotations

import itertools
import logging
import secrets
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any

from ideas_hub.schemas import CommentPublic, IdeaPublic, LikeState
from ideas_hub.services.comments import (
    DEFAULT_AUTHOR_NAME,
    Author,
    Comment,
    CommentStore,
    clean_text,
    new_comment_id,
)
from ideas_hub.services.errors import IdeaNotFound, IdeasError, ValidationError
from ideas_hub.services.likes import LikeLedger
from ideas_hub.utils.time import now_iso

logger = logging.getLogger(__name__)

EmitFn = Callable[[str, dict[str, Any]], None]

DEFAULT_IDEA_TYPE = "idea"

# Accepted input keys (camelCase from the frontend, snake_case from scripts)
# mapped onto record attributes. Anything else in a payload is ignored, which
# keeps ``id``, timestamps and the derived counts out of reach.
EDITABLE_FIELDS: dict[str, str] = {
    "type": "type",
    "title": "title",
    "symbol": "symbol",
    "link": "link",
    "tf": "tf",
    "levelText": "level_text",
    "level_text": "level_text",
    "take": "take",
    "summary": "summary",
    "imageUrl": "image_url",
    "image_url": "image_url",
    "authorName": "author_name",
    "author_name": "author_name",
    "authorId": "author_id",
    "author_id": "author_id",
}


def new_idea_id() -> str:
    """Return a fresh opaque idea ID."""
    return f"idea_{secrets.token_urlsafe(9)}"


def _text(name: str, value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be text")
    if isinstance(value, int | float):
        return str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text")
    return value.strip()


def _editable(payload: Mapping[str, Any]) -> dict[str, str]:
    """Pick the editable fields present in ``payload`` and normalize them."""
    picked: dict[str, str] = {}
    for key, attr in EDITABLE_FIELDS.items():
        if key in payload:
            picked[attr] = _text(key, payload[key])
    if "symbol" in picked:
        picked["symbol"] = picked["symbol"].upper()
    return picked


@dataclass
class IdeaRecord:
    """Stored idea attributes. Counts are never stored here."""

    id: str
    title: str
    created_at: str
    updated_at: str
    type: str = DEFAULT_IDEA_TYPE
    symbol: str = ""
    link: str = ""
    tf: str = ""
    level_text: str = ""
    take: str = ""
    summary: str = ""
    image_url: str = ""
    author_name: str = DEFAULT_AUTHOR_NAME
    author_id: str = ""


def _comment_public(comment: Comment) -> CommentPublic:
    return CommentPublic.model_validate(comment.to_dict())


def _first_key(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _snapshot_comment(raw: object, fallback_stamp: str) -> Comment:
    """Read a stored comment, filling in fields older files did not keep."""
    if not isinstance(raw, Mapping):
        raise TypeError("comment must be an object")
    created = str(_first_key(raw, "createdAt", "created_at", default=fallback_stamp))
    comment = CommentPublic.model_validate(
        {
            "id": str(_first_key(raw, "id", default="") or new_comment_id()),
            "text": clean_text(raw.get("text")),
            "authorName": str(
                _first_key(raw, "authorName", "author_name", "author", default="")
                or DEFAULT_AUTHOR_NAME
            ),
            "authorId": str(_first_key(raw, "authorId", "author_id", default="")),
            "createdAt": created,
            "updatedAt": str(_first_key(raw, "updatedAt", "updated_at", default=created)),
        }
    )
    return Comment(**comment.model_dump())


def _from_snapshot(entry: object) -> tuple[IdeaRecord, dict[str, bool], list[Comment]]:
    """Turn one snapshot entry into a record, its like row and its comments.

    Raises:
        TypeError: If the entry is not an object.
        ValidationError: If the entry has no ``id`` or ``title``.
    """
    if not isinstance(entry, Mapping):
        raise TypeError("entry must be an object")
    idea_id = str(entry.get("id") or "").strip()
    if not idea_id:
        raise ValidationError("entry without id")
    values = _editable(entry)
    if not values.get("title"):
        raise ValidationError(f"idea {idea_id} has no title")
    values["type"] = values.get("type") or DEFAULT_IDEA_TYPE
    values["author_name"] = values.get("author_name") or DEFAULT_AUTHOR_NAME
    created = str(_first_key(entry, "created_at", "createdAt", default="") or now_iso())
    updated = str(_first_key(entry, "updated_at", "updatedAt", default="") or created)
    record = IdeaRecord(id=idea_id, created_at=created, updated_at=updated, **values)

    raw_likes = entry.get("likes")
    likes: dict[str, bool] = {}
    if isinstance(raw_likes, Mapping):
        likes = {str(who): True for who, liked in raw_likes.items() if liked}
    elif raw_likes:
        # A bare count cannot be split back into who keys.
        logger.warning(
            "idea %s: like count %r has no liker keys; starting at zero", idea_id, raw_likes
        )

    comments: list[Comment] = []
    raw_comments = entry.get("comments") or []
    if not isinstance(raw_comments, list):
        raise TypeError(f"idea {idea_id}: comments must be a list")
    for raw in raw_comments:
        try:
            comments.append(_snapshot_comment(raw, created))
        except (TypeError, ValueError, IdeasError) as exc:
            logger.warning("idea %s: skipping stored comment: %s", idea_id, exc)
    comments.sort(key=lambda comment: comment.created_at)
    return record, likes, comments


class IdeaStore:
    """In-memory store of ideas with their like ledger and comment lists."""

    def __init__(
        self,
        emit: EmitFn | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._emit: EmitFn = emit or (lambda kind, payload: None)
        self._on_change = on_change
        self._registry_lock = threading.Lock()
        self._ideas: dict[str, IdeaRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._order: dict[str, int] = {}
        self._sequence = itertools.count(1)
        self._likes = LikeLedger()
        self._comments = CommentStore()

    def set_change_hook(self, on_change: Callable[[], None] | None) -> None:
        """Install the callback invoked after every successful mutation."""
        self._on_change = on_change

    # --- locking helpers ----------------------------------------------------------
    @contextmanager
    def _locked(self, idea_id: str) -> Iterator[IdeaRecord]:
        with self._registry_lock:
            lock = self._locks.get(idea_id)
        if lock is None:
            raise IdeaNotFound(idea_id)
        with lock:
            # The idea may have been deleted while we waited for its lock.
            record = self._ideas.get(idea_id)
            if record is None:
                raise IdeaNotFound(idea_id)
            yield record

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _register(self, record: IdeaRecord, likes: Mapping[str, bool] | None = None,
                  comments: list[Comment] | None = None) -> None:
        with self._registry_lock:
            self._likes.open_row(record.id, dict(likes or {}))
            self._comments.open_row(record.id, comments)
            self._order[record.id] = next(self._sequence)
            self._locks[record.id] = threading.Lock()
            self._ideas[record.id] = record

    def _project(self, record: IdeaRecord, *, include_comments: bool = False) -> IdeaPublic:
        data = asdict(record)
        if not data["summary"]:
            data["summary"] = record.level_text or record.take
        data["like_count"] = self._likes.count(record.id)
        data["comment_count"] = self._comments.count(record.id)
        if include_comments:
            data["comments"] = [_comment_public(c) for c in self._comments.list(record.id)]
        return IdeaPublic.model_validate(data)

    def _ids(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._ideas, key=self._order.__getitem__)

    # --- ideas --------------------------------------------------------------------
    def create(self, payload: Mapping[str, Any]) -> IdeaPublic:
        """Create an idea from client fields.

        Raises:
            ValidationError: If ``title`` is missing or blank.
        """
        values = _editable(payload)
        if not values.get("title"):
            raise ValidationError("title required")
        values["type"] = values.get("type") or DEFAULT_IDEA_TYPE
        values["author_name"] = values.get("author_name") or DEFAULT_AUTHOR_NAME
        stamp = now_iso()
        record = IdeaRecord(id=new_idea_id(), created_at=stamp, updated_at=stamp, **values)
        self._register(record)
        with self._locked(record.id) as locked:
            idea = self._project(locked)
            self._emit("idea_created", idea.public_dict())
        logger.info("idea created id=%s title=%r", idea.id, idea.title)
        self._changed()
        return idea

    def get(self, idea_id: str, *, include_comments: bool = False) -> IdeaPublic:
        with self._locked(idea_id) as record:
            return self._project(record, include_comments=include_comments)

    def list(self) -> list[IdeaPublic]:
        """Return all ideas in creation order."""
        ideas: list[IdeaPublic] = []
        for idea_id in self._ids():
            try:
                ideas.append(self.get(idea_id))
            except IdeaNotFound:
                continue
        return ideas

    def latest(self) -> IdeaPublic | None:
        """Return the most recently created idea, or None when the store is empty."""
        for idea_id in reversed(self._ids()):
            try:
                return self.get(idea_id)
            except IdeaNotFound:
                continue
        return None

    def update(self, idea_id: str, payload: Mapping[str, Any]) -> IdeaPublic:
        """Merge the editable fields present in ``payload`` into the idea.

        Raises:
            IdeaNotFound: If the idea does not exist.
            ValidationError: If a supplied ``title`` is blank.
        """
        values = _editable(payload)
        if "title" in values and not values["title"]:
            raise ValidationError("title required")
        if "type" in values and not values["type"]:
            values["type"] = DEFAULT_IDEA_TYPE
        with self._locked(idea_id) as record:
            for attr, value in values.items():
                setattr(record, attr, value)
            record.updated_at = now_iso()
            idea = self._project(record)
            self._emit("idea_updated", idea.public_dict())
        self._changed()
        return idea

    def delete(self, idea_id: str) -> None:
        """Delete the idea together with its like row and comment list."""
        with self._locked(idea_id):
            with self._registry_lock:
                self._ideas.pop(idea_id, None)
                self._order.pop(idea_id, None)
                self._locks.pop(idea_id, None)
                self._likes.drop_row(idea_id)
                self._comments.drop_row(idea_id)
            self._emit("idea_deleted", {"id": idea_id})
        logger.info("idea deleted id=%s", idea_id)
        self._changed()

    # --- likes --------------------------------------------------------------------
    def _like_changed(self, record: IdeaRecord, who: str, count: int) -> LikeState:
        record.updated_at = now_iso()
        self._emit("like_changed", {"id": record.id, "likeCount": count})
        return LikeState(id=record.id, liked=self._likes.is_liked(record.id, who), like_count=count)

    def set_like(self, idea_id: str, who: str, liked: bool) -> LikeState:
        """Set ``who``'s like on an idea.

        Repeating the current value changes nothing: no timestamp bump, no
        event and no change hook.
        """
        with self._locked(idea_id) as record:
            liked = bool(liked)
            if self._likes.is_liked(idea_id, who) == liked:
                return LikeState(id=idea_id, liked=liked, like_count=self._likes.count(idea_id))
            count = self._likes.set(idea_id, who, liked)
            state = self._like_changed(record, who, count)
        self._changed()
        return state

    def toggle_like(self, idea_id: str, who: str) -> LikeState:
        """Flip ``who``'s like on an idea."""
        with self._locked(idea_id) as record:
            count, _ = self._likes.toggle(idea_id, who)
            state = self._like_changed(record, who, count)
        self._changed()
        return state

    def like_state(self, idea_id: str, who: str) -> LikeState:
        with self._locked(idea_id):
            return LikeState(
                id=idea_id,
                liked=self._likes.is_liked(idea_id, who),
                like_count=self._likes.count(idea_id),
            )

    def like_count(self, idea_id: str) -> int:
        with self._locked(idea_id):
            return self._likes.count(idea_id)

    # --- comments -----------------------------------------------------------------
    def add_comment(self, idea_id: str, text: object, author: Author | None = None) -> CommentPublic:
        with self._locked(idea_id) as record:
            comment = _comment_public(self._comments.add(idea_id, text, author))
            record.updated_at = now_iso()
            self._emit(
                "comment_added",
                {
                    "ideaId": idea_id,
                    "comment": comment.model_dump(by_alias=True),
                    "commentCount": self._comments.count(idea_id),
                },
            )
        self._changed()
        return comment

    def edit_comment(self, idea_id: str, comment_id: str, text: object) -> CommentPublic:
        with self._locked(idea_id) as record:
            comment = _comment_public(self._comments.edit(idea_id, comment_id, text))
            record.updated_at = now_iso()
            self._emit(
                "comment_updated",
                {
                    "ideaId": idea_id,
                    "comment": comment.model_dump(by_alias=True),
                    "commentCount": self._comments.count(idea_id),
                },
            )
        self._changed()
        return comment

    def delete_comment(self, idea_id: str, comment_id: str) -> None:
        with self._locked(idea_id) as record:
            self._comments.delete(idea_id, comment_id)
            record.updated_at = now_iso()
            self._emit(
                "comment_deleted",
                {
                    "ideaId": idea_id,
                    "id": comment_id,
                    "commentCount": self._comments.count(idea_id),
                },
            )
        self._changed()

    def list_comments(self, idea_id: str) -> list[CommentPublic]:
        """Return an idea's comments oldest first; empty if it has none."""
        with self._locked(idea_id):
            return [_comment_public(c) for c in self._comments.list(idea_id)]

    # --- snapshots ----------------------------------------------------------------
    def export(self) -> list[dict[str, Any]]:
        """Return a JSON-safe snapshot of every idea with its likes and comments."""
        snapshot: list[dict[str, Any]] = []
        for idea_id in self._ids():
            try:
                with self._locked(idea_id) as record:
                    entry = asdict(record)
                    entry["likes"] = self._likes.row(idea_id)
                    entry["comments"] = [c.to_dict() for c in self._comments.list(idea_id)]
            except IdeaNotFound:
                continue
            snapshot.append(entry)
        return snapshot

    def load(self, entries: Iterable[Mapping[str, Any]]) -> int:
        """Add ideas from a snapshot; return how many loaded.

        Accepts the output of ``export`` as well as older files with
        camelCase keys, a numeric ``likes`` count and comments carrying an
        ``author`` name. Entries that cannot be read are logged and skipped.
        No events are emitted.
        """
        loaded = 0
        for entry in entries:
            try:
                record, likes, comments = _from_snapshot(entry)
            except (TypeError, ValueError, IdeasError) as exc:
                logger.warning("skipping snapshot entry: %s", exc)
                continue
            with self._registry_lock:
                duplicate = record.id in self._ideas
            if duplicate:
                logger.warning("skipping duplicate snapshot entry id=%s", record.id)
                continue
            self._register(record, likes=likes, comments=comments)
            loaded += 1
        return loaded
