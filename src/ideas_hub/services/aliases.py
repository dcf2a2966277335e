"""Route alias normalization.

Frontends have called many different paths, verbs and body shapes for the
same handful of operations over time. ``ALIAS_ROUTES`` lists every known
shape, in priority order, and maps it onto one canonical operation.
``resolve`` turns a raw (method, path, body, query) request into a
``CanonicalCall`` and ``dispatch`` applies it to the store with exactly one
store call.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final

from ideas_hub.schemas import CommentPublic, IdeaPublic, LikeState
from ideas_hub.services.comments import DEFAULT_AUTHOR_NAME, Author
from ideas_hub.services.errors import ValidationError
from ideas_hub.services.ideas import IdeaStore

logger = logging.getLogger(__name__)

API_PREFIXES: Final[tuple[str, ...]] = ("/api/v1", "/api")

IDEA_ID_KEYS: Final[tuple[str, ...]] = ("id", "ideaId", "idea_id", "postId", "post_id")
COMMENT_IDEA_ID_KEYS: Final[tuple[str, ...]] = ("ideaId", "idea_id", "postId", "post_id")
COMMENT_ID_KEYS: Final[tuple[str, ...]] = ("commentId", "comment_id", "cid")
LIKE_FLAG_KEYS: Final[tuple[str, ...]] = ("liked", "like", "value", "state")

_TRUE_WORDS = frozenset({"true", "1", "yes", "on", "like", "liked"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off", "unlike", "unliked"})
_TOGGLE_WORDS = frozenset({"toggle", "flip"})

_PARAM_RE = re.compile(r"\{(\w+)\}")


class Operation(str, Enum):
    """Canonical operations every alias resolves to."""

    LIKE_SET = "like_set"
    LIKE_TOGGLE = "like_toggle"
    COMMENT_ADD = "comment_add"
    COMMENT_EDIT = "comment_edit"
    COMMENT_DELETE = "comment_delete"
    IDEA_CREATE = "idea_create"
    IDEA_UPDATE = "idea_update"
    IDEA_DELETE = "idea_delete"

    @property
    def access(self) -> Access:
        if self in (Operation.LIKE_SET, Operation.LIKE_TOGGLE):
            return Access.LIKE
        if self in (Operation.COMMENT_ADD, Operation.COMMENT_EDIT, Operation.COMMENT_DELETE):
            return Access.COMMENT
        return Access.OWNER


class Access(str, Enum):
    """Who may invoke an operation class."""

    OWNER = "owner"
    LIKE = "like"
    COMMENT = "comment"


class RouteNotMatched(LookupError):
    """No alias matches the request.

    ``allowed`` holds the methods that would match the path, so the HTTP
    boundary can answer 405 instead of 404 when it is non-empty.
    """

    def __init__(self, method: str, path: str, allowed: Iterable[str] = ()) -> None:
        super().__init__(f"no route for {method} {path}")
        self.method = method
        self.path = path
        self.allowed = frozenset(allowed)


@dataclass(frozen=True)
class AliasRoute:
    """One historical request shape.

    Attributes:
        methods: HTTP verbs accepted for this shape.
        pattern: Path with ``{id}`` (idea) and ``{cid}`` (comment) placeholders.
        operation: Canonical operation invoked.
        liked: Like intent implied by the route when the body is silent;
            ``None`` means toggle.
        from_body: Whether body flags or a ``delta`` may override ``liked``.
        id_keys: Body/query keys searched for the idea ID when not in the path.
    """

    methods: frozenset[str]
    pattern: str
    operation: Operation
    liked: bool | None = None
    from_body: bool = True
    id_keys: tuple[str, ...] = IDEA_ID_KEYS
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        escaped = re.escape(self.pattern).replace(r"\{", "{").replace(r"\}", "}")
        source = _PARAM_RE.sub(lambda m: f"(?P<{m.group(1)}>[^/]+)", escaped)
        object.__setattr__(self, "regex", re.compile(f"^{source}$"))

    def match(self, path: str) -> dict[str, str] | None:
        found = self.regex.match(path)
        return found.groupdict() if found else None


def route(methods: str, pattern: str, operation: Operation, **options: Any) -> AliasRoute:
    return AliasRoute(frozenset(methods.split()), pattern, operation, **options)


_COMMENT_KEYS = {"id_keys": COMMENT_IDEA_ID_KEYS}

# Order matters: literal segments such as "toggle" must be tried before the
# placeholder routes that would otherwise read them as IDs.
ALIAS_ROUTES: Final[tuple[AliasRoute, ...]] = (
    # like toggles
    route("POST PUT PATCH", "/ideas/{id}/like/toggle", Operation.LIKE_TOGGLE),
    route("POST PUT PATCH", "/ideas/{id}/likes/toggle", Operation.LIKE_TOGGLE),
    route("POST", "/ideas/{id}/toggle-like", Operation.LIKE_TOGGLE),
    route("POST", "/likes/toggle", Operation.LIKE_TOGGLE),
    route("POST", "/like/toggle", Operation.LIKE_TOGGLE),
    # like set (body flag or delta may refine the route's intent)
    route("POST PUT", "/ideas/{id}/like", Operation.LIKE_SET, liked=True),
    route("DELETE", "/ideas/{id}/like", Operation.LIKE_SET, liked=False, from_body=False),
    route("POST", "/ideas/{id}/unlike", Operation.LIKE_SET, liked=False, from_body=False),
    route("POST PUT PATCH", "/ideas/{id}/likes", Operation.LIKE_SET),
    route("DELETE", "/ideas/{id}/likes", Operation.LIKE_SET, liked=False, from_body=False),
    route("POST PUT", "/likes/{id}", Operation.LIKE_SET),
    route("DELETE", "/likes/{id}", Operation.LIKE_SET, liked=False, from_body=False),
    route("POST PUT", "/likes", Operation.LIKE_SET),
    route("POST", "/like", Operation.LIKE_SET),
    route("POST", "/unlike", Operation.LIKE_SET, liked=False, from_body=False),
    # comments
    route("POST", "/ideas/{id}/comments", Operation.COMMENT_ADD),
    route("POST", "/ideas/{id}/comment", Operation.COMMENT_ADD),
    route("POST", "/ideas/{id}/comments/{cid}/delete", Operation.COMMENT_DELETE),
    route("PATCH PUT", "/ideas/{id}/comments/{cid}", Operation.COMMENT_EDIT),
    route("DELETE", "/ideas/{id}/comments/{cid}", Operation.COMMENT_DELETE),
    route("POST", "/comments", Operation.COMMENT_ADD, **_COMMENT_KEYS),
    route("PATCH PUT", "/comments/{cid}", Operation.COMMENT_EDIT, **_COMMENT_KEYS),
    route("DELETE", "/comments/{cid}", Operation.COMMENT_DELETE, **_COMMENT_KEYS),
    # ideas
    route("POST", "/ideas", Operation.IDEA_CREATE),
    route("POST", "/ideas/{id}/delete", Operation.IDEA_DELETE),
    route("POST", "/ideas/{id}/update", Operation.IDEA_UPDATE),
    route("PATCH PUT", "/ideas/{id}", Operation.IDEA_UPDATE),
    route("DELETE", "/ideas/{id}", Operation.IDEA_DELETE),
)


@dataclass(frozen=True)
class CanonicalCall:
    """A request reduced to one canonical operation and its arguments."""

    operation: Operation
    route: AliasRoute
    idea_id: str | None = None
    comment_id: str | None = None
    liked: bool | None = None
    body: Mapping[str, Any] = field(default_factory=dict)

    @property
    def access(self) -> Access:
        return self.operation.access

    @property
    def is_like(self) -> bool:
        return self.access is Access.LIKE


def normalize_path(path: str) -> str:
    """Strip ``/api`` prefixes and trailing slashes."""
    path = "/" + path.strip("/")
    for prefix in API_PREFIXES:
        if path == prefix:
            return "/"
        if path.startswith(prefix + "/"):
            return path[len(prefix):]
    return path


def _flag(value: Any) -> tuple[bool, bool | None]:
    """Interpret a like flag. Returns ``(found, liked)``; liked None = toggle."""
    if isinstance(value, bool):
        return True, value
    if isinstance(value, int | float):
        # Numeric flags are booleans written as 0 or 1, the same as their
        # form-encoded spelling. Only ``delta`` carries a signed amount.
        if value in (0, 1):
            return True, bool(value)
        raise ValidationError("like flag must be a boolean")
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True, True
        if word in _FALSE_WORDS:
            return True, False
        if word in _TOGGLE_WORDS:
            return True, None
    if value is None:
        return False, None
    raise ValidationError("like flag must be a boolean")


def _from_delta(delta: Any) -> bool | None:
    if isinstance(delta, bool) or not isinstance(delta, int | float) or delta != delta:
        raise ValidationError("delta must be a number")
    if delta > 0:
        return True
    if delta < 0:
        return False
    return None


def like_intent(route: AliasRoute, body: Mapping[str, Any]) -> bool | None:
    """Return the like intent: True, False, or None for toggle."""
    if route.from_body:
        for key in LIKE_FLAG_KEYS:
            if key in body:
                found, liked = _flag(body[key])
                if found:
                    return liked
        if "delta" in body:
            return _from_delta(body["delta"])
        if "action" in body:
            found, liked = _flag(body["action"])
            if found:
                return liked
    return route.liked


def _first(keys: Iterable[str], *sources: Mapping[str, Any]) -> str | None:
    for source in sources:
        for key in keys:
            value = source.get(key)
            if value is not None and str(value).strip():
                return str(value).strip()
    return None


def resolve(
    method: str,
    path: str,
    body: Mapping[str, Any] | None = None,
    query: Mapping[str, Any] | None = None,
    routes: Iterable[AliasRoute] = ALIAS_ROUTES,
) -> CanonicalCall:
    """Map a raw request onto its canonical operation.

    Raises:
        RouteNotMatched: If no alias matches; ``allowed`` lists verbs that would.
        ValidationError: If a matched alias lacks a required ID or has a
            malformed like flag.
    """
    method = method.upper()
    body = body or {}
    query = query or {}
    normalized = normalize_path(path)
    allowed: set[str] = set()
    for candidate in routes:
        params = candidate.match(normalized)
        if params is None:
            continue
        if method not in candidate.methods:
            allowed.update(candidate.methods)
            continue
        return _build_call(candidate, params, body, query)
    raise RouteNotMatched(method, normalized, allowed)


def _build_call(
    candidate: AliasRoute,
    params: Mapping[str, str],
    body: Mapping[str, Any],
    query: Mapping[str, Any],
) -> CanonicalCall:
    operation = candidate.operation
    idea_id = params.get("id") or _first(candidate.id_keys, body, query)
    comment_id = params.get("cid") or _first(COMMENT_ID_KEYS, body, query)
    if operation is not Operation.IDEA_CREATE and not idea_id:
        raise ValidationError("idea id required")
    if operation in (Operation.COMMENT_EDIT, Operation.COMMENT_DELETE) and not comment_id:
        raise ValidationError("comment id required")

    liked: bool | None = None
    if operation is Operation.LIKE_SET:
        liked = like_intent(candidate, body)
        if liked is None:
            operation = Operation.LIKE_TOGGLE
    logger.debug("alias %s %s -> %s idea=%s", sorted(candidate.methods), candidate.pattern,
                 operation.value, idea_id)
    return CanonicalCall(
        operation=operation,
        route=candidate,
        idea_id=idea_id,
        comment_id=comment_id,
        liked=liked,
        body=body,
    )


def comment_author(
    body: Mapping[str, Any],
    header_name: str | None = None,
    header_id: str | None = None,
) -> Author:
    """Pick the comment author from identity headers first, then the body."""
    name = (header_name or "").strip() or _first(("authorName", "author_name", "author"), body)
    author_id = (header_id or "").strip() or _first(("authorId", "author_id"), body)
    return Author(name=name or DEFAULT_AUTHOR_NAME, id=author_id or "")


def dispatch(
    call: CanonicalCall,
    store: IdeaStore,
    *,
    who: str | None = None,
    author: Author | None = None,
) -> IdeaPublic | LikeState | CommentPublic | None:
    """Apply a canonical call to the store with exactly one store operation."""
    operation = call.operation
    idea_id = call.idea_id or ""
    if operation is Operation.LIKE_SET:
        return store.set_like(idea_id, _require_who(who), bool(call.liked))
    if operation is Operation.LIKE_TOGGLE:
        return store.toggle_like(idea_id, _require_who(who))
    if operation is Operation.COMMENT_ADD:
        return store.add_comment(idea_id, call.body.get("text"), author or comment_author(call.body))
    if operation is Operation.COMMENT_EDIT:
        return store.edit_comment(idea_id, call.comment_id or "", call.body.get("text"))
    if operation is Operation.COMMENT_DELETE:
        store.delete_comment(idea_id, call.comment_id or "")
        return None
    if operation is Operation.IDEA_CREATE:
        return store.create(call.body)
    if operation is Operation.IDEA_UPDATE:
        return store.update(idea_id, call.body)
    store.delete(idea_id)
    return None


def _require_who(who: str | None) -> str:
    if not who:
        raise ValueError("like operations need a resolved who key")
    return who
