"""Derive the opaque liker key ("who") for a request.

The key is only ever used as a slot in the like ledger. It is not a user
identity and is never stored anywhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

import blake3

OWNER_KEY: Final[str] = "owner"
ANONYMOUS_KEY: Final[str] = "anon"
PUBLIC_KEY_PREFIX: Final[str] = "pub_"
PUBLIC_KEY_HEX_CHARS: Final[int] = 16


@dataclass(frozen=True)
class RequestContext:
    """Connection and header signals available to the resolver."""

    is_owner: bool = False
    client_host: str | None = None
    user_agent: str | None = None
    client_user_id: str | None = None


def fingerprint(context: RequestContext) -> str:
    """Return the raw fingerprint string for a public caller.

    A non-empty client identity header wins so that the same logical user
    keeps one ledger slot across connections. Without it the fingerprint is
    built from the network origin and the client signature.
    """
    user_id = (context.client_user_id or "").strip()
    if user_id:
        return f"uid:{user_id}"
    host = (context.client_host or "").strip()
    agent = (context.user_agent or "").strip()
    return f"net:{host}|{agent}"


def resolve_who(context: RequestContext, *, public: bool) -> str:
    """Return the ledger key for the caller.

    Args:
        context: Signals extracted from the request.
        public: Whether non-owner callers may interact with this operation class.

    Returns:
        ``"owner"`` for the privileged caller, a truncated one-way hash for
        public callers, otherwise ``"anon"``.
    """
    if context.is_owner:
        return OWNER_KEY
    if public:
        digest = blake3.blake3(fingerprint(context).encode("utf-8")).hexdigest()
        return PUBLIC_KEY_PREFIX + digest[:PUBLIC_KEY_HEX_CHARS]
    return ANONYMOUS_KEY
