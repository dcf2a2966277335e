"""Catch-all mutation endpoint driven by the route alias table.

Every like, comment and idea mutation, under any historical path, verb or
body shape, is resolved by ``ideas_hub.services.aliases`` and applied once.
"""

import logging
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ideas_hub.api.v1.dependencies import (
    IdeaStoreDep,
    OwnerDep,
    SettingsDep,
    request_context,
    require_owner,
)
from ideas_hub.core.settings import Settings
from ideas_hub.services import aliases
from ideas_hub.services.aliases import Access, CanonicalCall, Operation
from ideas_hub.services.errors import ValidationError
from ideas_hub.services.identity import resolve_who

logger = logging.getLogger(__name__)

router = APIRouter(tags=["engagement"])

_CREATED = frozenset({Operation.IDEA_CREATE, Operation.COMMENT_ADD})


async def read_body(request: Request) -> dict[str, Any]:
    """Parse a JSON or form-encoded body into a dict; other shapes become {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(raw.decode("utf-8", errors="replace")))
    try:
        data = await request.json()
    except ValueError as err:
        raise ValidationError("invalid JSON body") from err
    return data if isinstance(data, dict) else {}


def _authorize(call: CanonicalCall, owner: bool, app_settings: Settings) -> None:
    if call.access is Access.OWNER:
        require_owner(owner)
    elif call.access is Access.COMMENT and not app_settings.public_comments:
        require_owner(owner)


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def engage(
    path: str,
    request: Request,
    store: IdeaStoreDep,
    app_settings: SettingsDep,
    owner: OwnerDep,
) -> Response:
    """Resolve an aliased request to its canonical operation and apply it."""
    body = await read_body(request) if request.method != "GET" else {}
    try:
        call = aliases.resolve(request.method, request.url.path, body, request.query_params)
    except aliases.RouteNotMatched as exc:
        if exc.allowed:
            raise HTTPException(
                status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                detail="Method Not Allowed",
                headers={"Allow": ", ".join(sorted(exc.allowed))},
            ) from exc
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found") from exc

    _authorize(call, owner, app_settings)

    who = None
    if call.is_like:
        who = resolve_who(request_context(request, owner=owner), public=app_settings.public_likes)
    author = None
    if call.operation is Operation.COMMENT_ADD:
        author = aliases.comment_author(
            call.body,
            header_name=request.headers.get("x-user-name"),
            header_id=request.headers.get("x-user-id"),
        )

    # Store locks and snapshot writes block, so they stay off the event loop.
    result = await run_in_threadpool(aliases.dispatch, call, store, who=who, author=author)
    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    status_code = status.HTTP_201_CREATED if call.operation in _CREATED else status.HTTP_200_OK
    return JSONResponse(result.model_dump(by_alias=True, exclude_none=True), status_code=status_code)
