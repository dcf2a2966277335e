"""Read endpoints for ideas, comments and like state."""

from typing import Literal

from fastapi import APIRouter, Query, Request, Response, status

from ideas_hub.api.v1.dependencies import (
    IdeaStoreDep,
    OwnerDep,
    SettingsDep,
    request_context,
)
from ideas_hub.schemas import CommentPublic, IdeaPublic, LikeState
from ideas_hub.services.identity import resolve_who

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.get("", response_model=list[IdeaPublic], response_model_exclude_none=True)
async def list_ideas(
    store: IdeaStoreDep,
    limit: int = Query(50, ge=1, le=500, description="Maximum number of ideas to return"),
) -> list[IdeaPublic]:
    """List ideas, newest first.

    Args:
        store: Shared idea store
        limit: Maximum number of ideas to return (max 500)

    Returns:
        Public projections ordered by creation time, most recent first
    """
    return list(reversed(store.list()))[:limit]


@router.get(
    "/latest",
    response_model=IdeaPublic,
    response_model_exclude_none=True,
    responses={204: {"description": "No ideas yet"}},
)
async def latest_idea(store: IdeaStoreDep) -> IdeaPublic | Response:
    """Return the most recently created idea, or 204 when there are none."""
    idea = store.latest()
    if idea is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return idea


@router.get("/{idea_id}", response_model=IdeaPublic, response_model_exclude_none=True)
async def get_idea(
    idea_id: str,
    store: IdeaStoreDep,
    comments: bool = Query(False, description="Embed the comment list"),
) -> IdeaPublic:
    """Get a single idea by ID.

    Raises:
        IdeaNotFound: Mapped to 404 by the application error handlers
    """
    return store.get(idea_id, include_comments=comments)


@router.get("/{idea_id}/comments", response_model=list[CommentPublic])
async def list_comments(
    idea_id: str,
    store: IdeaStoreDep,
    order: Literal["asc", "desc"] = Query("asc", description="Oldest first (asc) or newest first"),
) -> list[CommentPublic]:
    """List an idea's comments."""
    comments = store.list_comments(idea_id)
    if order == "desc":
        comments.reverse()
    return comments


@router.get("/{idea_id}/likes", response_model=LikeState)
async def get_like_state(
    idea_id: str,
    request: Request,
    store: IdeaStoreDep,
    app_settings: SettingsDep,
    owner: OwnerDep,
) -> LikeState:
    """Return the like count and whether the caller currently likes the idea."""
    context = request_context(request, owner=owner)
    return store.like_state(idea_id, resolve_who(context, public=app_settings.public_likes))
