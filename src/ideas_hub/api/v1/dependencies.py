"""Shared API dependencies for owner checks and caller identity."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ideas_hub.core.security import is_owner_credential
from ideas_hub.core.settings import Settings, settings
from ideas_hub.services import Broadcaster, IdeaStore, get_broadcaster, get_idea_store
from ideas_hub.services.identity import RequestContext

# Optional: public callers send no credential at all.
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings_dep() -> Settings:
    """Return the active application settings."""
    return settings


def get_idea_store_dep() -> IdeaStore:
    """Return the shared idea store."""
    return get_idea_store()


def get_broadcaster_dep() -> Broadcaster:
    """Return the shared realtime broadcaster."""
    return get_broadcaster()


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
IdeaStoreDep = Annotated[IdeaStore, Depends(get_idea_store_dep)]
BroadcasterDep = Annotated[Broadcaster, Depends(get_broadcaster_dep)]


def get_is_owner(
    app_settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    x_api_token: Annotated[str | None, Header()] = None,
) -> bool:
    """Return True if the request carries the owner token.

    Accepts ``Authorization: Bearer <token>`` or ``X-Api-Token: <token>``.
    """
    return is_owner_credential(
        app_settings.api_token,
        bearer=credentials.credentials if credentials else None,
        api_token=x_api_token,
    )


OwnerDep = Annotated[bool, Depends(get_is_owner)]


def request_context(request: Request, *, owner: bool) -> RequestContext:
    """Collect the signals the identity resolver may use."""
    return RequestContext(
        is_owner=owner,
        client_host=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        client_user_id=request.headers.get("x-user-id"),
    )


def require_owner(owner: bool) -> None:
    """Reject callers without the owner credential.

    Raises:
        HTTPException: 401 when the credential is missing or wrong.
    """
    if not owner:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
