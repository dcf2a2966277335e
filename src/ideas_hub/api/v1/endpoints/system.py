"""Health and service information endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from ideas_hub.api.v1.dependencies import BroadcasterDep, SettingsDep
from ideas_hub.services.aliases import ALIAS_ROUTES

router = APIRouter(tags=["system"])


@router.get("/health")
@router.get("/healthz")
async def health_check(broadcaster: BroadcasterDep) -> dict[str, object]:
    """Health check endpoint to verify the service is running."""
    return {"ok": True, "subscribers": len(broadcaster)}


@router.get("/")
async def root(app_settings: SettingsDep) -> dict[str, object]:
    """Basic information about the API and the mutation aliases it accepts."""
    return {
        "name": app_settings.app_name,
        "version": app_settings.app_version,
        "docs": "/docs",
        "stream": ["/events", "/ideas/stream"],
        "routes": [
            f"{' '.join(sorted(alias.methods))} {alias.pattern} -> {alias.operation.value}"
            for alias in ALIAS_ROUTES
        ],
    }
