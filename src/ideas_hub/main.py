"""Main entry point for the Ideas Hub application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ideas_hub.api.v1 import (
    engagement_router,
    events_router,
    ideas_router,
    system_router,
)
from ideas_hub.core.settings import settings
from ideas_hub.services import get_broadcaster, get_idea_store
from ideas_hub.services.errors import NotFound, ValidationError
from ideas_hub.services.heartbeat import HeartbeatWorker

logger = logging.getLogger("ideas_hub")

# Every read route is served at the bare path and under the /api mirrors.
API_PREFIXES = ("", "/api", "/api/v1")

app = FastAPI(
    title=settings.app_name,
    description="Trade idea engagement API: ideas, likes, comments and live updates",
    version=settings.app_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

for prefix in API_PREFIXES:
    app.include_router(system_router, prefix=prefix)
    # The stream route must precede /ideas/{idea_id}.
    app.include_router(events_router, prefix=prefix)
    app.include_router(ideas_router, prefix=prefix)
# Catch-all for mutations; it strips the /api prefixes itself.
app.include_router(engagement_router)


@app.exception_handler(ValidationError)
async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(_request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.on_event("startup")
async def on_startup() -> None:
    logger.setLevel(settings.log_level.upper())
    store = get_idea_store()
    if not settings.owner_enabled:
        logger.warning("API_TOKEN is not set; owner-only operations will be rejected")
    logger.info(
        "%s %s ready: %d ideas, public likes %s, public comments %s",
        settings.app_name,
        settings.app_version,
        len(store.list()),
        "on" if settings.public_likes else "off",
        "on" if settings.public_comments else "off",
    )
    worker = HeartbeatWorker(get_broadcaster(), settings.heartbeat_interval_seconds)
    await worker.start()
    app.state.heartbeat_worker = worker


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: HeartbeatWorker | None = getattr(app.state, "heartbeat_worker", None)
    if worker:
        await worker.stop()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ideas_hub.main:app", host="0.0.0.0", port=8080, reload=settings.debug)
