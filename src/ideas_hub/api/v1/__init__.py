"""Version 1 API endpoints."""

from .endpoints import (
    engagement_router,
    events_router,
    ideas_router,
    system_router,
)

__all__ = [
    "engagement_router",
    "events_router",
    "ideas_router",
    "system_router",
]
