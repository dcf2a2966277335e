"""API endpoint modules for version 1."""

from .engagement import router as engagement_router
from .events import router as events_router
from .ideas import router as ideas_router
from .system import router as system_router

__all__ = [
    "engagement_router",
    "events_router",
    "ideas_router",
    "system_router",
]
