"""Route modules."""

from .jobs import router as jobs_router
from .sessions import router as sessions_router

__all__ = ["jobs_router", "sessions_router"]
