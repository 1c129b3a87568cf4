"""Admin routes package.

Import the router via get_router() to avoid circular imports.
"""

from fastapi import APIRouter

_router = None


def get_router() -> APIRouter:
    """Create and return the combined admin router."""
    global _router
    if _router is not None:
        return _router

    from api.routers.admin.analytics import router as analytics_router

    combined = APIRouter()
    combined.include_router(analytics_router)
    _router = combined
    return _router


__all__ = ["get_router"]
