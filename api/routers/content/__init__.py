"""Content-related routes package.

Import the router via get_router() to avoid circular imports.
"""

from fastapi import APIRouter

_router = None


def get_router() -> APIRouter:
    """Create and return the combined content router."""
    global _router
    if _router is not None:
        return _router

    from api.routers.content.views import router as views_router

    combined = APIRouter()
    combined.include_router(views_router)
    _router = combined
    return _router


__all__ = ["get_router"]
