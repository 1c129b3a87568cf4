"""View recording endpoint for content pages."""

from fastapi import APIRouter, Query, Request, Response, status

from analytics.recorder import record_request_view
from utils import const

router = APIRouter(prefix="/api/v1/content", tags=["Content Views"])


@router.post("/{content_id}/views", status_code=status.HTTP_202_ACCEPTED)
async def record_content_view(
    content_id: int,
    request: Request,
    response: Response,
    user_id: int | None = Query(None, ge=1, description="Signed-in viewer, if any"),
):
    """Count a view of a content item. Counter failures never fail the request."""
    response.headers.update(const.NO_CACHE_HEADERS)
    await record_request_view(request, content_id, user_id)
    return {"status": "recorded"}
