"""Health routes."""

from fastapi import APIRouter, Response

from db.redis_database import REDIS_ASYNC_CLIENT
from utils import const

router = APIRouter()


@router.get("/health", tags=["health"])
async def health(response: Response):
    """Liveness plus Redis reachability."""
    response.headers.update(const.NO_CACHE_HEADERS)
    redis_health = await REDIS_ASYNC_CLIENT.health_check()
    return {"status": "ok", "redis": redis_health}
