"""Exception handlers that return HTTP 200 for /api/v1/* paths.

Reverse proxies in front of the service may replace 4xx/5xx bodies with their
own error pages. Answering with HTTP 200 and an ``error: true`` JSON envelope
lets the dashboard read the real error details.
"""

import logging

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from utils import const

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/"


def _is_api_path(request: Request) -> bool:
    return request.url.path.startswith(API_PREFIX)


def _error_envelope(status_code: int, detail, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content={"error": True, "detail": detail, "status_code": status_code, **extra},
        headers=const.NO_CACHE_HEADERS,
    )


async def api_http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if not _is_api_path(request):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return _error_envelope(exc.status_code, exc.detail)


async def api_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    if not _is_api_path(request):
        return JSONResponse(
            status_code=422,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    return _error_envelope(422, "Validation error", errors=jsonable_encoder(exc.errors()))
