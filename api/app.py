"""FastAPI application factory."""

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api import middleware
from api.exception_handlers import (
    api_http_exception_handler,
    api_validation_exception_handler,
)
from api.lifespan import lifespan
from db.config import settings
from utils import const


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan,
    )
    _register_exception_handlers(app)
    _register_middleware(app)
    _register_routers(app)
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    # 4xx/5xx on /api/v1/* are answered as HTTP 200 error envelopes
    app.add_exception_handler(HTTPException, api_http_exception_handler)
    app.add_exception_handler(RequestValidationError, api_validation_exception_handler)


def _register_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_cors_header(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(const.CORS_HEADERS)
        return response

    # Added last runs first: access log wraps timing wraps the handlers
    app.add_middleware(middleware.TimingMiddleware)
    app.add_middleware(middleware.SecureLoggingMiddleware)


def _register_routers(app: FastAPI) -> None:
    # Imported here to avoid circular imports
    from api.routers.admin import get_router as get_admin_router
    from api.routers.content import get_router as get_content_router
    from api.routers.health import router as health_router

    app.include_router(health_router)
    app.include_router(get_content_router())  # view recording
    app.include_router(get_admin_router())  # overview, daily history, manual jobs
