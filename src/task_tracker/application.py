from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import TaskTrackerError
from .repositories import get_repository
from .routers import todos as todos_router
from .routers import users as users_router
from .schemas import HealthOut
from .security import get_password_hasher
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "Registration, login and user test utilities."},
    {"name": "todos", "description": "CRUD operations for per-user Todo items."},
]


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a fully wired application.

    The repository and password hasher are constructed once here and stored on
    app.state; handlers receive them through FastAPI dependencies.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Task Tracker",
        description="Multi-user task tracking API with email/password accounts.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.repository = get_repository(settings)
    app.state.password_hasher = get_password_hasher(settings)
    logger.info(
        "Using %s store, %s password scheme",
        settings.persistence_backend,
        settings.password_scheme,
    )

    # '*' cannot be combined with credentials, so it is passed as a regex instead
    allow_all = settings.cors_allow_origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all else settings.cors_allow_origins,
        allow_origin_regex=".*" if allow_all else None,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    @app.exception_handler(TaskTrackerError)
    async def task_tracker_error_handler(request: Request, exc: TaskTrackerError) -> JSONResponse:
        """Render domain errors as {"error": message} with the error's status code."""
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Bodies that are not JSON, or carry fields of the wrong type, are reported
        as a plain 400 in the same {"error": ...} shape as every other failure.
        """
        logger.debug("Request validation failed: %s", exc.errors())
        return _error(400, "Invalid request data")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    # PUBLIC_INTERFACE
    @app.get("/healthz", response_model=HealthOut, summary="Health Check", tags=["health"])
    def health_check() -> HealthOut:
        """
        Health check endpoint.

        Returns:
            A JSON object with the service status and the current UTC time.
        """
        return HealthOut(status="ok", timestamp=datetime.now(timezone.utc))

    app.include_router(users_router.router)
    app.include_router(todos_router.router)
    return app

