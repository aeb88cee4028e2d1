"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contactbook import __version__
from contactbook.categories.router import router as categories_router
from contactbook.categories.seeder import seed_reference_data
from contactbook.config import get_settings
from contactbook.contacts.router import router as contacts_router
from contactbook.shared.database import get_database_manager
from contactbook.shared.exceptions import (
    AppException,
    AuthenticationError,
    DuplicateEmailError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from contactbook.shared.logging import get_logger, setup_logging
from contactbook.shared.middleware import RequestIdMiddleware
from contactbook.shared.rate_limit import reset_rate_limiters

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again later."

_STATUS_BY_EXCEPTION: list[tuple[type[AppException], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateEmailError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
]


def _request_context(request: Request) -> dict[str, Any]:
    user = getattr(request.state, "user", None)
    return {
        "method": request.method,
        "path": request.url.path,
        "user": user.subject if user is not None else "anonymous",
        "client_ip": request.client.host if request.client else "unknown",
        "occurred_at": datetime.now(timezone.utc).isoformat(),
    }


def _status_for(exc: AppException) -> int:
    for exc_type, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    settings = get_settings()
    db_manager = get_database_manager()

    logger.info("Application starting", extra={"env": settings.app_env})

    if settings.database_auto_create:
        await db_manager.create_all()
        async with db_manager.session() as session:
            await seed_reference_data(session)

    yield

    logger.info("Shutting down application")
    reset_rate_limiters()
    await db_manager.close()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Contactbook API",
        description="Contact management with category taxonomy",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Map domain exceptions to HTTP responses
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        status_code = _status_for(exc)
        logger.warning(
            "Request rejected",
            extra={
                **_request_context(request),
                "code": exc.code,
                "status_code": status_code,
                "error": exc.message,
            },
        )

        detail: dict[str, Any] = {"code": exc.code, "message": exc.message}
        headers: dict[str, str] | None = None
        if isinstance(exc, ValidationError):
            detail["errors"] = exc.errors
        elif exc.details:
            detail["details"] = exc.details
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}
        elif isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}

        return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)

    # Request parsing (FastAPI/Pydantic) -> same 400 payload as validators
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
            field = ".".join(loc) or "request"
            errors.setdefault(field, []).append(error["msg"])

        logger.warning(
            "Request parsing failed",
            extra={**_request_context(request), "fields": sorted(errors)},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "errors": errors,
                }
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra=_request_context(request),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": {"code": "INTERNAL_ERROR", "message": INTERNAL_ERROR_MESSAGE}},
        )

    app.add_middleware(RequestIdMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Location", "Retry-After", "X-Request-ID"],
    )

    # Include routers
    app.include_router(contacts_router)
    app.include_router(categories_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()
