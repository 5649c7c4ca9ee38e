"""FastAPI application entry point.

Store Rating API - users rate stores 1-5, owners and admins watch the numbers.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storerate.routes import api_router
from storerate.schemas import ErrorDetail, ErrorResponse
from storerate.services.errors import ServiceError
from storerate.settings import get_settings
from storerate.stores.postgres import Database, create_database

logger = logging.getLogger("uvicorn.error")

_VALUE_ERROR_PREFIX = "Value error, "


def _error_response(status_code: int, code: str, message: str, detail: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten FastAPI validation errors to [{field, message}]."""
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        fields.append({"field": ".".join(loc) or "body", "message": message})
    return fields


def create_app(database: Database | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        database: Pre-built storage handle. When omitted, one is created from
            settings at startup and disposed at shutdown.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager.

        Handles startup and shutdown events.
        """
        owns_db = getattr(app.state, "db", None) is None
        if owns_db:
            app.state.db = create_database(settings)

        try:
            await app.state.db.ping()
            logger.info("Database connected")
        except Exception:
            logger.exception("Database init failed")

        yield

        logger.info("Shutting down")
        if owns_db:
            await app.state.db.dispose()
            app.state.db = None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Role-based store rating API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.db = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """Expected domain failures (validation, not found, conflict, auth)."""
        return _error_response(exc.status_code, exc.code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed requests are 400 with field-level messages."""
        return _error_response(
            400,
            "VALIDATION_FAILED",
            "Validation failed",
            {"fields": _field_errors(exc)},
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(
            500,
            "INTERNAL_ERROR",
            str(exc) if settings.debug else "Internal server error",
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storerate.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
