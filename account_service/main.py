import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from account_service.auth.router import router as auth_router
from account_service.base_service import BaseService, Database
from account_service.config import Settings, get_settings
from account_service.errors import AppError
from account_service.users.router import router as users_router

VERSION = "0.1.0"

base_service = BaseService("main")


def _validation_errors(exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(err.get("msg", ""))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"path": ".".join(loc), "message": message, "code": err.get("type")})
    return errors


def register_exception_handlers(app: FastAPI):
    """Map every failure onto the standard response envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return base_service.error_response(exc.status_code, exc.message, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return base_service.error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            errors=_validation_errors(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return base_service.error_response(
                exc.status_code,
                "Route not found",
                error="The requested endpoint does not exist",
            )
        return base_service.error_response(
            exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        base_service.log_error(exc, context=f"{request.method} {request.url.path}")
        return base_service.error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
        )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration, loaded from the environment if omitted
        database: Database handle, created from ``settings.database_url`` if omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    database = database or Database(settings.database_url)
    base_service.logger.setLevel(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for FastAPI.
        Handles startup and shutdown events.
        """
        base_service.log_event("service.startup", {"environment": settings.environment})
        try:
            await database.create_all()
        except Exception as e:
            base_service.log_error(e, context="Database initialisation")
            raise
        yield
        await database.dispose()
        base_service.log_event("service.shutdown", {"environment": settings.environment})

    app = FastAPI(
        title="Account Service API",
        description="User accounts with JWT authentication",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(users_router, prefix="/users", tags=["users"])

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint returning API information."""
        return base_service.api_response(
            message="Account Service API",
            data={"name": "Account Service API", "version": VERSION, "services": ["auth", "users"]},
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness check."""
        return base_service.api_response(message="OK", data={"status": "ok"})

    @app.get("/health-check", tags=["health"])
    async def readiness_check(request: Request):
        """Readiness check including database connectivity."""
        connected = await database.ping()
        health = {
            "status": "healthy" if connected else "unhealthy",
            "database": "connected" if connected else "disconnected",
            "uptime": int(time.monotonic() - request.app.state.started_at),
            "environment": settings.environment,
        }
        return base_service.api_response(
            message=f"Server is {health['status']}",
            data=health,
            success=connected,
            status_code=status.HTTP_200_OK if connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return app


app = create_app()
