import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Setup logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("account_service")

Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    """
    Lifecycle-managed database handle.

    Owns the async engine and session factory. Created once at startup and
    passed explicitly to whatever needs storage; nothing reaches for a
    module-level engine.
    """
    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, future=True)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self):
        """Create any missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    async def dispose(self):
        await self.engine.dispose()


class ApiResponse(JSONResponse):
    """
    Standard response envelope for all API endpoints:
    {"success": bool, "message": str, "data"?: any, "error"?: str}
    """
    def __init__(
        self,
        data: Any = None,
        message: str = "success",
        success: bool = True,
        error: Optional[str] = None,
        status_code: int = 200,
        extra: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        content: Dict[str, Any] = {"success": success, "message": message}
        if data is not None:
            content["data"] = jsonable_encoder(data, by_alias=True)
        if error:
            content["error"] = error
        if extra:
            content.update(jsonable_encoder(extra))
        super().__init__(content=content, status_code=status_code, **kwargs)


class BaseService:
    """
    Base class shared by the routers. Provides:
    - Error/event logging
    - Standard API response envelope
    """
    def __init__(self, service_name: str = "core"):
        self.service_name = service_name
        self.logger = logger

    def api_response(
        self,
        data: Any = None,
        message: str = "success",
        success: bool = True,
        status_code: int = 200,
    ) -> ApiResponse:
        """
        Return a standard API response.
        """
        return ApiResponse(data=data, message=message, success=success, status_code=status_code)

    def error_response(
        self,
        status_code: int,
        message: str,
        error: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **extra: Any,
    ) -> ApiResponse:
        return ApiResponse(
            message=message,
            success=False,
            error=error,
            status_code=status_code,
            headers=headers,
            extra=extra,
        )

    def log_event(self, event: str, details: Dict[str, Any] = None):
        self.logger.info(f"EVENT: {event} | Service: {self.service_name} | Details: {details}")

    def log_error(self, error: Exception, context: str = ""):
        self.logger.error(
            f"ERROR: {error.__class__.__name__}: {error} | Service: {self.service_name} | Context: {context}",
            exc_info=error,
        )
