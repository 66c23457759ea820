"""
FastAPI application entry point.

REVSTORE - versioned revision store for strategy checklists
"""

import json
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..core.config import get_settings
from ..core.errors import AppError, database_error
from ..db.database import close_db, init_db
from .routes import revisions


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def _configure_logging() -> None:
    """Configure logging based on environment."""
    _settings = get_settings()

    if _settings.environment == "production":
        # Structured JSON logs for production (easier to aggregate/parse)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
        logging.root.handlers = [handler]
        logging.root.setLevel(logging.INFO)
    else:
        # Human-readable logs for development
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


_configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = get_settings()

    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    # Create tables in development; production uses Alembic migrations
    if settings.is_debug:
        try:
            await init_db()
            logger.info("Database: Connected and initialized")
        except SQLAlchemyError as e:
            logger.error(f"Database: Initialization failed - {e}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Append-only revision history and structural diffs for strategies",
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.is_debug else None,
        redoc_url="/api/v1/redoc" if settings.is_debug else None,
        openapi_url="/api/v1/openapi.json" if settings.is_debug else None,
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.internal_message:
            logger.warning(f"[{exc.code.value}] {exc.internal_message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        http_exc = database_error(exc, operation=f"{request.method} {request.url.path}")
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    cors_origins = settings.get_cors_origins()
    logger.info(f"CORS origins: {cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Requested-With"],
    )

    # ==================== API v1 Routes ====================
    app.include_router(revisions.router, prefix="/api/v1")
    app.include_router(revisions.diff_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
