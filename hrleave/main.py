"""
HR Leave Service - FastAPI Application

- /docs and /openapi.json at root level, API prefix only for routers
- Middleware order: CORS -> CorrelationId -> Logging
- Database handle built here (or injected) and owned by the app lifespan
- Uniform {"success": false, "errors": [...]} error payloads
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from hrleave.core.config import settings
from hrleave.core.exceptions import AppException
from hrleave.core.limiter import limiter
from hrleave.core.logging import setup_logging
from hrleave.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from hrleave.database import Database
from hrleave.routers.api_router import api_router
from hrleave.services.leave_quota import LeaveQuotaService

logger = logging.getLogger(__name__)


def init_system_data(database: Database):
    """Create the schema and seed default leave quotas on an empty database."""
    database.create_all()
    if not settings.seed_quota_defaults:
        return
    with database.session() as db:
        created = LeaveQuotaService(db).seed_defaults()
    if created:
        logger.info(f"Seeded {created} leave quota settings")


def _register_exception_handlers(app: FastAPI):

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle FastAPI validation errors (422) with structured format."""
        errors = []
        for error in exc.errors():
            # loc is usually ('body', 'field_name')
            field = error["loc"][-1] if len(error["loc"]) > 0 else "unknown"
            errors.append({
                "field": str(field),
                "msg": error["msg"]
            })

        logger.warning(f"Validation Error: {errors}")
        return JSONResponse(
            status_code=422,
            content={"success": False, "errors": errors}
        )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle domain-specific application exceptions."""
        logger.warning(f"AppException: {exc.message}", extra={"code": exc.error_code})
        error = {"msg": exc.message, "code": exc.error_code}
        if exc.details:
            error["details"] = exc.details
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "errors": [error]}
        )

    @app.exception_handler(StarletteHTTPException)
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
        """Handle standard HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "errors": [{"msg": exc.detail if isinstance(exc.detail, str) else "Request failed"}]
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Fallback handler for unhandled server errors."""
        logger.exception("Unhandled server error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "errors": [{"msg": "An unexpected server error occurred."}]
            }
        )


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    `database` lets callers (tests, scripts) inject a pre-built handle;
    otherwise one is created from settings.database_url.
    """
    setup_logging(settings.log_level)
    db_handle = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
        try:
            init_system_data(app.state.database)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

        yield

        logger.info("Gracefully shutting down...")
        if database is None:
            app.state.database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="HR leave management: balances, quota policy and year-end rollover",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = db_handle

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Middleware (last added runs first)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.request_id_header, "X-Process-Time"],
    )

    _register_exception_handlers(app)

    # API prefix applied ONLY to routers, not to docs
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", tags=["Health"])
    def root():
        """API root endpoint."""
        return {
            "message": "HR Leave Service API",
            "version": settings.version,
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness probe for load balancers and orchestrators."""
        return {
            "status": "up",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.version,
            "environment": settings.environment,
        }

    @app.get("/readiness", tags=["Health"])
    def readiness_check():
        """Readiness probe - verifies database connectivity."""
        try:
            with app.state.database.session() as session:
                session.execute(text("SELECT 1"))
            return {
                "status": "ready",
                "components": {"database": "connected"},
            }
        except Exception as e:
            logger.error(f"Readiness check failed: {e}")
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")

    @app.get("/liveness", tags=["Health"])
    def liveness_check():
        """Alias for health check."""
        return health_check()

    return app


app = create_app()
