"""
HRDesk API application.

Middleware order (outermost first): CORS -> CorrelationId -> Logging.
Every error, including framework 404s and validation failures, leaves as an
``ApiResponse`` envelope.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrdesk.core.config import settings
from hrdesk.core.exceptions import AppException
from hrdesk.core.limiter import limiter
from hrdesk.core.logging import setup_logging
from hrdesk.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from hrdesk.core.schemas import ApiResponse
from hrdesk.database import SessionLocal, init_db
from hrdesk.routers.api_router import api_router
from hrdesk.services.company_setup import seed_roles

setup_logging(settings.log_level, settings.environment)
logger = logging.getLogger(__name__)


def _envelope(status_code: int, message: str, code: str, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    body = ApiResponse.fail(message, code=code, details=details).to_dict()
    return JSONResponse(status_code=status_code, content=body)


async def on_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]) or "body", "msg": err["msg"]}
        for err in exc.errors()
    ]
    logger.warning("Rejected request body", extra={"path": request.url.path, "errors": errors})
    return _envelope(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid request", "INVALID_INPUT", {"errors": errors})


async def on_app_exception(request: Request, exc: AppException):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(exc.message, extra={"error_code": exc.error_code, "path": request.url.path})
    return _envelope(exc.status_code, exc.message, exc.error_code, exc.details)


async def on_http_exception(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _envelope(exc.status_code, message, "HTTP_ERROR")


async def on_unhandled(request: Request, exc: Exception):
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected server error occurred.", "INTERNAL_ERROR")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s (%s)", settings.app_name, settings.version, settings.environment)
    init_db()
    with SessionLocal() as db:
        seed_roles(db)
    logger.info("Schema ready, built-in roles seeded")
    yield
    logger.info("Shutting down")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Multi-tenant HR management API",
        lifespan=lifespan,
    )

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_exception_handler(RequestValidationError, on_validation_error)
    application.add_exception_handler(AppException, on_app_exception)
    application.add_exception_handler(StarletteHTTPException, on_http_exception)
    application.add_exception_handler(HTTPException, on_http_exception)
    application.add_exception_handler(Exception, on_unhandled)

    # Last added runs first
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.request_id_header, "X-Process-Time"],
    )

    application.include_router(api_router, prefix=settings.api_prefix)
    return application


app = create_app()


@app.get("/", tags=["Health"])
def root():
    return {"message": f"{settings.app_name} API", "version": settings.version, "docs": "/docs"}


@app.get("/health", tags=["Health"])
def health_check():
    """Liveness probe."""
    return {
        "status": "up",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
    }


@app.get("/readiness", tags=["Health"])
def readiness_check():
    """Readiness probe: the database must answer a trivial query."""
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Readiness check failed: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
    return {"status": "ready", "components": {"database": "connected"}}
