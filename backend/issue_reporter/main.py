"""
Citizen Issue Reporter - Main Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from issue_reporter.bootstrap import seed_admin
from issue_reporter.core.access import HOME_PATH, AccessDeniedError
from issue_reporter.core.config import settings
from issue_reporter.core.database import close_db, init_db
from issue_reporter.api.v1.router import api_router
from issue_reporter.core.logging import RequestContextMiddleware, setup_logging
from issue_reporter.core.metrics import MetricsMiddleware
from issue_reporter.core.rate_limiter import RateLimitMiddleware, _rate_limit_handler, limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown."""
    # Startup
    setup_logging()
    await init_db()
    await seed_admin()
    logger.info("Issue reporter started (%s)", settings.ENVIRONMENT)
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title="Citizen Issue Reporter",
    description="Geotagged civic issue reporting, triage and analytics",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.state.limiter = limiter

# Middleware (last added runs first)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    """Render authorization failures as an access-denied body with a way home."""
    logger.info("Access denied to %s (%s)", request.url.path, exc.target)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": "access_denied", "home": HOME_PATH},
        headers=exc.headers,
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    """Store failures surface as a retryable error; nothing was committed."""
    logger.error("Issue store error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Issue store unavailable"},
    )


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

# Mount Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "citizen-issue-reporter"}


@app.get("/")
async def root():
    """Root endpoint with system information."""
    return {
        "service": "Citizen Issue Reporter",
        "version": "1.0.0",
        "docs": "/api/docs",
        "health": "/health",
        "metrics": "/metrics",
    }
