"""
Event Registration API - Main Application Entry Point

Accounts create events with finite seating; anyone signed in can register
for an event while seats remain and the event has not yet happened.
- Admission control with an atomic seat guard on insert
- Hourly background sweep of past events (cascading to registrations)
- Structured logging with request correlation
- Prometheus metrics
"""

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from event_registry.core.config import get_settings
from event_registry.core.exceptions import DomainError, InternalError
from event_registry.core.logging import setup_logging, get_logger
from event_registry.core.metrics import metrics_endpoint
from event_registry.api.router import api_router
from event_registry.api.middleware import RequestLoggingMiddleware
from event_registry.db.session import AsyncSessionLocal, engine
from event_registry.services.expiry_service import run_expiry_sweeper

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    sweeper = None
    if settings.EXPIRY_SWEEP_ENABLED:
        sweeper = asyncio.create_task(
            run_expiry_sweeper(AsyncSessionLocal, settings.EXPIRY_SWEEP_INTERVAL_SECONDS)
        )

    yield

    # The sweeper lives as long as the process
    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event registration API with capacity-checked admission",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database_error", error=str(exc))
    error = InternalError("internal server error")
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


# Routes
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
