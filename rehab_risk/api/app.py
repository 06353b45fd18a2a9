"""FastAPI application for RehabRisk."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rehab_risk import __version__
from rehab_risk.api.middleware import APIKeyMiddleware, RequestLoggingMiddleware
from rehab_risk.api.routes import health, red_flags, risk, screening
from rehab_risk.config import get_settings
from rehab_risk.exceptions import (
    AlertNotFound,
    AssessmentNotFound,
    InvalidAlertTransition,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting RehabRisk API")

    from rehab_risk.core.database import dispose_engine, init_db

    await init_db()

    logger.info("RehabRisk API started successfully")

    yield

    logger.info("Shutting down RehabRisk API")
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="RehabRisk API",
        description="Clinical red-flag triage and patient risk stratification for rehabilitation",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)

    if settings.api_key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.api_key)

    app.include_router(health.router, tags=["health"])
    app.include_router(red_flags.router, prefix="/api/v1")
    app.include_router(screening.router, prefix="/api/v1")
    app.include_router(risk.router, prefix="/api/v1")

    # Exception handlers
    @app.exception_handler(AlertNotFound)
    @app.exception_handler(AssessmentNotFound)
    async def not_found_handler(request: Request, exc: Exception):
        return JSONResponse(status_code=404, content={"error": "Not found", "detail": str(exc)})

    @app.exception_handler(InvalidAlertTransition)
    async def invalid_transition_handler(request: Request, exc: InvalidAlertTransition):
        return JSONResponse(status_code=409, content={"error": "Conflict", "detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.debug_mode else None,
            },
        )

    return app
