"""Orbit API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map OrbitError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - The DatabaseSessionManager lives on app.state, created in lifespan and
      disposed on shutdown; no module-level storage client

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
      (ADR: FastAPI 0.128)
    - Token service built eagerly at startup: a missing JWT_SECRET fails the
      boot instead of the first authenticated request
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orbit.api.dependencies import get_token_service
from orbit.api.error_handlers import register_error_handlers
from orbit.api.routes import auth, enrollment, health, lessons, progress
from orbit.config import get_settings
from orbit.infrastructure.database import DatabaseSessionManager
from orbit.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    get_token_service()
    app.state.db_manager = DatabaseSessionManager.from_url(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Orbit API started")
    yield
    logger.info("Orbit API shutting down")
    await app.state.db_manager.dispose()


app = FastAPI(title="Orbit API", version="1.0.0", lifespan=lifespan)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(progress.router)
app.include_router(enrollment.router)
app.include_router(lessons.router)

register_error_handlers(app)
