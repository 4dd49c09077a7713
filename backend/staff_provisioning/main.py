"""Staff Provisioning API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ProvisioningError → {"error": message} JSON responses
    - CORS configured from settings (not hardcoded)
    - One shared httpx.AsyncClient per process, opened/closed by the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The app starts even without backend credentials: requests answer 500 and
      /health/ready answers 503 until they are set
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staff_provisioning import __version__
from staff_provisioning.api.error_handlers import register_error_handlers
from staff_provisioning.api.routes import health, staff
from staff_provisioning.config import get_settings
from staff_provisioning.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.http_client = httpx.AsyncClient()
    logger.info(
        "Staff provisioning API started",
        extra={"strict_role_mode": settings.strict_role_mode},
    )
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("Staff provisioning API shutting down")


app = FastAPI(
    title="Staff Provisioning API", version=__version__, lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(staff.router)

register_error_handlers(app)
