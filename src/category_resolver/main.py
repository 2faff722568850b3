"""
Resolver Service Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.

Design Goals
------------
- Deterministic startup (static class map loaded before the first request)
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from fastapi import FastAPI

from .config import settings
from .core.errors import (
    InvalidRequestError,
    contract_error_handler,
    unhandled_exception_handler,
)
from .api import (
    classify_routes,
    health_routes,
)
from .api.dependencies import get_class_map


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("resolver.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="category-resolver",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(InvalidRequestError, contract_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(classify_routes.router)

    # --------------------------------------------------------------
    # Startup Validation Hook
    # --------------------------------------------------------------

    @app.on_event("startup")
    async def _startup_validation() -> None:
        """
        Load the static class map now so a missing or malformed artifact
        fails the deploy instead of the first request.
        """
        logger.info("Starting category-resolver")

        class_map = get_class_map()

        logger.info(
            "Static class map ready: %d classes, walker depth %d",
            len(class_map),
            settings.walker_max_depth,
        )

    @app.on_event("shutdown")
    async def _shutdown_cleanup() -> None:
        logger.info("Shutting down category-resolver")

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
