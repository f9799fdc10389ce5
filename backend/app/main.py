"""
FastAPI Application Entry Point.

This is the main application file for the SwiftCourier shipment backend.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.core.config import settings
from backend.app.api.v1.router import router as api_v1_router
from backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from backend.app.core.observability import ObservabilityMiddleware, configure_logging, logger
from backend.app.core.redis_client import close_redis, ping_redis
from backend.app.db.state import ShippingState, build_state, get_state
from backend.app.services.seed import seed_demo_data, seed_users


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Logs the shape of the in-memory state on startup.
    2. Closes every open realtime stream and the Redis pool on shutdown.
    """
    state: ShippingState = app.state.shipping
    logger.info("Starting %s with %s", settings.app_name, state.store.counts())
    yield
    closed = state.gateways.close_all()
    if closed:
        logger.info("Closed %d realtime stream(s) on shutdown", closed)
    await close_redis()


def create_app(state: Optional[ShippingState] = None) -> FastAPI:
    """
    Build the application around ``state``.

    Without a state a fresh one is built, holding the demo accounts and,
    when ``seed_demo_data`` is enabled, the demo catalogue and packages.
    """
    configure_logging(settings.log_level)

    if state is None:
        state = build_state(settings)
        if settings.seed_demo_data:
            seed_demo_data(state)
        else:
            seed_users(state)

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        debug=settings.debug,
        description="Shipment tracking backend with a realtime admin stream",
        lifespan=lifespan,
    )
    app.state.shipping = state

    # Register global exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(ObservabilityMiddleware)

    @app.get("/health", tags=["Health"])
    async def health_check(state: ShippingState = Depends(get_state)):
        """
        Health check endpoint.

        Returns:
            dict: Status, application information, open stream count and Redis reachability
        """
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.api_version,
            "realtime_streams": len(state.gateways),
            "redis": "ok" if await ping_redis() else "unavailable",
        }

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint.

        Returns:
            dict: Welcome message and API documentation links
        """
        return {
            "message": "Welcome to the SwiftCourier API",
            "docs": "/docs",
            "health": "/health",
        }

    # Include API v1 router
    app.include_router(api_v1_router, prefix=f"/{settings.api_version}")

    return app


app = create_app()
