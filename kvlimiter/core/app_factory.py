"""Application factory for the FastAPI service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from kvlimiter.api.routes import health_router, ratelimit_router
from kvlimiter.core.config import settings
from kvlimiter.core.exception_handlers import setup_exception_handlers
from kvlimiter.core.logging import configure_logging
from kvlimiter.core.middleware import request_id_middleware
from kvlimiter.core.rate_limit import close_rate_limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the remote store connection held by the cached limiter.
    await close_rate_limiter()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="KV Rate Limiter",
        description=(
            "Sliding window rate limiting with a minimum interval between "
            "requests, backed by Workers KV, Redis or process memory. "
            "Admin endpoints require X-API-Key."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(ratelimit_router, prefix="/v1")
    app.include_router(health_router)

    return app
