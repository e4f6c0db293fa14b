from __future__ import annotations

from kvlimiter.api.routes.health import router as health_router
from kvlimiter.api.routes.ratelimit import router as ratelimit_router

__all__ = ["health_router", "ratelimit_router"]
