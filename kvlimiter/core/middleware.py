"""Request ID middleware.

Reuses the incoming correlation header (``X-Request-ID`` by default) or
generates a UUID, exposes it to log records through contextvars, and echoes
it on the response together with the request duration. Every request gets
one ``http.request`` log line; throttled requests are flagged so 429 spikes
can be found without parsing paths.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response, status

from kvlimiter.core.config import settings
from kvlimiter.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

DURATION_HEADER = "X-Request-Duration-ms"
MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(request: Request, header_name: str) -> str:
    """Return the caller's correlation id, or a fresh one if it is unusable."""

    candidate = request.headers.get(header_name, "").strip()
    if candidate and len(candidate) <= MAX_REQUEST_ID_LENGTH:
        return candidate
    return str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag the request with a correlation id and log how it went."""

    header_name = settings.log.request_id_header
    request_id = _incoming_request_id(request, header_name)

    set_request_id(request_id)
    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "rate_limited": response.status_code == status.HTTP_429_TOO_MANY_REQUESTS,
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers[DURATION_HEADER] = f"{elapsed_ms:.2f}"
    return response
