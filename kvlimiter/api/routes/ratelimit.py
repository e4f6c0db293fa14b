from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from kvlimiter.core.auth import verify_api_key
from kvlimiter.core.rate_limit import (
    build_rate_limit_headers,
    enforce_rate_limit,
    get_rate_limiter,
)
from kvlimiter.limiter.base import RateLimitResult
from kvlimiter.schemas.ratelimit import PingResponse, RateLimitResponse

router = APIRouter(tags=["Rate limit"])


@router.get("/ping", response_model=PingResponse)
async def ping(
    result: Annotated[RateLimitResult | None, Depends(enforce_rate_limit)],
    response: Response,
) -> PingResponse:
    """Cheap endpoint guarded by the limiter.

    Each call consumes one request from the caller's budget; callers over
    the limit get a 429 from the dependency before this body runs.
    """
    if result is None:
        return PingResponse()

    response.headers.update(build_rate_limit_headers(result))
    return PingResponse(limit=result.limit, remaining=result.remaining)


@router.get(
    "/ratelimit/{key}",
    response_model=RateLimitResponse,
    dependencies=[Depends(verify_api_key)],
)
async def inspect_key(key: str) -> RateLimitResponse:
    """Show the current decision for ``key`` without consuming anything."""
    limiter = await get_rate_limiter()
    result = await limiter.inspect(key)
    return RateLimitResponse.from_result(result)


@router.post(
    "/ratelimit/{key}/consume",
    response_model=RateLimitResponse,
    dependencies=[Depends(verify_api_key)],
)
async def consume_key(key: str) -> RateLimitResponse:
    """Consume one request for ``key`` and return the decision.

    A rejection is reported in the body (``success: false``), not as 429:
    the caller of this endpoint is the one enforcing the limit.
    """
    limiter = await get_rate_limiter()
    result = await limiter.consume(key)
    return RateLimitResponse.from_result(result)
