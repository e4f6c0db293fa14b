"""Pydantic schemas for limiter responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from kvlimiter.limiter.base import RateLimitResult


class RateLimitResponse(BaseModel):
    """Decision returned by the consume and inspect endpoints."""

    success: bool = Field(
        ..., description="Whether the request is (or would be) admitted."
    )
    limit: int = Field(
        ..., ge=1, description="Configured maximum requests per window."
    )
    remaining: int = Field(
        ..., ge=0, description="Requests still admissible in the current window."
    )
    reset: int = Field(
        ...,
        ge=0,
        description="Seconds until the blocking gate(s) clear; 0 when admitted.",
    )

    @classmethod
    def from_result(cls, result: RateLimitResult) -> RateLimitResponse:
        return cls(**result.to_dict())


class PingResponse(BaseModel):
    """Body of the rate limited ping endpoint."""

    status: str = Field("ok", description="Always 'ok' when the request was admitted.")
    limit: int | None = Field(
        default=None, description="Configured limit (absent when limiting is disabled)."
    )
    remaining: int | None = Field(
        default=None, description="Requests left in the window after this one."
    )
