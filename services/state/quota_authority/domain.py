"""Domain contracts for Quota Authority Service payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class QuotaPolicy(BaseModel):
    """Maximum admitted requests per fixed window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_requests: int = Field(gt=0)
    window_milliseconds: int = Field(gt=0)


class QuotaDecision(BaseModel):
    """Outcome of counting one request against its window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    limited: bool
    caller_id: str
    endpoint: str
    window_start: int
    backend: Literal["shared", "fallback"]


class HealthStatus(BaseModel):
    """Quota Authority and counter store readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    backend: str
    detail: str
