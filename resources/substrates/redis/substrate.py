"""Transport-agnostic substrate contract for Redis-backed counters."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict


class RedisHealthStatus(BaseModel):
    """Redis substrate readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str


class RedisSubstrate(Protocol):
    """Protocol for atomic Redis counter operations."""

    def increment_window(self, *, key: str, ttl_milliseconds: int) -> int:
        """Atomically increment ``key``, refresh its expiry and return the count."""

    def ping(self) -> bool:
        """Return substrate liveness from Redis ``PING``."""

    def health(self) -> RedisHealthStatus:
        """Probe Redis substrate readiness and detail."""
