"""Redis client-backed substrate implementation."""

from __future__ import annotations

from resources.substrates.redis.client import (
    create_redis_client,
    create_redis_client_with_timeouts,
)
from resources.substrates.redis.config import RedisSettings
from resources.substrates.redis.substrate import RedisHealthStatus, RedisSubstrate


class RedisClientSubstrate(RedisSubstrate):
    """Concrete Redis substrate using redis-py client operations."""

    def __init__(self, *, settings: RedisSettings) -> None:
        self._client = create_redis_client(settings)
        self._health_client = create_redis_client_with_timeouts(
            settings=settings,
            connect_timeout_seconds=settings.health_timeout_seconds,
            socket_timeout_seconds=settings.health_timeout_seconds,
        )

    def increment_window(self, *, key: str, ttl_milliseconds: int) -> int:
        """Run INCR and PEXPIRE in one MULTI/EXEC block and return the count."""
        if ttl_milliseconds <= 0:
            raise ValueError("ttl_milliseconds must be > 0")
        with self._client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.pexpire(key, ttl_milliseconds)
            count, _ = pipe.execute()
        return int(count)

    def ping(self) -> bool:
        """Return Redis ping status."""
        return bool(self._health_client.ping())

    def health(self) -> RedisHealthStatus:
        """Return Redis substrate readiness and concise detail."""
        try:
            ready = self.ping()
        except Exception as exc:  # noqa: BLE001
            return RedisHealthStatus(
                ready=False,
                detail=f"redis ping failed: {type(exc).__name__}",
            )
        return RedisHealthStatus(
            ready=ready,
            detail="ok" if ready else "redis ping returned false",
        )
