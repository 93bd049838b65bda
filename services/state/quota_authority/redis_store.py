"""Redis-backed quota counters with per-window key expiry."""

from __future__ import annotations

from resources.substrates.redis import RedisSubstrate
from services.state.quota_authority.interfaces import QuotaStore

_EXPIRY_MARGIN_MS = 1000


class RedisQuotaStore(QuotaStore):
    """One Redis counter per ``(endpoint, caller, window)``; expiry replaces purging."""

    def __init__(self, *, backend: RedisSubstrate, key_prefix: str) -> None:
        self._backend = backend
        self._key_prefix = key_prefix

    def check_and_increment(
        self,
        *,
        caller_id: str,
        endpoint: str,
        window_start: int,
        window_milliseconds: int,
        max_requests: int,
        now_ms: int,
    ) -> bool:
        remaining = window_start + window_milliseconds - now_ms
        count = self._backend.increment_window(
            key=quota_key(
                key_prefix=self._key_prefix,
                endpoint=endpoint,
                caller_id=caller_id,
                window_start=window_start,
            ),
            ttl_milliseconds=max(1, remaining) + _EXPIRY_MARGIN_MS,
        )
        return count > max_requests

    def ping(self) -> bool:
        return self._backend.ping()


def quota_key(
    *, key_prefix: str, endpoint: str, caller_id: str, window_start: int
) -> str:
    """Compose canonical Redis key for one counter window."""
    return f"{key_prefix}:quota:{endpoint}:{caller_id}:{window_start}"
