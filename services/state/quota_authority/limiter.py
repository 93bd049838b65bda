"""Fixed-window rate limiter over a shared store with local fallback."""

from __future__ import annotations

import time
from typing import Callable

from packages.intake_shared.logging import get_logger
from services.state.quota_authority.domain import QuotaDecision, QuotaPolicy
from services.state.quota_authority.fallback import InMemoryQuotaStore
from services.state.quota_authority.interfaces import QuotaStore

_LOGGER = get_logger(__name__)
UNKNOWN_IDENTIFIER = "unknown"


def current_time_ms() -> int:
    return int(time.time() * 1000)


def window_start_for(now_ms: int, window_milliseconds: int) -> int:
    """Return the start of the fixed window containing ``now_ms``."""
    return now_ms // window_milliseconds * window_milliseconds


def normalize_identifier(value: str | None, *, max_length: int = 64) -> str:
    """Trim and truncate a caller or endpoint id; blanks become ``unknown``."""
    if value is None:
        return UNKNOWN_IDENTIFIER
    normalized = str(value).strip()[:max_length]
    return normalized or UNKNOWN_IDENTIFIER


class FixedWindowRateLimiter:
    """Count requests per ``(caller, endpoint, window)``.

    The shared store is authoritative. When it is absent or raises, the
    process-local fallback answers instead and a warning is logged, so an
    outage degrades to per-instance limiting rather than rejecting traffic.
    Requests straddling a window boundary can briefly reach twice the
    nominal rate.
    """

    def __init__(
        self,
        *,
        shared: QuotaStore | None,
        fallback: InMemoryQuotaStore,
        max_identifier_length: int = 64,
        clock_ms: Callable[[], int] = current_time_ms,
    ) -> None:
        self._shared = shared
        self._fallback = fallback
        self._max_identifier_length = max_identifier_length
        self._clock_ms = clock_ms

    def is_limited(
        self, *, caller_id: str | None, endpoint: str | None, policy: QuotaPolicy
    ) -> QuotaDecision:
        caller = normalize_identifier(caller_id, max_length=self._max_identifier_length)
        name = normalize_identifier(endpoint, max_length=self._max_identifier_length)
        now_ms = self._clock_ms()
        window_start = window_start_for(now_ms, policy.window_milliseconds)
        arguments = {
            "caller_id": caller,
            "endpoint": name,
            "window_start": window_start,
            "window_milliseconds": policy.window_milliseconds,
            "max_requests": policy.max_requests,
            "now_ms": now_ms,
        }

        if self._shared is not None:
            try:
                limited = self._shared.check_and_increment(**arguments)
            except Exception as exc:  # noqa: BLE001
                _LOGGER.warning(
                    "shared quota store failed; using in-process fallback: "
                    "endpoint=%s exception_type=%s",
                    name,
                    type(exc).__name__,
                    exc_info=exc,
                )
            else:
                return QuotaDecision(
                    limited=limited,
                    caller_id=caller,
                    endpoint=name,
                    window_start=window_start,
                    backend="shared",
                )
        else:
            _LOGGER.warning(
                "no shared quota store configured; using in-process fallback: "
                "endpoint=%s",
                name,
            )

        return QuotaDecision(
            limited=self._fallback.check_and_increment(**arguments),
            caller_id=caller,
            endpoint=name,
            window_start=window_start,
            backend="fallback",
        )
