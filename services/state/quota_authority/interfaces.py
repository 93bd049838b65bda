"""Protocol interfaces used by Quota Authority Service."""

from __future__ import annotations

from typing import Protocol


class QuotaStore(Protocol):
    """Atomic per-window request counter."""

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
        """Count one request and return True when it exceeds ``max_requests``.

        Implementations must increment and read the count in one atomic
        step; a read-then-write sequence admits more than the budget under
        concurrency.
        """

    def ping(self) -> bool:
        """Return whether the store can currently serve requests."""
