"""Process-local quota counters used when the shared store is unavailable."""

from __future__ import annotations

from threading import Lock

from services.state.quota_authority.interfaces import QuotaStore


class InMemoryQuotaStore(QuotaStore):
    """Lock-guarded counters with the same window semantics as the shared store.

    Counts are per process, so with several instances the effective budget
    multiplies. Once the map grows past ``max_entries``, windows that have
    ended are dropped. The scan runs only after the earliest tracked window
    has ended, so a map full of live windows costs nothing extra per call.
    """

    def __init__(self, *, max_entries: int = 5000) -> None:
        self._max_entries = max_entries
        self._counts: dict[tuple[str, str, int], int] = {}
        self._window_ends: dict[tuple[str, str, int], int] = {}
        self._earliest_end: int | None = None
        self._lock = Lock()

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
        key = (endpoint, caller_id, window_start)
        window_end = window_start + window_milliseconds
        with self._lock:
            count = self._counts.get(key, 0) + 1
            self._counts[key] = count
            self._window_ends[key] = window_end
            if self._earliest_end is None or window_end < self._earliest_end:
                self._earliest_end = window_end
            if (
                len(self._counts) > self._max_entries
                and self._earliest_end <= now_ms
            ):
                self._prune_locked(now_ms=now_ms)
        return count > max_requests

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def _prune_locked(self, *, now_ms: int) -> None:
        expired = [key for key, end in self._window_ends.items() if end <= now_ms]
        for key in expired:
            del self._counts[key]
            del self._window_ends[key]
        self._earliest_end = min(self._window_ends.values(), default=None)
