"""Postgres-backed quota counters using a single atomic upsert."""

from __future__ import annotations

import random
from typing import Callable

from sqlalchemy import delete, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker

from packages.intake_shared.logging import get_logger
from resources.substrates.postgres import transactional_session
from services.state.quota_authority.interfaces import QuotaStore

from .schema import rate_limits

_LOGGER = get_logger(__name__)


class PostgresQuotaStore(QuotaStore):
    """Counter rows keyed by ``(caller_id, endpoint, window_start)``.

    Stale windows are purged opportunistically: roughly one call in
    ``1 / purge_probability`` deletes rows older than the horizon.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session],
        purge_probability: float = 0.01,
        purge_horizon_ms: int = 86_400_000,
        random_source: Callable[[], float] = random.random,
    ) -> None:
        self._session_factory = session_factory
        self._purge_probability = purge_probability
        self._purge_horizon_ms = purge_horizon_ms
        self._random = random_source

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
        """Upsert-increment the window row and compare the returned count."""
        del window_milliseconds
        with transactional_session(self._session_factory) as session:
            insert = _dialect_insert(session)
            stmt = insert(rate_limits).values(
                caller_id=caller_id,
                endpoint=endpoint,
                window_start=window_start,
                count=1,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[
                    rate_limits.c.caller_id,
                    rate_limits.c.endpoint,
                    rate_limits.c.window_start,
                ],
                set_={"count": rate_limits.c.count + 1},
            ).returning(rate_limits.c.count)
            count = int(session.execute(stmt).scalar_one())

        if self._random() < self._purge_probability:
            self._purge(now_ms=now_ms)
        return count > max_requests

    def ping(self) -> bool:
        with transactional_session(self._session_factory) as session:
            session.execute(text("SELECT 1"))
        return True

    def purge_expired(self, *, now_ms: int) -> int:
        """Delete rows for windows older than the purge horizon."""
        cutoff = now_ms - self._purge_horizon_ms
        with transactional_session(self._session_factory) as session:
            result = session.execute(
                delete(rate_limits).where(rate_limits.c.window_start < cutoff)
            )
            return int(result.rowcount or 0)

    def _purge(self, *, now_ms: int) -> None:
        try:
            removed = self.purge_expired(now_ms=now_ms)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "rate limit purge failed: exception_type=%s",
                type(exc).__name__,
                exc_info=exc,
            )
            return
        _LOGGER.debug("rate limit purge removed %d rows", removed)


def _dialect_insert(session: Session):
    """Return the dialect-specific ``insert`` supporting ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise ValueError(f"unsupported dialect for quota upsert: {dialect}")
