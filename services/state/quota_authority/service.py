"""Authoritative in-process Python API for Quota Authority Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import PostgresSubstrate
from resources.substrates.redis import RedisSubstrate
from services.state.quota_authority.domain import HealthStatus, QuotaDecision


class QuotaAuthorityService(ABC):
    """Public API for per-caller, per-endpoint request budgets."""

    @abstractmethod
    def check_quota(
        self,
        *,
        meta: EnvelopeMeta,
        caller_id: str | None,
        endpoint: str,
    ) -> Envelope[QuotaDecision]:
        """Count one request for ``caller_id`` against ``endpoint``'s policy."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and counter store readiness."""


def build_quota_authority_service(
    *,
    settings: IntakeSettings,
    postgres: PostgresSubstrate | None = None,
    redis: RedisSubstrate | None = None,
) -> QuotaAuthorityService:
    """Build the default Quota Authority for the configured backend.

    Substrates are created from settings when not supplied. The ``memory``
    backend runs on the in-process store alone.
    """
    from services.state.quota_authority.config import resolve_quota_authority_settings
    from services.state.quota_authority.implementation import (
        DefaultQuotaAuthorityService,
    )
    from services.state.quota_authority.interfaces import QuotaStore

    service_settings = resolve_quota_authority_settings(settings)
    store: QuotaStore | None = None
    if service_settings.backend == "postgres":
        from resources.substrates.postgres import (
            SharedPostgresSubstrate,
            resolve_postgres_settings,
        )
        from services.state.quota_authority.data.repository import PostgresQuotaStore

        substrate = postgres or SharedPostgresSubstrate(
            settings=resolve_postgres_settings(settings)
        )
        store = PostgresQuotaStore(
            session_factory=substrate.session_factory,
            purge_probability=service_settings.purge_probability,
            purge_horizon_ms=service_settings.purge_horizon_seconds * 1000,
        )
    elif service_settings.backend == "redis":
        from resources.substrates.redis import (
            RedisClientSubstrate,
            resolve_redis_settings,
        )
        from services.state.quota_authority.redis_store import RedisQuotaStore

        store = RedisQuotaStore(
            backend=redis
            or RedisClientSubstrate(settings=resolve_redis_settings(settings)),
            key_prefix=service_settings.key_prefix,
        )

    return DefaultQuotaAuthorityService(settings=service_settings, store=store)
