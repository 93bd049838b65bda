"""Quota Authority Service native package exports."""

from services.state.quota_authority.component import SERVICE_COMPONENT_ID
from services.state.quota_authority.config import (
    DEFAULT_POLICIES,
    QuotaAuthoritySettings,
    QuotaPolicySettings,
)
from services.state.quota_authority.domain import (
    HealthStatus,
    QuotaDecision,
    QuotaPolicy,
)
from services.state.quota_authority.implementation import DefaultQuotaAuthorityService
from services.state.quota_authority.service import (
    QuotaAuthorityService,
    build_quota_authority_service,
)

__all__ = [
    "DEFAULT_POLICIES",
    "SERVICE_COMPONENT_ID",
    "DefaultQuotaAuthorityService",
    "HealthStatus",
    "QuotaAuthorityService",
    "QuotaAuthoritySettings",
    "QuotaDecision",
    "QuotaPolicy",
    "QuotaPolicySettings",
    "build_quota_authority_service",
]
