"""Pydantic settings for Quota Authority Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.intake_shared.config import IntakeSettings, resolve_component_settings
from services.state.quota_authority.component import SERVICE_COMPONENT_ID


class QuotaPolicySettings(BaseModel):
    """Request budget for one endpoint within one fixed window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_requests: int = Field(gt=0)
    window_seconds: int = Field(gt=0)


DEFAULT_POLICIES: dict[str, QuotaPolicySettings] = {
    "submit": QuotaPolicySettings(max_requests=5, window_seconds=600),
    "get-submission-by-token": QuotaPolicySettings(max_requests=30, window_seconds=60),
    "check-duplicate": QuotaPolicySettings(max_requests=20, window_seconds=60),
    "deliver": QuotaPolicySettings(max_requests=10, window_seconds=600),
    "admin-update": QuotaPolicySettings(max_requests=60, window_seconds=60),
}


class QuotaAuthoritySettings(BaseModel):
    """Quota Authority runtime behavior settings.

    ``policies`` entries are merged over the built-in defaults, so a config
    file only needs to name the endpoints it changes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: Literal["postgres", "redis", "memory"] = "postgres"
    policies: dict[str, QuotaPolicySettings] = Field(
        default_factory=lambda: dict(DEFAULT_POLICIES)
    )
    purge_probability: float = Field(default=0.01, ge=0.0, le=1.0)
    purge_horizon_seconds: int = Field(default=86_400, gt=0)
    fallback_max_entries: int = Field(default=5000, gt=0)
    max_identifier_length: int = Field(default=64, gt=0)
    key_prefix: str = "intake"

    @field_validator("policies", mode="before")
    @classmethod
    def _merge_default_policies(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        merged: dict[str, object] = dict(DEFAULT_POLICIES)
        merged.update(value)
        return merged

    @field_validator("key_prefix", mode="before")
    @classmethod
    def _validate_key_prefix(cls, value: object) -> object:
        """Reject blank prefixes used for Redis counter keys."""
        if isinstance(value, str):
            normalized = value.strip()
            if normalized == "":
                raise ValueError("key_prefix must be non-empty")
            return normalized
        return value


def resolve_quota_authority_settings(
    settings: IntakeSettings,
) -> QuotaAuthoritySettings:
    """Resolve settings from ``components.service.quota_authority``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=QuotaAuthoritySettings,
    )
