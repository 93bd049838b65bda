"""Pydantic settings for Submission Engine Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from packages.intake_shared.config import IntakeSettings, resolve_component_settings
from packages.intake_shared.continuation import MAX_VALIDITY_SECONDS
from services.action.submission_engine.component import SERVICE_COMPONENT_ID


class SubmissionEngineSettings(BaseModel):
    """Mutation engine caps, override policy and continuation timing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_body_bytes: int = Field(default=65_536, gt=0)
    max_field_count: int = Field(default=64, gt=0)
    override_missing_target: Literal["insert", "reject"] = "insert"
    continuation_validity_seconds: float = Field(
        default=MAX_VALIDITY_SECONDS, gt=0, le=MAX_VALIDITY_SECONDS
    )
    continuation_max_future_skew_seconds: float = Field(default=5.0, ge=0)


class SubmissionEngineProfile(BaseModel):
    """Deployment values the engine reads from the root profile."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    site_url: str
    continuation_secret: str


def resolve_submission_engine_settings(
    settings: IntakeSettings,
) -> SubmissionEngineSettings:
    """Resolve settings from ``components.service.submission_engine``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=SubmissionEngineSettings,
    )


def resolve_submission_engine_profile(
    settings: IntakeSettings,
) -> SubmissionEngineProfile:
    """Resolve the public site URL and signing secret from the root profile."""
    return SubmissionEngineProfile(
        site_url=settings.profile.site_url,
        continuation_secret=settings.profile.continuation_secret,
    )
