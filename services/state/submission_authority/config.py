"""Pydantic settings for Submission Authority Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.intake_shared.config import IntakeSettings, resolve_component_settings
from services.state.submission_authority.component import SERVICE_COMPONENT_ID


class SubmissionAuthoritySettings(BaseModel):
    """Submission Authority runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    edit_token_ttl_days: int = Field(default=30, gt=0)
    max_write_attempts: int = Field(default=3, ge=1, le=10)
    list_limit: int = Field(default=500, gt=0)


def resolve_submission_authority_settings(
    settings: IntakeSettings,
) -> SubmissionAuthoritySettings:
    """Resolve settings from ``components.service.submission_authority``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=SubmissionAuthoritySettings,
    )
