"""Pydantic settings for the outbound email adapter."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.intake_shared.config import (
    IntakeSettings,
    resolve_component_settings,
    resolve_secret,
)
from resources.adapters.email.component import RESOURCE_COMPONENT_ID


class EmailAdapterSettings(BaseModel):
    """Provider endpoint, credentials and sender identity.

    A blank ``api_key`` is allowed: the adapter then skips sends with a
    warning instead of failing intake.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = "https://api.resend.com"
    api_key: str = ""
    api_key_env: str = ""
    from_address: str = "Intake <onboarding@resend.dev>"
    timeout_seconds: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def _resolve_api_key(self) -> "EmailAdapterSettings":
        api_key = resolve_secret(
            inline=self.api_key,
            env_name=self.api_key_env,
            setting="adapter.email.api_key",
        )
        object.__setattr__(self, "api_key", api_key)
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        return self

    @property
    def configured(self) -> bool:
        return self.api_key != ""


def resolve_email_adapter_settings(settings: IntakeSettings) -> EmailAdapterSettings:
    """Resolve adapter settings from ``components.adapter.email``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=EmailAdapterSettings,
    )
