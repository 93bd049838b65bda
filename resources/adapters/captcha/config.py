"""Pydantic settings for the captcha adapter endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.intake_shared.config import IntakeSettings, resolve_component_settings
from resources.adapters.captcha.component import RESOURCE_COMPONENT_ID

# Cloudflare's documented always-pass secret for development sites.
TURNSTILE_TESTING_SECRET = "1x0000000000000000000000000000000AA"


class CaptchaAdapterSettings(BaseModel):
    """Verifier endpoint and timeout.

    The secret and the local-bypass switch are deployment identity and live
    under ``profile`` (``captcha_secret``, ``captcha_local_bypass``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = "https://challenges.cloudflare.com"
    verify_path: str = "/turnstile/v0/siteverify"
    timeout_seconds: float = Field(default=10.0, gt=0)


def resolve_captcha_adapter_settings(settings: IntakeSettings) -> CaptchaAdapterSettings:
    """Resolve adapter settings from ``components.adapter.captcha``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=CaptchaAdapterSettings,
    )
