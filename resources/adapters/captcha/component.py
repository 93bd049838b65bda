"""Component identity for the bot-check (captcha) adapter."""

from __future__ import annotations

RESOURCE_COMPONENT_ID = "adapter_captcha"
