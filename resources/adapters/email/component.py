"""Component identity for the outbound email adapter."""

from __future__ import annotations

RESOURCE_COMPONENT_ID = "adapter_email"
