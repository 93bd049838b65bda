"""Component identity for Quota Authority Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_quota_authority"
