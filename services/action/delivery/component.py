"""Component identity for Delivery Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_delivery"
