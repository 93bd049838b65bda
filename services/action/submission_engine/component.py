"""Component identity for Submission Engine Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_submission_engine"
