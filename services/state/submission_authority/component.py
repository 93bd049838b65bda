"""Component identity for Submission Authority Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_submission_authority"
