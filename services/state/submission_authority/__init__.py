"""Submission Authority Service native package exports."""

from services.state.submission_authority.component import SERVICE_COMPONENT_ID
from services.state.submission_authority.config import SubmissionAuthoritySettings
from services.state.submission_authority.domain import (
    EditedBy,
    HealthStatus,
    HistoryEntry,
    SubmissionRecord,
)
from services.state.submission_authority.implementation import (
    DefaultSubmissionAuthorityService,
)
from services.state.submission_authority.service import (
    SubmissionAuthorityService,
    build_submission_authority_service,
)

__all__ = [
    "SERVICE_COMPONENT_ID",
    "DefaultSubmissionAuthorityService",
    "EditedBy",
    "HealthStatus",
    "HistoryEntry",
    "SubmissionAuthorityService",
    "SubmissionAuthoritySettings",
    "SubmissionRecord",
    "build_submission_authority_service",
]
