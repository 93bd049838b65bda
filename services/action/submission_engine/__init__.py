"""Submission Engine Service native package exports."""

from services.action.submission_engine.component import SERVICE_COMPONENT_ID
from services.action.submission_engine.config import (
    SubmissionEngineProfile,
    SubmissionEngineSettings,
)
from services.action.submission_engine.domain import (
    AdminIdentity,
    ClientContext,
    ContinuationGrant,
    EditableSubmission,
    HealthStatus,
    MutationOutcome,
    MutationPath,
    SubmissionSummary,
)
from services.action.submission_engine.implementation import (
    DefaultSubmissionEngineService,
)
from services.action.submission_engine.service import (
    SubmissionEngineService,
    build_submission_engine_service,
)

__all__ = [
    "SERVICE_COMPONENT_ID",
    "AdminIdentity",
    "ClientContext",
    "ContinuationGrant",
    "DefaultSubmissionEngineService",
    "EditableSubmission",
    "HealthStatus",
    "MutationOutcome",
    "MutationPath",
    "SubmissionEngineProfile",
    "SubmissionEngineService",
    "SubmissionEngineSettings",
    "SubmissionSummary",
    "build_submission_engine_service",
]
