"""Authoritative in-process Python API for Submission Engine Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from pydantic import JsonValue

from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.continuation import ContinuationSigner
from packages.intake_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.captcha import CaptchaVerifier
from services.action.submission_engine.domain import (
    AdminIdentity,
    ClientContext,
    EditableSubmission,
    HealthStatus,
    MutationOutcome,
    SubmissionSummary,
)
from services.state.submission_authority.service import SubmissionAuthorityService


class SubmissionEngineService(ABC):
    """Public API resolving submission writes and admin operations."""

    @abstractmethod
    def submit(
        self,
        *,
        meta: EnvelopeMeta,
        body: Mapping[str, JsonValue],
        admin: AdminIdentity | None = None,
        client: ClientContext | None = None,
    ) -> Envelope[MutationOutcome]:
        """Apply one create, token edit or admin override from ``body``."""

    @abstractmethod
    def get_by_token(
        self, *, meta: EnvelopeMeta, token: str
    ) -> Envelope[EditableSubmission]:
        """Return the client-editable view for a valid, unexpired token."""

    @abstractmethod
    def check_duplicate(
        self, *, meta: EnvelopeMeta, email: str, brand_name: str
    ) -> Envelope[bool]:
        """Report whether this email and brand pair was already submitted."""

    @abstractmethod
    def list_submissions(
        self, *, meta: EnvelopeMeta, admin: AdminIdentity | None
    ) -> Envelope[list[SubmissionSummary]]:
        """List submissions newest first for an administrator."""

    @abstractmethod
    def delete_submission(
        self,
        *,
        meta: EnvelopeMeta,
        admin: AdminIdentity | None,
        submission_id: str,
    ) -> Envelope[bool]:
        """Delete one submission for an administrator."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return engine and dependency readiness."""


def build_submission_engine_service(
    *,
    settings: IntakeSettings,
    submission_service: SubmissionAuthorityService,
    signer: ContinuationSigner | None = None,
    captcha: CaptchaVerifier | None = None,
) -> SubmissionEngineService:
    """Build default Submission Engine implementation from typed settings."""
    from services.action.submission_engine.config import (
        resolve_submission_engine_profile,
        resolve_submission_engine_settings,
    )
    from services.action.submission_engine.implementation import (
        DefaultSubmissionEngineService,
    )

    engine_settings = resolve_submission_engine_settings(settings)
    profile = resolve_submission_engine_profile(settings)
    return DefaultSubmissionEngineService(
        settings=engine_settings,
        profile=profile,
        submission_service=submission_service,
        signer=signer
        or ContinuationSigner(
            secret=profile.continuation_secret,
            validity_seconds=engine_settings.continuation_validity_seconds,
            max_future_skew_seconds=engine_settings.continuation_max_future_skew_seconds,
        ),
        captcha=captcha,
    )
