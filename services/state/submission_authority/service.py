"""Authoritative in-process Python API for Submission Authority Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import JsonValue

from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.envelope import Envelope, EnvelopeMeta
from resources.substrates.postgres import PostgresSubstrate
from services.state.submission_authority.domain import (
    EditedBy,
    HealthStatus,
    HistoryEntry,
    SubmissionRecord,
)


class SubmissionAuthorityService(ABC):
    """Public API for stored submissions and their history ledger."""

    @abstractmethod
    def create_submission(
        self,
        *,
        meta: EnvelopeMeta,
        fields: dict[str, JsonValue],
        created_by: EditedBy,
        submission_id: str | None = None,
        issue_edit_token: bool = True,
    ) -> Envelope[SubmissionRecord]:
        """Insert a new submission with an ``original`` history entry."""

    @abstractmethod
    def get_submission(
        self, *, meta: EnvelopeMeta, submission_id: str
    ) -> Envelope[SubmissionRecord | None]:
        """Read one submission by id; missing yields a ``None`` payload."""

    @abstractmethod
    def get_submission_by_edit_token(
        self, *, meta: EnvelopeMeta, edit_token: str
    ) -> Envelope[SubmissionRecord | None]:
        """Read the submission holding ``edit_token``; missing yields ``None``."""

    @abstractmethod
    def revise_submission(
        self,
        *,
        meta: EnvelopeMeta,
        submission_id: str,
        fields: dict[str, JsonValue],
        entry: HistoryEntry,
        edit_token: str | None = None,
    ) -> Envelope[SubmissionRecord]:
        """Merge ``fields`` and append ``entry`` in one conditional write."""

    @abstractmethod
    def find_duplicate(
        self, *, meta: EnvelopeMeta, email: str, brand_name: str
    ) -> Envelope[bool]:
        """Case-insensitively match an existing email and brand pair."""

    @abstractmethod
    def list_submissions(
        self, *, meta: EnvelopeMeta
    ) -> Envelope[list[SubmissionRecord]]:
        """List submissions newest first."""

    @abstractmethod
    def delete_submission(
        self, *, meta: EnvelopeMeta, submission_id: str
    ) -> Envelope[bool]:
        """Delete one submission and report whether it existed."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and database readiness."""


def build_submission_authority_service(
    *,
    settings: IntakeSettings,
    postgres: PostgresSubstrate | None = None,
) -> SubmissionAuthorityService:
    """Build default Submission Authority implementation from typed settings."""
    from resources.substrates.postgres import (
        SharedPostgresSubstrate,
        resolve_postgres_settings,
    )
    from services.state.submission_authority.config import (
        resolve_submission_authority_settings,
    )
    from services.state.submission_authority.data.repository import (
        PostgresSubmissionRepository,
    )
    from services.state.submission_authority.implementation import (
        DefaultSubmissionAuthorityService,
    )

    substrate = postgres or SharedPostgresSubstrate(
        settings=resolve_postgres_settings(settings)
    )
    return DefaultSubmissionAuthorityService(
        settings=resolve_submission_authority_settings(settings),
        repository=PostgresSubmissionRepository(
            session_factory=substrate.session_factory
        ),
    )
