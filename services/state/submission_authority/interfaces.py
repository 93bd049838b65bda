"""Protocol interfaces used by Submission Authority Service."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pydantic import JsonValue

from services.state.submission_authority.domain import HistoryEntry, SubmissionRecord


class SubmissionRepository(Protocol):
    """Protocol for authoritative submission persistence."""

    def get_submission(self, *, submission_id: str) -> SubmissionRecord | None:
        """Read one submission by id."""

    def get_by_edit_token(self, *, edit_token: str) -> SubmissionRecord | None:
        """Read the submission currently holding ``edit_token``."""

    def insert_submission(self, *, record: SubmissionRecord) -> SubmissionRecord:
        """Insert one new submission; duplicate ids raise."""

    def update_submission(
        self,
        *,
        submission_id: str,
        expected_version: int,
        fields: dict[str, JsonValue],
        history: tuple[HistoryEntry, ...],
        updated_at: datetime,
        expected_edit_token: str | None = None,
    ) -> SubmissionRecord | None:
        """Conditionally replace fields and history in one statement.

        The write applies only while the row still has ``expected_version``
        (and ``expected_edit_token`` when given, which is then cleared).
        Returns ``None`` when the condition no longer holds.
        """

    def find_duplicate(self, *, email_key: str, brand_key: str) -> bool:
        """Return whether a submission with both keys exists."""

    def list_submissions(self, *, limit: int) -> list[SubmissionRecord]:
        """Return submissions newest first."""

    def delete_submission(self, *, submission_id: str) -> bool:
        """Delete one submission and return whether it existed."""

    def ping(self) -> bool:
        """Return whether the store can serve queries."""
