"""Request validation models for Submission Authority Service public API."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

from services.state.submission_authority.domain import EditedBy, HistoryEntry


def _canonical_uuid(value: str) -> str:
    """Require a UUID and return its canonical lowercase hyphenated form."""
    try:
        return str(UUID(value))
    except (TypeError, ValueError, AttributeError):
        raise ValueError("must be a UUID") from None


class _SubmissionIdRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    submission_id: str

    @field_validator("submission_id")
    @classmethod
    def _validate_submission_id(cls, value: str) -> str:
        return _canonical_uuid(value.strip())


class GetSubmissionRequest(_SubmissionIdRequest):
    """Validate one read-by-id request."""


class DeleteSubmissionRequest(_SubmissionIdRequest):
    """Validate one delete request."""


class EditTokenRequest(BaseModel):
    """Validate one read-by-edit-token request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    edit_token: str

    @field_validator("edit_token")
    @classmethod
    def _validate_edit_token(cls, value: str) -> str:
        return _canonical_uuid(value.strip())


class CreateSubmissionRequest(BaseModel):
    """Validate one create request; ``submission_id`` is generated when absent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    submission_id: str | None = None
    fields: dict[str, JsonValue]
    created_by: EditedBy
    issue_edit_token: bool = True

    @field_validator("submission_id")
    @classmethod
    def _validate_submission_id(cls, value: str | None) -> str | None:
        return None if value is None else _canonical_uuid(value.strip())


class ReviseSubmissionRequest(_SubmissionIdRequest):
    """Validate one revise request.

    ``fields`` is merged over the stored fields; ``edit_token`` makes the
    write conditional on that token and consumes it.
    """

    fields: dict[str, JsonValue]
    entry: HistoryEntry
    edit_token: str | None = None

    @field_validator("edit_token")
    @classmethod
    def _validate_edit_token(cls, value: str | None) -> str | None:
        return None if value is None else _canonical_uuid(value.strip())

    @field_validator("entry")
    @classmethod
    def _validate_entry(cls, value: HistoryEntry) -> HistoryEntry:
        if value.label != "edited":
            raise ValueError("revisions must append an 'edited' entry")
        return value


class FindDuplicateRequest(BaseModel):
    """Validate one duplicate-check request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    email: str = Field(min_length=1, max_length=254)
    brand_name: str = Field(min_length=1, max_length=120)

    @field_validator("email", "brand_name", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value
