"""Domain contracts for Submission Engine Service payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from packages.intake_shared.continuation import Continuation
from services.state.submission_authority.domain import HistoryEntry


class MutationPath(str, Enum):
    """Write path selected from a submission body's control fields."""

    CREATE = "create"
    TOKEN_EDIT = "token_edit"
    ADMIN_OVERRIDE = "admin_override"


class AdminIdentity(BaseModel):
    """Caller already resolved and authorized as an administrator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    email: str
    roles: tuple[str, ...] = ()


class ClientContext(BaseModel):
    """Request facts the HTTP edge knows about the submitting client.

    ``country`` is already in display form (``"France (FR)"``).
    ``local_request`` marks a request from a localhost origin.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    country: str = ""
    remote_ip: str = ""
    local_request: bool = False


class ContinuationGrant(BaseModel):
    """Signed handoff the client relays to the delivery endpoint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: int
    token: str
    link_payload: str = ""

    @classmethod
    def from_continuation(cls, continuation: Continuation) -> "ContinuationGrant":
        return cls(
            timestamp=continuation.timestamp,
            token=continuation.token,
            link_payload=continuation.link_payload,
        )


class MutationOutcome(BaseModel):
    """Result of one accepted submission write.

    ``record`` is the public view (no edit token, expiry, history or
    version). ``discarded`` marks a honeypot hit that was acknowledged
    without any write. ``created`` is true whenever a new row was inserted,
    including an admin override that fell through to an insert.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: MutationPath
    record: dict[str, JsonValue] | None = None
    continuation: ContinuationGrant | None = None
    created: bool = False
    discarded: bool = False
    lang: str = "en"


class EditableSubmission(BaseModel):
    """Client-editable view returned for a valid edit token."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    fields: dict[str, JsonValue]


class SubmissionSummary(BaseModel):
    """Admin listing row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    created_at: datetime
    updated_at: datetime
    history: tuple[HistoryEntry, ...]
    fields: dict[str, JsonValue]


class HealthStatus(BaseModel):
    """Submission Engine and downstream readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    submission_store_ready: bool
    continuation_ready: bool
    detail: str = Field(default="ok")
