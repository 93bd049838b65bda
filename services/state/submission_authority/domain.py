"""Domain contracts for Submission Authority Service payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, JsonValue

HistoryLabel = Literal["original", "edited"]
EditedBy = Literal["admin", "client", "unknown"]


class HistoryEntry(BaseModel):
    """One append-only ledger entry describing a write to a submission.

    Stored with snake_case keys. Dumped with ``by_alias=True`` it uses the
    wire names ``editedBy`` and ``adminEmail``; legacy rows keyed
    ``editedBy`` or ``date`` are still accepted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: HistoryLabel
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "date"))
    edited_by: EditedBy = Field(
        default="unknown",
        validation_alias=AliasChoices("edited_by", "editedBy"),
        serialization_alias="editedBy",
    )
    note: str | None = Field(default=None, max_length=200)
    admin_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("admin_email", "adminEmail"),
        serialization_alias="adminEmail",
    )


class SubmissionRecord(BaseModel):
    """Authoritative stored submission.

    ``history`` is never empty and always starts with an ``original`` entry.
    ``version`` increments on every write and guards conditional updates.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    fields: dict[str, JsonValue]
    history: tuple[HistoryEntry, ...]
    version: int = Field(ge=1)
    created_at: datetime
    updated_at: datetime
    edit_token: str | None = None
    edit_token_expires_at: datetime | None = None

    def public_view(self) -> dict[str, JsonValue]:
        """Return the flat record shown to clients and covered by continuations.

        Excludes the edit token, its expiry, the history ledger and the
        version counter.
        """
        view: dict[str, JsonValue] = {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
        }
        for name, value in self.fields.items():
            if name not in view:
                view[name] = value
        return view


class HealthStatus(BaseModel):
    """Submission Authority and database readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    store_ready: bool
    detail: str
