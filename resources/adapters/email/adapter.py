"""Transport-agnostic email adapter protocol and DTOs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class EmailAdapterError(Exception):
    """Base exception for email adapter failures."""


class EmailAdapterDependencyError(EmailAdapterError):
    """Dependency-level adapter failure (network/upstream unavailable)."""


class EmailAdapterInternalError(EmailAdapterError):
    """Internal adapter failure (invalid message or contract mismatch)."""


class EmailAttachment(BaseModel):
    """One file attached to an outbound email."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    filename: str = Field(min_length=1)
    content: bytes
    content_type: str = "application/octet-stream"


class OutboundEmail(BaseModel):
    """One outbound message; at least one of ``html``/``text`` is required."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    to: tuple[str, ...]
    subject: str
    html: str = ""
    text: str = ""
    reply_to: str = ""
    attachments: tuple[EmailAttachment, ...] = ()


class EmailSendResult(BaseModel):
    """Result payload for one send attempt."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    delivered: bool
    message_id: str = ""
    detail: str


class EmailAdapterHealthResult(BaseModel):
    """Readiness payload for email adapter dependencies."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    adapter_ready: bool
    detail: str


@runtime_checkable
class EmailAdapter(Protocol):
    """Protocol for sending transactional email."""

    def send(self, *, message: OutboundEmail) -> EmailSendResult:
        """Send one message; raise ``EmailAdapterError`` subclasses on failure."""

    def health(self) -> EmailAdapterHealthResult:
        """Return adapter health state."""
