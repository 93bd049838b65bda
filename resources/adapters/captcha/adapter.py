"""Transport-agnostic captcha verifier protocol and DTOs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class CaptchaAdapterError(Exception):
    """Base exception for captcha adapter failures."""


class CaptchaAdapterDependencyError(CaptchaAdapterError):
    """Verifier unreachable or answered with something other than a verdict."""


class CaptchaAdapterInternalError(CaptchaAdapterError):
    """Adapter used without a secret or with an invalid request."""


class CaptchaVerdict(BaseModel):
    """Verifier answer for one client token."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool
    error_codes: tuple[str, ...] = ()


@runtime_checkable
class CaptchaVerifier(Protocol):
    """Protocol for checking a client-side bot-check token."""

    @property
    def enabled(self) -> bool:
        """Return ``True`` when a verification secret is configured."""

    @property
    def local_bypass_allowed(self) -> bool:
        """Return ``True`` when local requests may skip remote verification."""

    def verify(self, *, token: str, remote_ip: str = "") -> CaptchaVerdict:
        """Verify one token; raise ``CaptchaAdapterError`` subclasses on failure."""
