"""Admin credential resolution and authorization for the HTTP surface."""

from __future__ import annotations

import hmac
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from fastapi import Request

from packages.intake_shared.config import AdminCredentialSettings, ProfileSettings
from packages.intake_shared.errors import ErrorDetail, codes, policy_error
from packages.intake_shared.http import get_header
from packages.intake_shared.logging import get_logger
from services.action.submission_engine import AdminIdentity

_LOGGER = get_logger(__name__)

ADMIN_ROLE = "admin"
_BEARER_PREFIX = "bearer "


class AdminIdentityResolver(Protocol):
    """Map one presented credential to the identity it belongs to."""

    def resolve(self, credential: str) -> AdminIdentity | None:
        """Return the identity for ``credential`` or ``None`` when unknown."""


class StaticTokenAdminResolver:
    """Resolve credentials against the configured static token list."""

    def __init__(self, credentials: Sequence[AdminCredentialSettings]) -> None:
        self._credentials = tuple(credentials)

    def resolve(self, credential: str) -> AdminIdentity | None:
        presented = credential.encode("utf-8")
        matched: AdminCredentialSettings | None = None
        # Every configured token is compared so timing does not reveal which
        # entry matched.
        for item in self._credentials:
            if hmac.compare_digest(presented, item.token.encode("utf-8")):
                matched = item
        if matched is None:
            return None
        return AdminIdentity(email=matched.email, roles=matched.roles)


@dataclass(frozen=True)
class AdminDecision:
    """Outcome of authorizing one request as an administrator."""

    identity: AdminIdentity | None
    error: ErrorDetail | None


class AdminGate:
    """Authorize requests against a resolver and the admin email allowlist."""

    def __init__(
        self,
        *,
        resolver: AdminIdentityResolver,
        admin_emails: Sequence[str],
    ) -> None:
        self._resolver = resolver
        self._admin_emails = frozenset(
            email.strip().lower() for email in admin_emails if email.strip()
        )

    @classmethod
    def from_profile(cls, profile: ProfileSettings) -> AdminGate:
        """Build the default gate from profile settings."""
        gate = cls(
            resolver=StaticTokenAdminResolver(profile.admin_credentials),
            admin_emails=profile.admin_emails,
        )
        if not gate._admin_emails and not any(
            ADMIN_ROLE in item.roles for item in profile.admin_credentials
        ):
            _LOGGER.error(
                "admin allowlist is empty; every admin request will be refused"
            )
        return gate

    def is_admin(self, identity: AdminIdentity) -> bool:
        """Return whether ``identity`` holds the admin role or an allowlisted email."""
        if ADMIN_ROLE in identity.roles:
            return True
        return identity.email.strip().lower() in self._admin_emails

    def authorize(self, credential: str | None) -> AdminDecision:
        """Resolve and authorize ``credential``.

        A missing or unknown credential is ``UNAUTHENTICATED``; a known
        identity without admin rights is ``PERMISSION_DENIED``.
        """
        if credential is None or credential.strip() == "":
            return AdminDecision(identity=None, error=_unauthenticated())
        identity = self._resolver.resolve(credential.strip())
        if identity is None:
            return AdminDecision(identity=None, error=_unauthenticated())
        if not self.is_admin(identity):
            _LOGGER.warning("admin request refused for non-admin identity")
            return AdminDecision(
                identity=None,
                error=policy_error("Forbidden", code=codes.PERMISSION_DENIED),
            )
        return AdminDecision(identity=identity, error=None)


def admin_credential(
    request: Request, body: Mapping[str, object] | None = None
) -> str | None:
    """Read the admin credential from ``adminAuth`` or a bearer header."""
    if body is not None:
        value = body.get("adminAuth")
        if isinstance(value, str) and value.strip():
            return value.strip()
    header = get_header(request, "authorization")
    if header.lower().startswith(_BEARER_PREFIX):
        token = header[len(_BEARER_PREFIX) :].strip()
        return token or None
    return None


def _unauthenticated() -> ErrorDetail:
    return policy_error("Unauthorized", code=codes.UNAUTHENTICATED)
