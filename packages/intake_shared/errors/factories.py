"""Factory helpers for creating consistent shared errors."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def _build(
    *,
    message: str,
    code: str,
    category: ErrorCategory,
    retryable: bool,
    metadata: Mapping[str, str] | None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata={} if metadata is None else dict(metadata),
    )


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a validation-category error (bad, oversized or disallowed input)."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.VALIDATION,
        retryable=False,
        metadata=metadata,
    )


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a not-found-category error."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.NOT_FOUND,
        retryable=False,
        metadata=metadata,
    )


def expired_error(
    message: str,
    *,
    code: str = codes.TOKEN_EXPIRED,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create an expired-category error, distinct from not-found."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.EXPIRED,
        retryable=False,
        metadata=metadata,
    )


def conflict_error(
    message: str,
    *,
    code: str = codes.CONFLICT,
    retryable: bool = False,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a conflict-category error."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.CONFLICT,
        retryable=retryable,
        metadata=metadata,
    )


def rate_limited_error(
    message: str = "Too many requests. Please try again later.",
    *,
    code: str = codes.RATE_LIMITED,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a rate-limited-category error without retry-after hints."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.RATE_LIMITED,
        retryable=True,
        metadata=metadata,
    )


def policy_error(
    message: str,
    *,
    code: str = codes.POLICY_VIOLATION,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a policy-category (authorization) error."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.POLICY,
        retryable=False,
        metadata=metadata,
    )


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a dependency-category (upstream) error."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.DEPENDENCY,
        retryable=retryable,
        metadata=metadata,
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create an internal-category error."""
    return _build(
        message=message,
        code=code,
        category=ErrorCategory.INTERNAL,
        retryable=False,
        metadata=metadata,
    )
