"""Typed errors for shared HTTP client and server helpers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HttpError(Exception):
    """Base error type for shared HTTP helper failures."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HttpClientError(HttpError):
    """Base error for outbound HTTP call failures."""

    method: str
    url: str
    retryable: bool = False


@dataclass(frozen=True)
class HttpRequestError(HttpClientError):
    """Transport-level failure (connect, timeout, protocol)."""

    cause: Exception | None = None


@dataclass(frozen=True)
class HttpStatusError(HttpClientError):
    """Upstream answered with a non-success status code."""

    status_code: int = 0
    response_body: str = ""


@dataclass(frozen=True)
class HttpJsonDecodeError(HttpClientError):
    """Upstream answered successfully but the body is not JSON."""

    status_code: int = 0


@dataclass(frozen=True)
class HttpServerError(HttpError):
    """Base error type for inbound request parsing helpers."""


@dataclass(frozen=True)
class InvalidBodyError(HttpServerError):
    """Inbound body is invalid for the expected shape."""


@dataclass(frozen=True)
class InvalidJsonBodyError(InvalidBodyError):
    """Inbound body is not valid JSON."""


@dataclass(frozen=True)
class PayloadTooLargeError(InvalidBodyError):
    """Inbound body exceeds the configured byte limit."""

    limit_bytes: int = 0
