"""Continuation tokens binding a second-phase request to one record snapshot.

A continuation is ``HMAC-SHA256(secret, f"{timestamp}:{record_hash}:{link}")``
where ``record_hash`` is the SHA-256 of the record's canonical JSON and
``timestamp`` is epoch milliseconds. Verification recomputes the hash from the
record the caller supplies, so any altered field, timestamp or link fails.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

MAX_VALIDITY_SECONDS = 300.0


class ContinuationConfigurationError(RuntimeError):
    """Raised when a continuation is requested without a signing secret."""


class ContinuationRejection(str, Enum):
    """Reasons a continuation is refused."""

    SECRET_MISSING = "secret_missing"
    MALFORMED = "malformed"
    EXPIRED = "expired"
    FUTURE_TIMESTAMP = "future_timestamp"
    SIGNATURE_MISMATCH = "signature_mismatch"


@dataclass(frozen=True)
class Continuation:
    """Issued continuation returned to the caller of a successful write."""

    timestamp: int
    token: str
    link_payload: str


@dataclass(frozen=True)
class ContinuationCheck:
    """Outcome of one verification attempt."""

    accepted: bool
    rejection: ContinuationRejection | None = None


def canonical_json(record: Mapping[str, Any]) -> str:
    """Serialize ``record`` deterministically (sorted keys, compact separators)."""
    return json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def record_hash(record: Mapping[str, Any]) -> str:
    """Return the hex SHA-256 of the record's canonical JSON."""
    return hashlib.sha256(canonical_json(record).encode("utf-8")).hexdigest()


class ContinuationSigner:
    """Issue and verify continuation tokens with one server secret."""

    def __init__(
        self,
        *,
        secret: str,
        validity_seconds: float = MAX_VALIDITY_SECONDS,
        max_future_skew_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if validity_seconds <= 0 or validity_seconds > MAX_VALIDITY_SECONDS:
            raise ValueError(
                f"validity_seconds must be in (0, {MAX_VALIDITY_SECONDS:g}]"
            )
        if max_future_skew_seconds < 0:
            raise ValueError("max_future_skew_seconds must be >= 0")
        self._secret = secret.strip()
        self._validity_ms = int(validity_seconds * 1000)
        self._skew_ms = int(max_future_skew_seconds * 1000)
        self._clock = clock

    @property
    def configured(self) -> bool:
        """Return ``True`` when a signing secret is present."""
        return self._secret != ""

    def issue(self, *, record: Mapping[str, Any], link_payload: str = "") -> Continuation:
        """Sign ``record`` and ``link_payload`` at the current time."""
        if not self.configured:
            raise ContinuationConfigurationError("continuation secret is not configured")
        timestamp = self._now_ms()
        return Continuation(
            timestamp=timestamp,
            token=self._sign(timestamp=timestamp, record=record, link_payload=link_payload),
            link_payload=link_payload,
        )

    def verify(
        self,
        *,
        record: Mapping[str, Any],
        timestamp: object,
        token: object,
        link_payload: object,
    ) -> ContinuationCheck:
        """Check signature and age; every doubt resolves to a rejection."""
        if not self.configured:
            return ContinuationCheck(False, ContinuationRejection.SECRET_MISSING)

        issued_at = _coerce_timestamp(timestamp)
        if (
            issued_at is None
            or not isinstance(token, str)
            or not token.isascii()
            or not isinstance(link_payload, str)
        ):
            return ContinuationCheck(False, ContinuationRejection.MALFORMED)

        age_ms = self._now_ms() - issued_at
        if age_ms < -self._skew_ms:
            return ContinuationCheck(False, ContinuationRejection.FUTURE_TIMESTAMP)
        if age_ms > self._validity_ms:
            return ContinuationCheck(False, ContinuationRejection.EXPIRED)

        try:
            expected = self._sign(
                timestamp=issued_at, record=record, link_payload=link_payload
            )
        except (TypeError, ValueError):
            return ContinuationCheck(False, ContinuationRejection.MALFORMED)

        if not hmac.compare_digest(expected, token):
            return ContinuationCheck(False, ContinuationRejection.SIGNATURE_MISMATCH)
        return ContinuationCheck(True)

    def _sign(self, *, timestamp: int, record: Mapping[str, Any], link_payload: str) -> str:
        message = f"{timestamp}:{record_hash(record)}:{link_payload}"
        return hmac.new(
            key=self._secret.encode("utf-8"),
            msg=message.encode("utf-8"),
            digestmod=hashlib.sha256,
        ).hexdigest()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)


def _coerce_timestamp(value: object) -> int | None:
    """Accept integer milliseconds or a digit string; reject everything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
