"""Envelope metadata primitives shared across intake services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4


class EnvelopeKind(str, Enum):
    """Envelope kinds used to classify request intent."""

    UNSPECIFIED = "unspecified"
    COMMAND = "command"
    QUERY = "query"
    RESULT = "result"


@dataclass(frozen=True)
class EnvelopeMeta:
    """Canonical metadata attached to every envelope result.

    ``principal`` names who is acting: a caller identity for public requests,
    an admin email for override calls, or ``system`` for background work.
    """

    envelope_id: str
    trace_id: str
    parent_id: str
    timestamp: datetime
    kind: EnvelopeKind
    source: str
    principal: str


def new_meta(
    *,
    kind: EnvelopeKind,
    source: str,
    principal: str,
    trace_id: str | None = None,
    parent_id: str = "",
) -> EnvelopeMeta:
    """Build ``EnvelopeMeta`` with fresh ids and a UTC timestamp."""
    return EnvelopeMeta(
        envelope_id=_new_id(),
        trace_id=trace_id or _new_id(),
        parent_id=parent_id,
        timestamp=datetime.now(UTC),
        kind=kind,
        source=source,
        principal=principal,
    )


def _new_id() -> str:
    """Return a compact random identifier."""
    return uuid4().hex
