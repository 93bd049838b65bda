"""Append-only history ledger helpers for submission records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from services.state.submission_authority.domain import EditedBy, HistoryEntry


def original_entry(*, edited_by: EditedBy, timestamp: datetime) -> HistoryEntry:
    """Return the first entry of a new record's history."""
    return HistoryEntry(label="original", timestamp=timestamp, edited_by=edited_by)


def edited_entry(
    *,
    edited_by: EditedBy,
    timestamp: datetime,
    note: str | None = None,
    admin_email: str | None = None,
) -> HistoryEntry:
    """Return an entry describing one accepted edit."""
    note = note.strip() if note else None
    return HistoryEntry(
        label="edited",
        timestamp=timestamp,
        edited_by=edited_by,
        note=note or None,
        admin_email=admin_email or None,
    )


def ensure_origin(
    history: Sequence[HistoryEntry], *, created_at: datetime
) -> tuple[HistoryEntry, ...]:
    """Return ``history``, rebuilding a lost ``original`` entry from ``created_at``.

    Records written before the ledger existed have no history; the rebuilt
    entry's author is ``unknown``.
    """
    if len(history) == 0:
        return (original_entry(edited_by="unknown", timestamp=created_at),)
    return tuple(history)


def append_entry(
    history: Sequence[HistoryEntry],
    entry: HistoryEntry,
    *,
    created_at: datetime,
) -> tuple[HistoryEntry, ...]:
    """Return a new history with ``entry`` appended after existing entries."""
    if entry.label == "original":
        raise ValueError("only the first history entry may be labelled original")
    return (*ensure_origin(history, created_at=created_at), entry)
