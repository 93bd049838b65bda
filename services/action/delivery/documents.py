"""Export documents generated from a verified submission record.

Renderers are pluggable through ``DocumentRenderer``; the default emits a
plain-text summary. PDF and DOCX renderers live outside this repository.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Protocol

from pydantic import JsonValue

from packages.intake_shared.form_catalog import DOCUMENT_SKIP_FIELDS, field_label
from packages.intake_shared.logging import get_logger
from services.action.delivery.domain import RenderedDocument

_LOGGER = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9]+")


class DocumentRenderer(Protocol):
    """Render one document format from ordered, labelled fields."""

    def render(
        self, *, title: str, fields: Sequence[tuple[str, str]], base_filename: str
    ) -> RenderedDocument:
        """Return the rendered document named ``{base_filename}.<ext>``."""


class PlainTextSummaryRenderer:
    """UTF-8 text summary: one labelled block per answered field."""

    def render(
        self, *, title: str, fields: Sequence[tuple[str, str]], base_filename: str
    ) -> RenderedDocument:
        lines = [title, "=" * len(title), ""]
        for label, value in fields:
            lines.extend([f"{label}:", value, ""])
        return RenderedDocument(
            filename=f"{base_filename}.txt",
            content="\n".join(lines).encode("utf-8"),
            content_type="text/plain; charset=utf-8",
        )


def sanitize_filename_part(value: object, fallback: str) -> str:
    """Lowercase slug of ``value`` with runs of other characters as ``-``."""
    text = "" if value is None else str(value)
    clean = _UNSAFE_FILENAME_CHARS.sub("-", text.lower()).strip("-")
    return clean or fallback


def base_filename(record: Mapping[str, JsonValue], *, now: datetime) -> str:
    """Return ``{brand}_{client}_{YYYY-MM-DD}_{HHMM}`` for ``record``."""
    brand = sanitize_filename_part(record.get("brand-name"), "brand")
    client = sanitize_filename_part(record.get("client-name"), "client")
    return f"{brand}_{client}_{now:%Y-%m-%d}_{now:%H%M}"


def document_fields(record: Mapping[str, JsonValue]) -> list[tuple[str, str]]:
    """Return ``(label, text)`` pairs for answered, non-system fields."""
    rows: list[tuple[str, str]] = []
    for name, value in record.items():
        if name in DOCUMENT_SKIP_FIELDS:
            continue
        text = format_value(value)
        if text:
            rows.append((field_label(name), text))
    return rows


def format_value(value: JsonValue) -> str:
    """Flatten one stored value to display text."""
    if value is None:
        return ""
    if isinstance(value, list):
        items = [format_value(item) for item in value]
        return "\n".join(f"- {item}" for item in items if item)
    if isinstance(value, dict):
        ref = value.get("originalRef") or value.get("smallRef")
        return "" if ref is None else str(ref)
    return str(value).strip()


def render_documents(
    renderers: Iterable[DocumentRenderer],
    *,
    record: Mapping[str, JsonValue],
    now: datetime,
) -> list[RenderedDocument]:
    """Render every format; one renderer failing never blocks the others."""
    brand = format_value(record.get("brand-name")) or "Unknown Brand"
    title = f"Brand Intake: {brand}"
    fields = document_fields(record)
    stem = base_filename(record, now=now)

    documents: list[RenderedDocument] = []
    for renderer in renderers:
        try:
            documents.append(
                renderer.render(title=title, fields=fields, base_filename=stem)
            )
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error(
                "document rendering failed: renderer=%s exception_type=%s",
                type(renderer).__name__,
                type(exc).__name__,
                exc_info=exc,
            )
    return documents
