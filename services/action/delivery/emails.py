"""Outbound notification messages for second-phase delivery."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from html import escape

from pydantic import JsonValue

from resources.adapters.email import EmailAttachment, OutboundEmail
from services.action.delivery.documents import format_value
from services.action.delivery.domain import RenderedDocument


def attachments_for(documents: Sequence[RenderedDocument]) -> tuple[EmailAttachment, ...]:
    return tuple(
        EmailAttachment(
            filename=document.filename,
            content=document.content,
            content_type=document.content_type,
        )
        for document in documents
    )


def admin_notification(
    *,
    record: Mapping[str, JsonValue],
    recipients: Sequence[str],
    documents: Sequence[RenderedDocument],
) -> OutboundEmail:
    """Tell administrators about a new submission, with documents attached."""
    brand = _text(record, "brand-name") or "Unknown Brand"
    client = _text(record, "client-name") or "Unknown Client"
    rows = [
        ("Client", client),
        ("Brand / Business", brand),
        ("Email", _text(record, "email") or "Not provided"),
        ("Requested Delivery", _text(record, "delivery-date") or "Not provided"),
    ]
    table = "".join(
        f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    text_rows = "\n".join(f"{label}: {value}" for label, value in rows)
    return OutboundEmail(
        to=tuple(recipients),
        subject=f"New Intake: {brand} · {client}",
        html=(
            "<h2>New Client Intake Submission</h2>"
            f"<table>{table}</table>"
            "<p>The full submission is attached to this email.</p>"
        ),
        text=f"New Client Intake\n\n{text_rows}\n\nFull submission attached.",
        reply_to=_text(record, "email"),
        attachments=attachments_for(documents),
    )


def client_confirmation(
    *,
    record: Mapping[str, JsonValue],
    edit_link: str,
    documents: Sequence[RenderedDocument],
    signature: str,
) -> OutboundEmail:
    """Thank the client and hand them their 30-day edit link."""
    brand = _text(record, "brand-name") or "your brand"
    client = _text(record, "client-name") or "there"
    return OutboundEmail(
        to=(_text(record, "email"),),
        subject=f"Received: Brand Intake for {brand}",
        html=(
            f"<h2>Thank you, {escape(client)}!</h2>"
            f"<p>We've received your brand intake submission for "
            f"<strong>{escape(brand)}</strong>.</p>"
            "<p>You have 30 days to update your answers using the secure link "
            "below. This link is personal; please don't share it.</p>"
            f'<p><a href="{escape(edit_link, quote=True)}">Edit My Submission</a></p>'
            f"<p>{escape(signature)}</p>"
        ),
        text=(
            f"Thank you, {client}!\n\n"
            f"We've received your brand intake for {brand}.\n\n"
            f"To edit your answers (valid for 30 days):\n{edit_link}\n\n"
            f"{signature}"
        ),
        attachments=attachments_for(documents),
    )


def edit_confirmation(
    *,
    record: Mapping[str, JsonValue],
    edited_at: datetime,
    signature: str,
) -> OutboundEmail:
    """Confirm that a token edit was received."""
    brand = _text(record, "brand-name") or "your brand"
    client = _text(record, "client-name") or "there"
    when = edited_at.strftime("%B %d, %Y %H:%M UTC")
    return OutboundEmail(
        to=(_text(record, "email"),),
        subject=f"Edits Received: Brand Intake for {brand}",
        html=(
            f"<h2>Edits received, {escape(client)}!</h2>"
            f"<p>Your updates to the brand intake for <strong>{escape(brand)}</strong> "
            f"were received on <strong>{escape(when)}</strong>.</p>"
            f"<p>{escape(signature)}</p>"
        ),
        text=(
            "Edits received!\n\n"
            f"Your updates to the brand intake for {brand} were received on {when}.\n\n"
            f"{signature}"
        ),
    )


def client_address(record: Mapping[str, JsonValue]) -> str | None:
    """Return the record's email when it looks deliverable."""
    address = _text(record, "email")
    return address if "@" in address else None


def _text(record: Mapping[str, JsonValue], name: str) -> str:
    value = record.get(name)
    if isinstance(value, list):
        return ", ".join(str(item) for item in value if item)
    return format_value(value)
