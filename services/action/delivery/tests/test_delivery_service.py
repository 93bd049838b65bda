"""Behavior tests for Delivery Service implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from packages.intake_shared.continuation import ContinuationSigner
from packages.intake_shared.envelope import EnvelopeKind, new_meta
from packages.intake_shared.errors import ErrorCategory, codes
from resources.adapters.email import (
    EmailAdapterDependencyError,
    EmailAdapterHealthResult,
    EmailSendResult,
    OutboundEmail,
)
from services.action.delivery.config import DeliverySettings
from services.action.delivery.domain import DeliveryKind, DeliveryTicket
from services.action.delivery.implementation import DefaultDeliveryService

_NOW = datetime(2026, 10, 17, 12, 5, tzinfo=UTC)
_SECRET = "delivery-test-secret"
_RECORD = {
    "id": "0f8fad5b-d9cb-469f-a165-70867728950e",
    "created_at": "2026-10-17T12:00:00+00:00",
    "client-name": "Jane Doe",
    "brand-name": "Acme & Co",
    "email": "jane@acme.test",
    "q9-color": ["Pastels", "Metallic"],
    "status": "pending",
}


@dataclass
class _Clock:
    seconds: float = _NOW.timestamp()

    def __call__(self) -> float:
        return self.seconds


@dataclass
class _FakeEmailAdapter:
    sent: list[OutboundEmail] = field(default_factory=list)
    raise_on_send: Exception | None = None
    configured: bool = True

    def send(self, *, message: OutboundEmail) -> EmailSendResult:
        if self.raise_on_send is not None:
            raise self.raise_on_send
        self.sent.append(message)
        return EmailSendResult(
            delivered=self.configured,
            message_id="msg-1" if self.configured else "",
            detail="ok" if self.configured else "skipped: not configured",
        )

    def health(self) -> EmailAdapterHealthResult:
        return EmailAdapterHealthResult(adapter_ready=self.configured, detail="ok")


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="caller")


def _service(
    *,
    adapter: _FakeEmailAdapter | None = None,
    clock: _Clock | None = None,
    secret: str = _SECRET,
    recipients: tuple[str, ...] = ("owner@studio.test",),
) -> tuple[DefaultDeliveryService, _FakeEmailAdapter, ContinuationSigner, _Clock]:
    clock = clock or _Clock()
    adapter = adapter or _FakeEmailAdapter()
    signer = ContinuationSigner(secret=secret, clock=clock)
    service = DefaultDeliveryService(
        settings=DeliverySettings(admin_recipients=recipients),
        signer=signer,
        email_adapter=adapter,
        clock=lambda: _NOW,
    )
    return service, adapter, signer, clock


def _body(signer: ContinuationSigner, *, link: str = "https://f.test/?token=t&lang=en"):
    continuation = signer.issue(record=_RECORD, link_payload=link)
    return {
        "record": dict(_RECORD),
        "timestamp": continuation.timestamp,
        "token": continuation.token,
        "linkPayload": link,
    }


def test_valid_continuation_yields_submission_ticket() -> None:
    """A fresh, untouched continuation should be accepted."""
    service, _, signer, _ = _service()

    result = service.accept_delivery(meta=_meta(), body=_body(signer))

    assert result.ok
    assert result.value.kind is DeliveryKind.SUBMISSION
    assert result.value.record == _RECORD


def test_empty_link_yields_edit_ticket() -> None:
    """An empty link payload marks an edit confirmation."""
    service, _, signer, _ = _service()

    result = service.accept_delivery(meta=_meta(), body=_body(signer, link=""))

    assert result.value.kind is DeliveryKind.EDIT


def test_tampered_record_timestamp_or_link_is_denied() -> None:
    """Any change to the bound content should fail verification."""
    service, _, signer, _ = _service()
    changed_record = _body(signer)
    changed_record["record"]["email"] = "attacker@evil.test"
    changed_timestamp = _body(signer)
    changed_timestamp["timestamp"] -= 1
    changed_link = _body(signer)
    changed_link["linkPayload"] = "https://evil.test/"

    for body in (changed_record, changed_timestamp, changed_link):
        result = service.accept_delivery(meta=_meta(), body=body)
        assert result.errors[0].code == codes.PERMISSION_DENIED


def test_expired_continuation_is_denied() -> None:
    """Continuations older than five minutes should be refused."""
    service, _, signer, clock = _service()
    body = _body(signer)
    clock.seconds += 301

    result = service.accept_delivery(meta=_meta(), body=body)

    assert result.has_category(ErrorCategory.POLICY)


def test_malformed_bodies_are_validation_errors() -> None:
    """Missing records or non-string tokens are client errors, not denials."""
    service, _, signer, _ = _service()
    no_record = {"timestamp": 1, "token": "x", "linkPayload": ""}
    bad_token = _body(signer)
    bad_token["token"] = 12345

    missing = service.accept_delivery(meta=_meta(), body=no_record)
    malformed = service.accept_delivery(meta=_meta(), body=bad_token)

    assert missing.errors[0].message == "Missing record."
    assert malformed.has_category(ErrorCategory.VALIDATION)


def test_missing_secret_fails_closed(caplog) -> None:
    """Without a secret nothing verifies, and the misconfiguration is logged."""
    issuing = ContinuationSigner(secret=_SECRET, clock=_Clock())
    service, _, _, _ = _service(secret="")

    with caplog.at_level(logging.ERROR):
        result = service.accept_delivery(meta=_meta(), body=_body(issuing))

    assert result.errors[0].code == codes.PERMISSION_DENIED
    assert "continuation secret is not configured" in caplog.text


def test_submission_dispatch_notifies_admin_and_client_with_documents() -> None:
    """New submissions send an admin notice and a client confirmation."""
    service, adapter, _, _ = _service()
    ticket = DeliveryTicket(
        kind=DeliveryKind.SUBMISSION,
        record=_RECORD,
        link_payload="https://f.test/?token=t&lang=en",
    )

    report = service.dispatch(meta=_meta(), ticket=ticket).value

    assert report.admin_notified is True
    assert report.client_notified is True
    assert report.documents == ("acme-co_jane-doe_2026-10-17_1205.txt",)
    admin, client = adapter.sent
    assert admin.to == ("owner@studio.test",)
    assert admin.subject == "New Intake: Acme & Co · Jane Doe"
    assert admin.attachments[0].filename == report.documents[0]
    summary = admin.attachments[0].content.decode("utf-8")
    assert "- Pastels" in summary
    assert "pending" not in summary
    assert client.to == ("jane@acme.test",)
    assert "https://f.test/?token=t&lang=en" in client.text


def test_edit_dispatch_only_confirms_to_client() -> None:
    """Edit confirmations go to the client only, without documents."""
    service, adapter, _, _ = _service()
    ticket = DeliveryTicket(kind=DeliveryKind.EDIT, record=_RECORD)

    report = service.dispatch(meta=_meta(), ticket=ticket).value

    assert report.client_notified is True
    assert report.admin_notified is False
    assert [message.subject for message in adapter.sent] == [
        "Edits Received: Brand Intake for Acme & Co"
    ]
    assert adapter.sent[0].attachments == ()


def test_email_failures_are_logged_not_raised(caplog) -> None:
    """Provider outages never surface to the caller."""
    adapter = _FakeEmailAdapter(raise_on_send=EmailAdapterDependencyError("down"))
    service, _, _, _ = _service(adapter=adapter)
    ticket = DeliveryTicket(kind=DeliveryKind.SUBMISSION, record=_RECORD, link_payload="x")

    with caplog.at_level(logging.ERROR):
        result = service.dispatch(meta=_meta(), ticket=ticket)

    assert result.ok
    assert result.value.admin_notified is False
    assert result.value.client_notified is False
    assert "delivery email failed" in caplog.text


def test_records_without_client_email_skip_client_message() -> None:
    """Only addresses containing @ are emailed."""
    service, adapter, _, _ = _service(recipients=())
    record = {**_RECORD, "email": None}

    report = service.dispatch(
        meta=_meta(),
        ticket=DeliveryTicket(kind=DeliveryKind.SUBMISSION, record=record, link_payload="x"),
    ).value

    assert report.client_notified is False
    assert report.admin_notified is False
    assert adapter.sent == []


def test_health_reports_adapter_and_signer() -> None:
    """Health combines adapter readiness and signer configuration."""
    service, _, _, _ = _service(adapter=_FakeEmailAdapter(configured=False), secret="")

    status = service.health(meta=_meta()).value

    assert status.email_ready is False
    assert status.continuation_ready is False
