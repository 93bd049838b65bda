"""Behavior tests for the Resend-backed email adapter."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from resources.adapters.email.adapter import (
    EmailAdapterDependencyError,
    EmailAdapterInternalError,
    EmailAttachment,
    OutboundEmail,
)
from resources.adapters.email.config import EmailAdapterSettings
from resources.adapters.email.resend_adapter import HttpResendEmailAdapter


class _RecordingHandler:
    """MockTransport handler capturing requests and replaying one response."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or httpx.Response(200, json={"id": "em_123"})
        self.raise_error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        return self.response


def _adapter(
    handler: _RecordingHandler, *, api_key: str = "re_test_key"
) -> HttpResendEmailAdapter:
    return HttpResendEmailAdapter(
        settings=EmailAdapterSettings(
            api_key=api_key, from_address="Studio <hello@studio.test>"
        ),
        transport=httpx.MockTransport(handler),
    )


def _message(**overrides: object) -> OutboundEmail:
    values: dict[str, object] = {
        "to": ("client@example.com",),
        "subject": "We received your brief",
        "html": "<p>Thanks</p>",
        "text": "Thanks",
    }
    values.update(overrides)
    return OutboundEmail(**values)


def test_send_posts_bearer_authorized_payload_with_base64_attachments() -> None:
    """Send should POST /emails with auth header, recipients and attachments."""
    handler = _RecordingHandler()
    adapter = _adapter(handler)

    result = adapter.send(
        message=_message(
            attachments=(
                EmailAttachment(
                    filename="acme_jane_2026-01-02_1030.txt",
                    content=b"summary",
                    content_type="text/plain",
                ),
            )
        )
    )

    assert result.delivered is True
    assert result.message_id == "em_123"
    request = handler.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/emails"
    assert request.headers["Authorization"] == "Bearer re_test_key"
    body = json.loads(request.content)
    assert body["from"] == "Studio <hello@studio.test>"
    assert body["to"] == ["client@example.com"]
    assert body["attachments"][0]["filename"] == "acme_jane_2026-01-02_1030.txt"
    assert base64.b64decode(body["attachments"][0]["content"]) == b"summary"


def test_send_skips_without_api_key() -> None:
    """A missing API key should skip the provider call and report not delivered."""
    handler = _RecordingHandler()
    adapter = _adapter(handler, api_key="")

    result = adapter.send(message=_message())

    assert result.delivered is False
    assert handler.requests == []
    assert adapter.health().adapter_ready is False


def test_send_maps_provider_status_errors_to_dependency_error() -> None:
    """Provider 5xx responses should raise dependency errors."""
    handler = _RecordingHandler(httpx.Response(503, text="unavailable"))
    adapter = _adapter(handler)

    with pytest.raises(EmailAdapterDependencyError, match="status 503"):
        adapter.send(message=_message())


def test_send_maps_transport_errors_to_dependency_error() -> None:
    """Connection failures should raise dependency errors."""
    handler = _RecordingHandler()
    handler.raise_error = httpx.ConnectError("refused")
    adapter = _adapter(handler)

    with pytest.raises(EmailAdapterDependencyError):
        adapter.send(message=_message())


def test_send_rejects_message_without_recipients_or_body() -> None:
    """Messages without recipients or body content are contract violations."""
    adapter = _adapter(_RecordingHandler())

    with pytest.raises(EmailAdapterInternalError, match="recipient"):
        adapter.send(message=_message(to=(" ",)))
    with pytest.raises(EmailAdapterInternalError, match="body"):
        adapter.send(message=_message(html="", text=""))


def test_settings_resolve_api_key_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """API key may be referenced through an environment variable."""
    monkeypatch.setenv("RESEND_API_KEY", "re_from_env")

    settings = EmailAdapterSettings(api_key_env="RESEND_API_KEY")

    assert settings.api_key == "re_from_env"
    assert settings.configured is True
