"""Email adapter implementation over the Resend HTTP API."""

from __future__ import annotations

import base64

import httpx

from packages.intake_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)
from packages.intake_shared.logging import get_logger, public_api_instrumented
from resources.adapters.email.adapter import (
    EmailAdapter,
    EmailAdapterDependencyError,
    EmailAdapterHealthResult,
    EmailAdapterInternalError,
    EmailSendResult,
    OutboundEmail,
)
from resources.adapters.email.component import RESOURCE_COMPONENT_ID
from resources.adapters.email.config import EmailAdapterSettings

_LOGGER = get_logger(__name__)


class HttpResendEmailAdapter(EmailAdapter):
    """Send transactional email through ``POST /emails``."""

    def __init__(
        self,
        *,
        settings: EmailAdapterSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        headers = {"Content-Type": "application/json"}
        if settings.configured:
            headers["Authorization"] = f"Bearer {settings.api_key}"
        self._client = HttpClient(
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            headers=headers,
            transport=transport,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    def send(self, *, message: OutboundEmail) -> EmailSendResult:
        """Send one message; a missing API key skips the send with a warning."""
        recipients = [item.strip() for item in message.to if item.strip() != ""]
        if len(recipients) == 0:
            raise EmailAdapterInternalError("at least one recipient is required")
        if message.html == "" and message.text == "":
            raise EmailAdapterInternalError("html or text body is required")

        if not self._settings.configured:
            _LOGGER.warning("email api key not configured; skipping send")
            return EmailSendResult(delivered=False, detail="skipped: not configured")

        try:
            body = self._client.post_json(
                "/emails", json=self._payload(message, recipients)
            )
        except HttpStatusError as exc:
            raise EmailAdapterDependencyError(
                f"email send failed with status {exc.status_code}"
            ) from None
        except HttpRequestError as exc:
            raise EmailAdapterDependencyError(
                str(exc) or "email provider unavailable"
            ) from None
        except HttpJsonDecodeError as exc:
            raise EmailAdapterInternalError(
                f"email provider response JSON invalid: {exc}"
            ) from None

        message_id = body.get("id", "") if isinstance(body, dict) else ""
        return EmailSendResult(
            delivered=True,
            message_id=str(message_id),
            detail="delivered",
        )

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    def health(self) -> EmailAdapterHealthResult:
        """Report configuration readiness; no provider round-trip is made."""
        if not self._settings.configured:
            return EmailAdapterHealthResult(
                adapter_ready=False, detail="email api key not configured"
            )
        return EmailAdapterHealthResult(adapter_ready=True, detail="ok")

    def close(self) -> None:
        self._client.close()

    def _payload(
        self, message: OutboundEmail, recipients: list[str]
    ) -> dict[str, object]:
        payload: dict[str, object] = {
            "from": self._settings.from_address,
            "to": recipients,
            "subject": message.subject,
        }
        if message.html:
            payload["html"] = message.html
        if message.text:
            payload["text"] = message.text
        if message.reply_to:
            payload["reply_to"] = message.reply_to
        if message.attachments:
            payload["attachments"] = [
                {
                    "filename": item.filename,
                    "content": base64.b64encode(item.content).decode("ascii"),
                    "content_type": item.content_type,
                }
                for item in message.attachments
            ]
        return payload
