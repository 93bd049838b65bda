"""Concrete Delivery Service implementation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Callable

from pydantic import JsonValue

from packages.intake_shared.continuation import (
    ContinuationRejection,
    ContinuationSigner,
)
from packages.intake_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    utc_now,
    validate_meta,
)
from packages.intake_shared.errors import (
    ErrorDetail,
    codes,
    policy_error,
    validation_error,
)
from packages.intake_shared.logging import get_logger, public_api_instrumented
from resources.adapters.email import EmailAdapter, OutboundEmail
from services.action.delivery.component import SERVICE_COMPONENT_ID
from services.action.delivery.config import DeliverySettings
from services.action.delivery.documents import (
    DocumentRenderer,
    PlainTextSummaryRenderer,
    render_documents,
)
from services.action.delivery.domain import (
    DeliveryKind,
    DeliveryTicket,
    DispatchReport,
    HealthStatus,
)
from services.action.delivery.emails import (
    admin_notification,
    client_address,
    client_confirmation,
    edit_confirmation,
)
from services.action.delivery.service import DeliveryService

_LOGGER = get_logger(__name__)


class DefaultDeliveryService(DeliveryService):
    """Verify continuation tokens, then render and email in the background.

    ``dispatch`` never fails the caller: every rendering or email problem is
    logged and reflected only in the returned report.
    """

    def __init__(
        self,
        *,
        settings: DeliverySettings,
        signer: ContinuationSigner,
        email_adapter: EmailAdapter,
        renderers: Sequence[DocumentRenderer] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings
        self._signer = signer
        self._email = email_adapter
        self._renderers = (
            tuple(renderers) if renderers is not None else (PlainTextSummaryRenderer(),)
        )
        self._clock = clock

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def accept_delivery(
        self, *, meta: EnvelopeMeta, body: Mapping[str, JsonValue]
    ) -> Envelope[DeliveryTicket]:
        """Verify ``{record, timestamp, token, linkPayload}`` and issue a ticket."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(
                meta=meta,
                errors=[validation_error(str(exc), code=codes.INVALID_ARGUMENT)],
            )
        if not isinstance(body, Mapping):
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        "Request body must be a JSON object.",
                        code=codes.INVALID_ARGUMENT,
                    )
                ],
            )

        record = body.get("record")
        if not isinstance(record, dict):
            return failure(
                meta=meta,
                errors=[validation_error("Missing record.", code=codes.INVALID_ARGUMENT)],
            )
        link_payload = body.get("linkPayload", "")

        check = self._signer.verify(
            record=record,
            timestamp=body.get("timestamp"),
            token=body.get("token"),
            link_payload=link_payload,
        )
        if not check.accepted:
            return failure(meta=meta, errors=[self._rejection_error(check.rejection)])

        assert isinstance(link_payload, str)
        return success(
            meta=meta,
            payload=DeliveryTicket(
                kind=DeliveryKind.SUBMISSION if link_payload else DeliveryKind.EDIT,
                record=record,
                link_payload=link_payload,
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def dispatch(
        self, *, meta: EnvelopeMeta, ticket: DeliveryTicket
    ) -> Envelope[DispatchReport]:
        """Render documents and send the emails one ticket calls for."""
        now = self._clock()
        recipient = client_address(ticket.record)

        if ticket.kind is DeliveryKind.EDIT:
            client_notified = recipient is not None and self._send(
                purpose="edit_confirmation",
                message=edit_confirmation(
                    record=ticket.record,
                    edited_at=now,
                    signature=self._settings.team_signature,
                ),
            )
            return success(
                meta=meta,
                payload=DispatchReport(
                    kind=ticket.kind, client_notified=client_notified
                ),
            )

        documents = render_documents(self._renderers, record=ticket.record, now=now)
        admin_notified = False
        if self._settings.admin_recipients:
            admin_notified = self._send(
                purpose="admin_notification",
                message=admin_notification(
                    record=ticket.record,
                    recipients=self._settings.admin_recipients,
                    documents=documents,
                ),
            )
        else:
            _LOGGER.warning("no admin recipients configured; admin notification skipped")

        client_notified = recipient is not None and self._send(
            purpose="client_confirmation",
            message=client_confirmation(
                record=ticket.record,
                edit_link=ticket.link_payload,
                documents=documents,
                signature=self._settings.team_signature,
            ),
        )
        return success(
            meta=meta,
            payload=DispatchReport(
                kind=ticket.kind,
                documents=tuple(document.filename for document in documents),
                admin_notified=admin_notified,
                client_notified=client_notified,
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return delivery and email adapter readiness."""
        try:
            adapter = self._email.health()
            email_ready = adapter.adapter_ready
            detail = adapter.detail
        except Exception as exc:  # noqa: BLE001
            email_ready = False
            detail = f"email adapter health failed: {type(exc).__name__}"
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                email_ready=email_ready,
                continuation_ready=self._signer.configured,
                detail=detail,
            ),
        )

    def _send(self, *, purpose: str, message: OutboundEmail) -> bool:
        """Send one message, logging and swallowing every failure."""
        try:
            result = self._email.send(message=message)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error(
                "delivery email failed: purpose=%s exception_type=%s",
                purpose,
                type(exc).__name__,
                exc_info=exc,
            )
            return False
        if not result.delivered:
            _LOGGER.warning(
                "delivery email not sent: purpose=%s detail=%s", purpose, result.detail
            )
        return result.delivered

    def _rejection_error(
        self, rejection: ContinuationRejection | None
    ) -> ErrorDetail:
        if rejection is ContinuationRejection.MALFORMED:
            return validation_error(
                "Malformed delivery request.", code=codes.INVALID_ARGUMENT
            )
        if rejection is ContinuationRejection.SECRET_MISSING:
            _LOGGER.error("continuation secret is not configured; delivery refused")
        else:
            _LOGGER.warning(
                "delivery continuation rejected: reason=%s",
                None if rejection is None else rejection.value,
            )
        return policy_error(
            "Invalid or expired delivery token.", code=codes.PERMISSION_DENIED
        )
