"""Authoritative in-process Python API for Delivery Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from pydantic import JsonValue

from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.continuation import ContinuationSigner
from packages.intake_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.email import EmailAdapter
from services.action.delivery.domain import DeliveryTicket, DispatchReport, HealthStatus


class DeliveryService(ABC):
    """Public API for verifying continuations and sending notifications."""

    @abstractmethod
    def accept_delivery(
        self, *, meta: EnvelopeMeta, body: Mapping[str, JsonValue]
    ) -> Envelope[DeliveryTicket]:
        """Verify ``{record, timestamp, token, linkPayload}`` and issue a ticket."""

    @abstractmethod
    def dispatch(
        self, *, meta: EnvelopeMeta, ticket: DeliveryTicket
    ) -> Envelope[DispatchReport]:
        """Render documents and send the emails one ticket calls for."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return delivery and email adapter readiness."""


def build_delivery_service(
    *,
    settings: IntakeSettings,
    signer: ContinuationSigner | None = None,
    email_adapter: EmailAdapter | None = None,
) -> DeliveryService:
    """Build default Delivery implementation from typed settings."""
    from resources.adapters.email import (
        HttpResendEmailAdapter,
        resolve_email_adapter_settings,
    )
    from services.action.delivery.config import resolve_delivery_settings
    from services.action.delivery.implementation import DefaultDeliveryService

    return DefaultDeliveryService(
        settings=resolve_delivery_settings(settings),
        signer=signer
        or ContinuationSigner(secret=settings.profile.continuation_secret),
        email_adapter=email_adapter
        or HttpResendEmailAdapter(settings=resolve_email_adapter_settings(settings)),
    )
