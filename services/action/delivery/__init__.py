"""Delivery Service native package exports."""

from services.action.delivery.component import SERVICE_COMPONENT_ID
from services.action.delivery.config import DeliverySettings
from services.action.delivery.documents import (
    DocumentRenderer,
    PlainTextSummaryRenderer,
)
from services.action.delivery.domain import (
    DeliveryKind,
    DeliveryTicket,
    DispatchReport,
    HealthStatus,
    RenderedDocument,
)
from services.action.delivery.implementation import DefaultDeliveryService
from services.action.delivery.service import DeliveryService, build_delivery_service

__all__ = [
    "SERVICE_COMPONENT_ID",
    "DefaultDeliveryService",
    "DeliveryKind",
    "DeliveryService",
    "DeliverySettings",
    "DeliveryTicket",
    "DispatchReport",
    "DocumentRenderer",
    "HealthStatus",
    "PlainTextSummaryRenderer",
    "RenderedDocument",
    "build_delivery_service",
]
