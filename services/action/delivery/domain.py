"""Domain contracts for Delivery Service payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, JsonValue


class DeliveryKind(str, Enum):
    """Second-phase flavor, decided by whether an edit link was signed."""

    SUBMISSION = "submission"
    EDIT = "edit"


class DeliveryTicket(BaseModel):
    """Verified continuation ready for background dispatch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: DeliveryKind
    record: dict[str, JsonValue]
    link_payload: str = ""


class RenderedDocument(BaseModel):
    """One generated export document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    filename: str
    content: bytes
    content_type: str


class DispatchReport(BaseModel):
    """What one dispatch run generated and sent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: DeliveryKind
    documents: tuple[str, ...] = ()
    admin_notified: bool = False
    client_notified: bool = False


class HealthStatus(BaseModel):
    """Delivery Service and email adapter readiness."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    email_ready: bool
    continuation_ready: bool
    detail: str
