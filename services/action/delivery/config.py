"""Pydantic settings for Delivery Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.intake_shared.config import IntakeSettings, resolve_component_settings
from services.action.delivery.component import SERVICE_COMPONENT_ID


class DeliverySettings(BaseModel):
    """Recipients and sign-off used by second-phase notifications.

    ``admin_recipients`` falls back to ``profile.admin_emails`` when empty.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    admin_recipients: tuple[str, ...] = ()
    team_signature: str = "The Intake Team"

    @field_validator("admin_recipients", mode="before")
    @classmethod
    def _split_recipients(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return value


def resolve_delivery_settings(settings: IntakeSettings) -> DeliverySettings:
    """Resolve settings from ``components.service.delivery``."""
    resolved = resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=DeliverySettings,
    )
    if resolved.admin_recipients:
        return resolved
    return resolved.model_copy(
        update={"admin_recipients": tuple(settings.profile.admin_emails)}
    )
