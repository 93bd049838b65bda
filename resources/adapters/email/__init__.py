"""Outbound email adapter resource."""

from resources.adapters.email.adapter import (
    EmailAdapter,
    EmailAdapterDependencyError,
    EmailAdapterError,
    EmailAdapterHealthResult,
    EmailAdapterInternalError,
    EmailAttachment,
    EmailSendResult,
    OutboundEmail,
)
from resources.adapters.email.component import RESOURCE_COMPONENT_ID
from resources.adapters.email.config import (
    EmailAdapterSettings,
    resolve_email_adapter_settings,
)
from resources.adapters.email.resend_adapter import HttpResendEmailAdapter

__all__ = [
    "RESOURCE_COMPONENT_ID",
    "EmailAdapter",
    "EmailAdapterDependencyError",
    "EmailAdapterError",
    "EmailAdapterHealthResult",
    "EmailAdapterInternalError",
    "EmailAdapterSettings",
    "EmailAttachment",
    "EmailSendResult",
    "HttpResendEmailAdapter",
    "OutboundEmail",
    "resolve_email_adapter_settings",
]
