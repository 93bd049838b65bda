"""Bot-check (captcha) adapter resource."""

from resources.adapters.captcha.adapter import (
    CaptchaAdapterDependencyError,
    CaptchaAdapterError,
    CaptchaAdapterInternalError,
    CaptchaVerdict,
    CaptchaVerifier,
)
from resources.adapters.captcha.component import RESOURCE_COMPONENT_ID
from resources.adapters.captcha.config import (
    TURNSTILE_TESTING_SECRET,
    CaptchaAdapterSettings,
    resolve_captcha_adapter_settings,
)
from resources.adapters.captcha.turnstile_adapter import HttpTurnstileCaptchaAdapter

__all__ = [
    "RESOURCE_COMPONENT_ID",
    "TURNSTILE_TESTING_SECRET",
    "CaptchaAdapterDependencyError",
    "CaptchaAdapterError",
    "CaptchaAdapterInternalError",
    "CaptchaAdapterSettings",
    "CaptchaVerdict",
    "CaptchaVerifier",
    "HttpTurnstileCaptchaAdapter",
    "resolve_captcha_adapter_settings",
]
