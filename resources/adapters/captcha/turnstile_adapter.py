"""Captcha adapter implementation over the Cloudflare Turnstile siteverify API."""

from __future__ import annotations

import httpx

from packages.intake_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)
from packages.intake_shared.logging import get_logger, public_api_instrumented
from resources.adapters.captcha.adapter import (
    CaptchaAdapterDependencyError,
    CaptchaAdapterInternalError,
    CaptchaVerdict,
    CaptchaVerifier,
)
from resources.adapters.captcha.component import RESOURCE_COMPONENT_ID
from resources.adapters.captcha.config import (
    TURNSTILE_TESTING_SECRET,
    CaptchaAdapterSettings,
)

_LOGGER = get_logger(__name__)


class HttpTurnstileCaptchaAdapter(CaptchaVerifier):
    """Verify Turnstile tokens through ``POST /turnstile/v0/siteverify``.

    A blank secret disables verification entirely. Local bypass is allowed
    when explicitly switched on or when the Cloudflare testing secret is in
    use; callers still decide whether a given request counts as local.
    """

    def __init__(
        self,
        *,
        settings: CaptchaAdapterSettings,
        secret: str,
        local_bypass: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._secret = secret.strip()
        self._local_bypass = local_bypass
        self._client = HttpClient(
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return self._secret != ""

    @property
    def local_bypass_allowed(self) -> bool:
        return self._local_bypass or self._secret == TURNSTILE_TESTING_SECRET

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    def verify(self, *, token: str, remote_ip: str = "") -> CaptchaVerdict:
        """Ask the verifier about ``token``; transport failures raise."""
        if not self.enabled:
            raise CaptchaAdapterInternalError("captcha secret is not configured")
        if token.strip() == "":
            raise CaptchaAdapterInternalError("captcha token is required")

        payload = {"secret": self._secret, "response": token.strip()}
        if remote_ip:
            payload["remoteip"] = remote_ip
        try:
            body = self._client.post_json(self._settings.verify_path, json=payload)
        except HttpStatusError as exc:
            raise CaptchaAdapterDependencyError(
                f"captcha verifier answered status {exc.status_code}"
            ) from None
        except HttpRequestError as exc:
            raise CaptchaAdapterDependencyError(
                str(exc) or "captcha verifier unavailable"
            ) from None
        except HttpJsonDecodeError:
            raise CaptchaAdapterDependencyError(
                "captcha verifier response JSON invalid"
            ) from None

        if not isinstance(body, dict):
            raise CaptchaAdapterDependencyError("captcha verifier response is not an object")
        raw_codes = body.get("error-codes")
        error_codes = (
            tuple(str(item) for item in raw_codes) if isinstance(raw_codes, list) else ()
        )
        return CaptchaVerdict(success=body.get("success") is True, error_codes=error_codes)

    def close(self) -> None:
        self._client.close()
