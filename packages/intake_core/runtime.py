"""Service graph construction for one intake process."""

from __future__ import annotations

from dataclasses import dataclass

from packages.intake_core.auth import AdminGate
from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.continuation import ContinuationSigner
from packages.intake_shared.logging import get_logger
from resources.adapters.captcha import (
    HttpTurnstileCaptchaAdapter,
    resolve_captcha_adapter_settings,
)
from resources.substrates.postgres import (
    SharedPostgresSubstrate,
    resolve_postgres_settings,
)
from services.action.delivery import SERVICE_COMPONENT_ID as DELIVERY_ID
from services.action.delivery import DeliveryService, build_delivery_service
from services.action.submission_engine import SERVICE_COMPONENT_ID as ENGINE_ID
from services.action.submission_engine import (
    SubmissionEngineService,
    build_submission_engine_service,
)
from services.action.submission_engine.config import (
    resolve_submission_engine_settings,
)
from services.state.quota_authority import SERVICE_COMPONENT_ID as QUOTA_ID
from services.state.quota_authority import (
    QuotaAuthorityService,
    build_quota_authority_service,
)
from services.state.submission_authority import SERVICE_COMPONENT_ID as SUBMISSIONS_ID
from services.state.submission_authority import (
    SubmissionAuthorityService,
    build_submission_authority_service,
)

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class IntakeServices:
    """Every service the HTTP surface talks to."""

    quota: QuotaAuthorityService
    submissions: SubmissionAuthorityService
    engine: SubmissionEngineService
    delivery: DeliveryService
    admin_gate: AdminGate

    def health_components(self) -> dict[str, object]:
        """Return the components probed by the aggregate health route."""
        return {
            QUOTA_ID: self.quota,
            SUBMISSIONS_ID: self.submissions,
            ENGINE_ID: self.engine,
            DELIVERY_ID: self.delivery,
        }


def build_continuation_signer(settings: IntakeSettings) -> ContinuationSigner:
    """Build the one signer shared by the issuing and verifying services."""
    engine_settings = resolve_submission_engine_settings(settings)
    signer = ContinuationSigner(
        secret=settings.profile.continuation_secret,
        validity_seconds=engine_settings.continuation_validity_seconds,
        max_future_skew_seconds=engine_settings.continuation_max_future_skew_seconds,
    )
    if not signer.configured:
        _LOGGER.error(
            "profile.continuation_secret is not set; delivery requests will be refused"
        )
    return signer


def build_captcha_verifier(settings: IntakeSettings) -> HttpTurnstileCaptchaAdapter:
    """Build the bot-check verifier; a blank secret leaves it disabled."""
    verifier = HttpTurnstileCaptchaAdapter(
        settings=resolve_captcha_adapter_settings(settings),
        secret=settings.profile.captcha_secret,
        local_bypass=settings.profile.captcha_local_bypass,
    )
    if not verifier.enabled:
        _LOGGER.warning("profile.captcha_secret is not set; bot check is disabled")
    return verifier


def build_services(settings: IntakeSettings) -> IntakeServices:
    """Instantiate substrates and services from settings."""
    postgres = SharedPostgresSubstrate(settings=resolve_postgres_settings(settings))
    signer = build_continuation_signer(settings)
    submissions = build_submission_authority_service(
        settings=settings, postgres=postgres
    )
    services = IntakeServices(
        quota=build_quota_authority_service(settings=settings, postgres=postgres),
        submissions=submissions,
        engine=build_submission_engine_service(
            settings=settings,
            submission_service=submissions,
            signer=signer,
            captcha=build_captcha_verifier(settings),
        ),
        delivery=build_delivery_service(settings=settings, signer=signer),
        admin_gate=AdminGate.from_profile(settings.profile),
    )
    _LOGGER.info("intake services instantiated")
    return services
