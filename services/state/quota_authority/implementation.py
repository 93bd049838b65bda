"""Concrete Quota Authority Service implementation."""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from packages.intake_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.intake_shared.errors import ErrorDetail, codes, validation_error
from packages.intake_shared.logging import get_logger, public_api_instrumented
from services.state.quota_authority.component import SERVICE_COMPONENT_ID
from services.state.quota_authority.config import QuotaAuthoritySettings
from services.state.quota_authority.domain import (
    HealthStatus,
    QuotaDecision,
    QuotaPolicy,
)
from services.state.quota_authority.fallback import InMemoryQuotaStore
from services.state.quota_authority.interfaces import QuotaStore
from services.state.quota_authority.limiter import (
    FixedWindowRateLimiter,
    current_time_ms,
)
from services.state.quota_authority.service import QuotaAuthorityService
from services.state.quota_authority.validation import CheckQuotaRequest

_LOGGER = get_logger(__name__)


class DefaultQuotaAuthorityService(QuotaAuthorityService):
    """Quota Authority backed by one shared store and an in-process fallback."""

    def __init__(
        self,
        *,
        settings: QuotaAuthoritySettings,
        store: QuotaStore | None,
        fallback: InMemoryQuotaStore | None = None,
        clock_ms: Callable[[], int] = current_time_ms,
    ) -> None:
        self._settings = settings
        self._store = store
        self._limiter = FixedWindowRateLimiter(
            shared=store,
            fallback=fallback
            or InMemoryQuotaStore(max_entries=settings.fallback_max_entries),
            max_identifier_length=settings.max_identifier_length,
            clock_ms=clock_ms,
        )
        self._policies = {
            name: QuotaPolicy(
                max_requests=policy.max_requests,
                window_milliseconds=policy.window_seconds * 1000,
            )
            for name, policy in settings.policies.items()
        }

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("endpoint",),
    )
    def check_quota(
        self,
        *,
        meta: EnvelopeMeta,
        caller_id: str | None,
        endpoint: str,
    ) -> Envelope[QuotaDecision]:
        """Count one request and report whether the caller is over budget."""
        request, errors = self._validate_request(
            meta=meta,
            model=CheckQuotaRequest,
            payload={"caller_id": caller_id, "endpoint": endpoint},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, CheckQuotaRequest)

        policy = self._policies.get(request.endpoint)
        if policy is None:
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        f"endpoint: no quota policy for '{request.endpoint}'",
                        code=codes.INVALID_ARGUMENT,
                    )
                ],
            )

        decision = self._limiter.is_limited(
            caller_id=request.caller_id,
            endpoint=request.endpoint,
            policy=policy,
        )
        if decision.limited:
            _LOGGER.info(
                "request over quota: endpoint=%s backend=%s",
                decision.endpoint,
                decision.backend,
            )
        return success(meta=meta, payload=decision)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Report readiness; a down shared store degrades to fallback, not failure."""
        if self._store is None:
            return success(
                meta=meta,
                payload=HealthStatus(
                    service_ready=True,
                    store_ready=True,
                    backend=self._settings.backend,
                    detail="in-process counters only",
                ),
            )
        try:
            store_ready = bool(self._store.ping())
            detail = "ok" if store_ready else "quota store ping returned false"
        except Exception as exc:  # noqa: BLE001
            store_ready = False
            detail = f"quota store ping failed: {type(exc).__name__}"
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                store_ready=store_ready,
                backend=self._settings.backend,
                detail=detail,
            ),
        )

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        model: type[BaseModel],
        payload: dict[str, Any],
    ) -> tuple[BaseModel | None, list[ErrorDetail]]:
        """Validate metadata and request payload with stable error messages."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return None, [validation_error(str(exc), code=codes.INVALID_ARGUMENT)]

        try:
            validated = model.model_validate(payload)
        except ValidationError as exc:
            issue = exc.errors()[0]
            field = ".".join(str(item) for item in issue.get("loc", ()))
            field_name = field if field else "payload"
            message = f"{field_name}: {issue.get('msg', 'invalid value')}"
            return None, [validation_error(message, code=codes.INVALID_ARGUMENT)]

        return validated, []
