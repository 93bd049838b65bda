"""FastAPI routes for submissions, delivery, admin operations and health.

Handlers stay thin: read the body, spend the caller's quota, authorize
admins, then hand off to a service and map its envelope onto a response.
Error bodies are always ``{"error": message}``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from fastapi import APIRouter, BackgroundTasks, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import JsonValue

from packages.intake_core.auth import admin_credential
from packages.intake_core.health import evaluate_intake_health
from packages.intake_core.runtime import IntakeServices
from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.countries import country_display
from packages.intake_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from packages.intake_shared.errors import (
    ErrorCategory,
    ErrorDetail,
    codes,
    rate_limited_error,
    validation_error,
)
from packages.intake_shared.http import (
    InvalidJsonBodyError,
    PayloadTooLargeError,
    create_app,
    get_header,
    read_json_body,
)
from packages.intake_shared.logging import get_logger
from services.action.submission_engine import (
    ClientContext,
    MutationOutcome,
    MutationPath,
)
from services.action.submission_engine.config import (
    resolve_submission_engine_settings,
)

_LOGGER = get_logger(__name__)

MAX_CALLER_ID_LENGTH = 64
UNKNOWN_CALLER = "unknown"
COUNTRY_HEADERS = ("x-country", "x-nf-country", "cf-ipcountry")
_LOCAL_HOST_RE = re.compile(r"localhost|127\.0\.0\.1", re.IGNORECASE)

_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.EXPIRED: 410,
    ErrorCategory.RATE_LIMITED: 429,
    ErrorCategory.POLICY: 403,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.DEPENDENCY: 503,
    ErrorCategory.INTERNAL: 500,
}
_STATUS_BY_CODE: dict[str, int] = {
    codes.PAYLOAD_TOO_LARGE: 413,
    codes.UNAUTHENTICATED: 401,
}
_GENERIC_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.DEPENDENCY: "Service temporarily unavailable.",
    ErrorCategory.INTERNAL: "Internal server error.",
}
# Codes whose own message is safe to show in place of the generic one.
_PUBLIC_MESSAGE_CODES = frozenset({codes.BOT_CHECK_UNAVAILABLE})


def caller_identity(request: Request) -> str:
    """Return the rate-limit key for one request.

    Preference order: last ``X-Forwarded-For`` hop, ``client-ip`` header,
    socket peer, then ``"unknown"``.
    """
    forwarded = [
        part.strip()
        for part in request.headers.get("x-forwarded-for", "").split(",")
        if part.strip()
    ]
    if forwarded:
        caller = forwarded[-1]
    else:
        caller = request.headers.get("client-ip", "").strip()
    if caller == "" and request.client is not None:
        caller = request.client.host or ""
    return (caller or UNKNOWN_CALLER)[:MAX_CALLER_ID_LENGTH]


def client_country(request: Request) -> str:
    """Return the display country from the first edge geo header present."""
    return country_display(get_header(request, *COUNTRY_HEADERS))


def is_local_request(request: Request, *, site_url: str) -> bool:
    """Return whether the host, origin or configured site URL is localhost."""
    candidates = (
        get_header(request, "host", "x-forwarded-host"),
        get_header(request, "origin", "referer"),
        site_url,
    )
    return any(_LOCAL_HOST_RE.search(value) for value in candidates if value)


def client_context(request: Request, *, site_url: str) -> ClientContext:
    return ClientContext(
        country=client_country(request),
        remote_ip=caller_identity(request),
        local_request=is_local_request(request, site_url=site_url),
    )


def status_for(errors: Sequence[ErrorDetail]) -> int:
    """Map the first error onto its HTTP status."""
    if len(errors) == 0:
        return 500
    first = errors[0]
    return _STATUS_BY_CODE.get(first.code) or _STATUS_BY_CATEGORY.get(
        first.category, 500
    )


def error_response(errors: Sequence[ErrorDetail]) -> JSONResponse:
    """Render failed envelope errors as ``{"error": message}``."""
    status = status_for(errors)
    first = errors[0] if errors else None
    if first is None:
        message = _GENERIC_MESSAGES[ErrorCategory.INTERNAL]
    elif first.code in _PUBLIC_MESSAGE_CODES:
        message = first.message
    else:
        message = _GENERIC_MESSAGES.get(first.category, first.message)
    if status >= 500:
        _LOGGER.error(
            "request failed: status=%s code=%s",
            status,
            first.code if first is not None else "",
        )
    return JSONResponse(status_code=status, content={"error": message})


def outcome_content(outcome: MutationOutcome) -> dict[str, JsonValue]:
    """Render one accepted write as ``{record, continuation?}``."""
    content: dict[str, JsonValue] = {"record": outcome.record}
    if outcome.continuation is not None:
        content["continuation"] = {
            "timestamp": outcome.continuation.timestamp,
            "token": outcome.continuation.token,
            "linkPayload": outcome.continuation.link_payload,
        }
    if outcome.path is MutationPath.ADMIN_OVERRIDE and outcome.created:
        content["created"] = True
    return content


def register_routes(
    *,
    router: APIRouter,
    settings: IntakeSettings,
    services: IntakeServices,
) -> None:
    """Register every intake route on ``router``."""
    max_body_bytes = resolve_submission_engine_settings(settings).max_body_bytes
    health_timeout = settings.server.health_timeout_seconds

    async def read_body(request: Request) -> tuple[object, JSONResponse | None]:
        try:
            return await read_json_body(request, max_bytes=max_body_bytes), None
        except PayloadTooLargeError as exc:
            return None, error_response(
                [validation_error(exc.message, code=codes.PAYLOAD_TOO_LARGE)]
            )
        except InvalidJsonBodyError:
            return None, error_response(
                [validation_error("Invalid JSON body.", code=codes.INVALID_ARGUMENT)]
            )

    async def spend_quota(
        meta: EnvelopeMeta, request: Request, endpoint: str
    ) -> JSONResponse | None:
        result = await run_in_threadpool(
            services.quota.check_quota,
            meta=meta,
            caller_id=caller_identity(request),
            endpoint=endpoint,
        )
        if not result.ok:
            return error_response(result.errors)
        decision = result.value
        if decision is not None and decision.limited:
            return error_response([rate_limited_error()])
        return None

    @router.post("/submissions")
    async def submit(request: Request) -> JSONResponse:
        meta = _request_meta(request)
        body, rejected = await read_body(request)
        if rejected is not None:
            return rejected

        override = isinstance(body, dict) and _present(body.get("overrideId"))
        limited = await spend_quota(
            meta, request, "admin-update" if override else "submit"
        )
        if limited is not None:
            return limited

        admin = None
        if override:
            decision = services.admin_gate.authorize(admin_credential(request, body))
            if decision.error is not None:
                return error_response([decision.error])
            admin = decision.identity

        result = await run_in_threadpool(
            services.engine.submit,
            meta=meta,
            body=body,
            admin=admin,
            client=client_context(request, site_url=settings.profile.site_url),
        )
        if not result.ok or result.value is None:
            return error_response(result.errors)
        outcome = result.value
        if outcome.discarded:
            return JSONResponse(status_code=200, content={"success": True})
        return JSONResponse(
            status_code=201 if outcome.path is MutationPath.CREATE else 200,
            content=outcome_content(outcome),
        )

    @router.get("/submissions/by-token")
    async def submission_by_token(request: Request, token: str = "") -> JSONResponse:
        meta = _request_meta(request)
        limited = await spend_quota(meta, request, "get-submission-by-token")
        if limited is not None:
            return limited
        result = await run_in_threadpool(
            services.engine.get_by_token, meta=meta, token=token
        )
        if not result.ok or result.value is None:
            return error_response(result.errors)
        submission = result.value
        return JSONResponse(
            content={"submission": {"id": submission.id, **submission.fields}}
        )

    @router.post("/submissions/check-duplicate")
    async def check_duplicate(request: Request) -> JSONResponse:
        meta = _request_meta(request)
        limited = await spend_quota(meta, request, "check-duplicate")
        if limited is not None:
            return limited
        body, rejected = await read_body(request)
        if rejected is not None:
            return rejected
        if not isinstance(body, dict):
            return error_response(
                [validation_error("Request body must be a JSON object.")]
            )

        result = await run_in_threadpool(
            services.engine.check_duplicate,
            meta=meta,
            email=_text(body.get("email")),
            brand_name=_text(body.get("brandName")),
        )
        if not result.ok:
            return error_response(result.errors)
        return JSONResponse(content={"duplicate": bool(result.value)})

    @router.post("/deliver")
    async def deliver(request: Request, background: BackgroundTasks) -> JSONResponse:
        meta = _request_meta(request)
        limited = await spend_quota(meta, request, "deliver")
        if limited is not None:
            return limited
        body, rejected = await read_body(request)
        if rejected is not None:
            return rejected
        if not isinstance(body, dict):
            return error_response(
                [validation_error("Request body must be a JSON object.")]
            )

        result = await run_in_threadpool(
            services.delivery.accept_delivery, meta=meta, body=body
        )
        if not result.ok or result.value is None:
            return error_response(result.errors)
        background.add_task(services.delivery.dispatch, meta=meta, ticket=result.value)
        return JSONResponse(content={"success": True})

    @router.get("/admin/submissions")
    async def list_submissions(request: Request) -> JSONResponse:
        meta = _request_meta(request)
        limited = await spend_quota(meta, request, "admin-update")
        if limited is not None:
            return limited
        decision = services.admin_gate.authorize(admin_credential(request))
        if decision.error is not None:
            return error_response([decision.error])

        result = await run_in_threadpool(
            services.engine.list_submissions, meta=meta, admin=decision.identity
        )
        if not result.ok or result.value is None:
            return error_response(result.errors)
        return JSONResponse(
            content={
                "submissions": [
                    item.model_dump(mode="json", by_alias=True)
                    for item in result.value
                ]
            }
        )

    @router.delete("/admin/submissions/{submission_id}")
    async def delete_submission(request: Request, submission_id: str) -> JSONResponse:
        meta = _request_meta(request)
        limited = await spend_quota(meta, request, "admin-update")
        if limited is not None:
            return limited
        decision = services.admin_gate.authorize(admin_credential(request))
        if decision.error is not None:
            return error_response([decision.error])

        result = await run_in_threadpool(
            services.engine.delete_submission,
            meta=meta,
            admin=decision.identity,
            submission_id=submission_id,
        )
        if not result.ok:
            return error_response(result.errors)
        return JSONResponse(content={"deleted": True})

    @router.get("/health")
    async def health() -> JSONResponse:
        result = await run_in_threadpool(
            evaluate_intake_health,
            components=services.health_components(),
            max_timeout_seconds=health_timeout,
        )
        return JSONResponse(
            status_code=200 if result.ready else 503,
            content=result.model_dump(mode="json"),
        )


def create_intake_app(*, settings: IntakeSettings, services: IntakeServices) -> FastAPI:
    """Create the FastAPI application with every intake route registered."""
    app = create_app(title="Intake API")
    router = APIRouter()
    register_routes(router=router, settings=settings, services=services)
    app.include_router(router)
    return app


def _request_meta(request: Request) -> EnvelopeMeta:
    return new_meta(
        kind=EnvelopeKind.COMMAND,
        source="intake_http",
        principal=caller_identity(request),
    )


def _present(value: object) -> bool:
    if value is None:
        return False
    return not (isinstance(value, str) and value.strip() == "")


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""
