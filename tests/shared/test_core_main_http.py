"""HTTP surface tests: routing, quota guard, admin gate and status mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from packages.intake_core.auth import AdminGate
from packages.intake_core.http_api import (
    caller_identity,
    client_country,
    create_intake_app,
    is_local_request,
    status_for,
)
from packages.intake_core.runtime import IntakeServices
from packages.intake_shared.config import IntakeSettings
from packages.intake_shared.continuation import ContinuationSigner
from packages.intake_shared.errors import (
    codes,
    conflict_error,
    dependency_error,
    expired_error,
    policy_error,
    validation_error,
)
from resources.adapters.captcha import (
    CaptchaAdapterDependencyError,
    CaptchaVerdict,
    CaptchaVerifier,
)
from resources.adapters.email import (
    EmailAdapterHealthResult,
    EmailSendResult,
    OutboundEmail,
)
from resources.substrates.postgres import create_session_factory
from services.action.delivery.config import DeliverySettings
from services.action.delivery.implementation import DefaultDeliveryService
from services.action.submission_engine.config import (
    SubmissionEngineProfile,
    SubmissionEngineSettings,
)
from services.action.submission_engine.implementation import (
    DefaultSubmissionEngineService,
)
from services.state.quota_authority.config import QuotaAuthoritySettings
from services.state.quota_authority.implementation import DefaultQuotaAuthorityService
from services.state.submission_authority.config import SubmissionAuthoritySettings
from services.state.submission_authority.data.repository import (
    PostgresSubmissionRepository,
)
from services.state.submission_authority.data.schema import metadata
from services.state.submission_authority.implementation import (
    DefaultSubmissionAuthorityService,
)

SECRET = "http-test-continuation-secret"
ADMIN_TOKEN = "http-admin-token-0123456789"
STAFF_TOKEN = "http-staff-token-0123456789"
SITE_URL = "https://form.example.test"


@dataclass
class _RecordingEmailAdapter:
    sent: list[OutboundEmail] = field(default_factory=list)

    def send(self, *, message: OutboundEmail) -> EmailSendResult:
        self.sent.append(message)
        return EmailSendResult(delivered=True, message_id="m-1", detail="ok")

    def health(self) -> EmailAdapterHealthResult:
        return EmailAdapterHealthResult(adapter_ready=True, detail="ok")


@dataclass
class _Stack:
    client: TestClient
    email: _RecordingEmailAdapter


def _settings(**engine: object) -> IntakeSettings:
    return IntakeSettings(
        profile={
            "site_url": SITE_URL,
            "continuation_secret": SECRET,
            "admin_emails": ["owner@studio.test"],
            "admin_credentials": [
                {"token": ADMIN_TOKEN, "email": "owner@studio.test"},
                {"token": STAFF_TOKEN, "email": "staff@studio.test"},
            ],
        },
        components={"service": {"submission_engine": dict(engine)}},
    )


@pytest.fixture
def build_stack():
    """Return a factory wiring real services over SQLite and in-process quotas."""
    engines = []

    def _build(
        *,
        engine_settings: dict[str, object] | None = None,
        captcha: CaptchaVerifier | None = None,
    ) -> _Stack:
        settings = _settings(**(engine_settings or {}))
        sql_engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        metadata.create_all(sql_engine)
        engines.append(sql_engine)

        signer = ContinuationSigner(secret=SECRET)
        submissions = DefaultSubmissionAuthorityService(
            settings=SubmissionAuthoritySettings(),
            repository=PostgresSubmissionRepository(
                session_factory=create_session_factory(sql_engine)
            ),
        )
        email = _RecordingEmailAdapter()
        services = IntakeServices(
            quota=DefaultQuotaAuthorityService(
                settings=QuotaAuthoritySettings(backend="memory"), store=None
            ),
            submissions=submissions,
            engine=DefaultSubmissionEngineService(
                settings=SubmissionEngineSettings(**(engine_settings or {})),
                profile=SubmissionEngineProfile(
                    site_url=SITE_URL, continuation_secret=SECRET
                ),
                submission_service=submissions,
                signer=signer,
                captcha=captcha,
            ),
            delivery=DefaultDeliveryService(
                settings=DeliverySettings(admin_recipients=("owner@studio.test",)),
                signer=signer,
                email_adapter=email,
            ),
            admin_gate=AdminGate.from_profile(settings.profile),
        )
        app = create_intake_app(settings=settings, services=services)
        return _Stack(client=TestClient(app), email=email)

    yield _build
    for sql_engine in engines:
        sql_engine.dispose()


def _headers(caller: str = "203.0.113.7") -> dict[str, str]:
    return {"X-Forwarded-For": f"10.0.0.1, {caller}"}


def _create(stack: _Stack, caller: str = "203.0.113.7", **fields: object):
    body = {"brand-name": "Acme", "client-name": "Ada", "email": "a@x.com", **fields}
    return stack.client.post("/submissions", json=body, headers=_headers(caller))


def _token(response) -> str:
    link = response.json()["continuation"]["linkPayload"]
    return link.split("token=", 1)[1].split("&", 1)[0]


def test_create_returns_201_with_record_and_continuation(build_stack) -> None:
    stack = build_stack()

    response = _create(stack)

    assert response.status_code == 201
    payload = response.json()
    assert payload["record"]["brand-name"] == "Acme"
    assert "edit_token" not in payload["record"]
    continuation = payload["continuation"]
    assert set(continuation) == {"timestamp", "token", "linkPayload"}
    assert continuation["linkPayload"].startswith(f"{SITE_URL}/?token=")


def test_sixth_rapid_create_from_one_caller_is_rate_limited(build_stack) -> None:
    stack = build_stack()

    statuses = [_create(stack).status_code for _ in range(6)]
    other_caller = _create(stack, caller="198.51.100.9")

    assert statuses == [201, 201, 201, 201, 201, 429]
    assert other_caller.status_code == 201
    limited = _create(stack)
    assert limited.json() == {"error": "Too many requests. Please try again later."}


def test_token_edit_then_replay_is_not_found(build_stack) -> None:
    stack = build_stack()
    token = _token(_create(stack))

    fetched = stack.client.get(
        "/submissions/by-token", params={"token": token}, headers=_headers()
    )
    edited = stack.client.post(
        "/submissions",
        json={"email": "new@x.com", "editToken": token},
        headers=_headers(),
    )
    replay = stack.client.post(
        "/submissions",
        json={"email": "again@x.com", "editToken": token},
        headers=_headers(),
    )

    assert fetched.status_code == 200
    assert fetched.json()["submission"]["brand-name"] == "Acme"
    assert edited.status_code == 200
    assert edited.json()["record"]["email"] == "new@x.com"
    assert edited.json()["continuation"]["linkPayload"] == ""
    assert replay.status_code == 404
    assert replay.json() == {"error": "Edit link not found or already used."}


def test_bad_token_format_is_400(build_stack) -> None:
    stack = build_stack()

    response = stack.client.get(
        "/submissions/by-token", params={"token": "nope"}, headers=_headers()
    )

    assert response.status_code == 400


def test_validation_failure_returns_error_body(build_stack) -> None:
    stack = build_stack()

    response = _create(stack, email="not-an-email")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email address format."}


def test_oversized_body_is_413(build_stack) -> None:
    stack = build_stack(engine_settings={"max_body_bytes": 256})

    response = _create(stack, **{"brand-story": "x" * 1024})

    assert response.status_code == 413
    assert response.json() == {"error": "Payload too large."}


def test_malformed_json_is_400(build_stack) -> None:
    stack = build_stack()

    response = stack.client.post(
        "/submissions",
        content=b"{not json",
        headers={**_headers(), "Content-Type": "application/json"},
    )

    assert response.status_code == 400


@pytest.mark.parametrize(
    "content",
    [
        b"[" * 3000 + b"]" * 3000,
        b'{"email": ' + b"9" * 5000 + b"}",
    ],
)
def test_hostile_json_bodies_are_400(build_stack, content: bytes) -> None:
    """Nesting past the parser depth and huge int literals are plain bad JSON."""
    stack = build_stack()

    response = stack.client.post(
        "/submissions",
        content=content,
        headers={**_headers(), "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON body."}


def test_honeypot_submission_is_acknowledged_without_write(build_stack) -> None:
    stack = build_stack()

    response = _create(stack, website="http://spam.example")
    listing = stack.client.get(
        "/admin/submissions", headers={"Authorization": f"Bearer {ADMIN_TOKEN}"}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert listing.json()["submissions"] == []


def test_override_requires_admin_credentials(build_stack) -> None:
    stack = build_stack()
    target = str(uuid4())
    body = {"overrideId": target, "fields": {"status": "approved"}}

    missing = stack.client.post("/submissions", json=body, headers=_headers())
    staff = stack.client.post(
        "/submissions", json={**body, "adminAuth": STAFF_TOKEN}, headers=_headers()
    )

    assert missing.status_code == 401
    assert staff.status_code == 403


def test_override_of_missing_target_inserts_by_default(build_stack) -> None:
    stack = build_stack()
    target = str(uuid4())

    response = stack.client.post(
        "/submissions",
        json={
            "overrideId": target,
            "adminAuth": ADMIN_TOKEN,
            "fields": {"brand-name": "Fresh", "status": "approved"},
        },
        headers=_headers(),
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["created"] is True
    assert payload["record"]["id"] == target
    assert "continuation" not in payload


def test_override_of_missing_target_rejected_when_configured(build_stack) -> None:
    stack = build_stack(engine_settings={"override_missing_target": "reject"})

    response = stack.client.post(
        "/submissions",
        json={
            "overrideId": str(uuid4()),
            "fields": {"status": "approved"},
        },
        headers={**_headers(), "Authorization": f"Bearer {ADMIN_TOKEN}"},
    )

    assert response.status_code == 404


def test_check_duplicate_reports_boolean_only(build_stack) -> None:
    stack = build_stack()
    _create(stack)

    hit = stack.client.post(
        "/submissions/check-duplicate",
        json={"email": "A@X.com", "brandName": "acme"},
        headers=_headers(),
    )
    miss = stack.client.post(
        "/submissions/check-duplicate",
        json={"email": "a@x.com", "brandName": "Other"},
        headers=_headers(),
    )

    assert hit.json() == {"duplicate": True}
    assert miss.json() == {"duplicate": False}


def test_deliver_verifies_continuation_and_dispatches_in_background(
    build_stack,
) -> None:
    stack = build_stack()
    created = _create(stack).json()
    continuation = created["continuation"]

    response = stack.client.post(
        "/deliver",
        json={
            "record": created["record"],
            "timestamp": continuation["timestamp"],
            "token": continuation["token"],
            "linkPayload": continuation["linkPayload"],
        },
        headers=_headers(),
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    recipients = [message.to for message in stack.email.sent]
    assert ("owner@studio.test",) in recipients
    assert ("a@x.com",) in recipients


def test_deliver_rejects_tampered_record(build_stack) -> None:
    stack = build_stack()
    created = _create(stack).json()
    continuation = created["continuation"]

    response = stack.client.post(
        "/deliver",
        json={
            "record": {**created["record"], "brand-name": "Forged"},
            "timestamp": continuation["timestamp"],
            "token": continuation["token"],
            "linkPayload": continuation["linkPayload"],
        },
        headers=_headers(),
    )

    assert response.status_code == 403
    assert stack.email.sent == []


def test_admin_list_and_delete(build_stack) -> None:
    stack = build_stack()
    record_id = _create(stack).json()["record"]["id"]
    auth = {"Authorization": f"Bearer {ADMIN_TOKEN}"}

    listing = stack.client.get("/admin/submissions", headers=auth)
    anonymous = stack.client.get("/admin/submissions")
    deleted = stack.client.delete(f"/admin/submissions/{record_id}", headers=auth)
    again = stack.client.delete(f"/admin/submissions/{record_id}", headers=auth)

    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()["submissions"]] == [record_id]
    history = listing.json()["submissions"][0]["history"]
    assert history[0]["label"] == "original"
    assert history[0]["editedBy"] == "client"
    assert "edited_by" not in history[0]
    assert anonymous.status_code == 401
    assert deleted.json() == {"deleted": True}
    assert again.status_code == 404


def test_health_aggregates_component_readiness(build_stack) -> None:
    stack = build_stack()

    response = stack.client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["ready"] is True
    assert set(payload["components"]) == {
        "service_quota_authority",
        "service_submission_authority",
        "service_submission_engine",
        "service_delivery",
    }


def _request(headers: dict[str, str], client: tuple[str, int] | None) -> Request:
    raw = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in headers.items()
    ]
    return Request(
        {"type": "http", "method": "GET", "path": "/", "headers": raw, "client": client}
    )


def test_caller_identity_preference_order() -> None:
    peer = ("192.0.2.1", 5000)

    assert caller_identity(_request({"X-Forwarded-For": "1.1.1.1, 2.2.2.2"}, peer)) == (
        "2.2.2.2"
    )
    assert caller_identity(_request({"client-ip": "3.3.3.3"}, peer)) == "3.3.3.3"
    assert caller_identity(_request({}, peer)) == "192.0.2.1"
    assert caller_identity(_request({}, None)) == "unknown"
    assert len(caller_identity(_request({"client-ip": "x" * 200}, None))) == 64


def test_status_mapping_by_category_and_code() -> None:
    assert status_for([validation_error("bad")]) == 400
    assert status_for([validation_error("big", code=codes.PAYLOAD_TOO_LARGE)]) == 413
    assert status_for([expired_error("old")]) == 410
    assert status_for([policy_error("no", code=codes.UNAUTHENTICATED)]) == 401
    assert status_for([policy_error("no", code=codes.PERMISSION_DENIED)]) == 403
    assert status_for([conflict_error("race", retryable=True)]) == 409
    assert status_for([dependency_error("down")]) == 503


@dataclass
class _StubVerifier:
    verdict: CaptchaVerdict = field(default_factory=lambda: CaptchaVerdict(success=True))
    raise_error: Exception | None = None
    local_bypass_allowed: bool = False
    enabled: bool = True
    calls: list[tuple[str, str]] = field(default_factory=list)

    def verify(self, *, token: str, remote_ip: str = "") -> CaptchaVerdict:
        self.calls.append((token, remote_ip))
        if self.raise_error is not None:
            raise self.raise_error
        return self.verdict


def test_bot_check_maps_to_400_403_and_503(build_stack) -> None:
    """Missing, rejected and unverifiable tokens each fail closed."""
    passing = _StubVerifier()
    rejecting = _StubVerifier(verdict=CaptchaVerdict(success=False))
    broken = _StubVerifier(raise_error=CaptchaAdapterDependencyError("down"))
    token = {"cf-turnstile-response": "tok"}

    missing = _create(build_stack(captcha=passing))
    rejected = _create(build_stack(captcha=rejecting), **token)
    unavailable = _create(build_stack(captcha=broken), **token)
    accepted = _create(build_stack(captcha=passing), **token)

    assert missing.status_code == 400
    assert missing.json()["error"].startswith("Security check token missing")
    assert rejected.status_code == 403
    assert rejected.json()["error"].startswith("Security check failed")
    assert unavailable.status_code == 503
    assert unavailable.json() == {
        "error": "Security check could not be completed. Please try again in a moment."
    }
    assert accepted.status_code == 201
    assert passing.calls == [("tok", "203.0.113.7")]


def test_localhost_origin_bypasses_check_when_allowed(build_stack) -> None:
    verifier = _StubVerifier(
        verdict=CaptchaVerdict(success=False), local_bypass_allowed=True
    )
    stack = build_stack(captcha=verifier)
    body = {"brand-name": "Acme", "email": "a@x.com", "cf-turnstile-response": "dev"}

    remote = stack.client.post("/submissions", json=body, headers=_headers())
    local = stack.client.post(
        "/submissions",
        json=body,
        headers={**_headers("203.0.113.8"), "Origin": "http://localhost:5173"},
    )

    assert remote.status_code == 403
    assert local.status_code == 201
    assert len(verifier.calls) == 1


def test_edge_country_header_is_stored_on_record(build_stack) -> None:
    stack = build_stack()

    response = stack.client.post(
        "/submissions",
        json={"brand-name": "Acme", "email": "a@x.com", "client-country": "XX"},
        headers={**_headers(), "CF-IPCountry": "fr"},
    )

    assert response.status_code == 201
    assert response.json()["record"]["client-country"] == "France (FR)"


def test_client_country_header_preference_and_display() -> None:
    assert client_country(_request({"x-country": "de", "cf-ipcountry": "FR"}, None)) == (
        "Germany (DE)"
    )
    assert client_country(_request({"x-nf-country": " ", "cf-ipcountry": "zz"}, None)) == (
        "ZZ"
    )
    assert client_country(_request({}, None)) == ""


def test_local_request_detection() -> None:
    remote_site = "https://form.example.test"

    assert is_local_request(_request({"host": "localhost:8000"}, None), site_url=remote_site)
    assert is_local_request(
        _request({"referer": "http://127.0.0.1:3000/form"}, None), site_url=remote_site
    )
    assert is_local_request(_request({}, None), site_url="http://localhost:8000")
    assert not is_local_request(
        _request({"host": "form.example.test"}, None), site_url=remote_site
    )
