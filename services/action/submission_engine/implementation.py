"""Concrete Submission Engine Service implementation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable
from urllib.parse import quote

from pydantic import JsonValue

from packages.intake_shared.continuation import (
    ContinuationConfigurationError,
    ContinuationSigner,
)
from packages.intake_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    utc_now,
    validate_meta,
)
from packages.intake_shared.errors import (
    ErrorCategory,
    ErrorDetail,
    codes,
    dependency_error,
    expired_error,
    not_found_error,
    policy_error,
    validation_error,
)
from packages.intake_shared.form_catalog import (
    ADMIN_FIELDS,
    CAPTCHA_TOKEN_FIELD,
    CLIENT_FIELDS,
    COUNTRY_FIELD,
)
from packages.intake_shared.logging import get_logger, public_api_instrumented
from resources.adapters.captcha import CaptchaAdapterError, CaptchaVerifier
from services.action.submission_engine.component import SERVICE_COMPONENT_ID
from services.action.submission_engine.config import (
    SubmissionEngineProfile,
    SubmissionEngineSettings,
)
from services.action.submission_engine.domain import (
    AdminIdentity,
    ClientContext,
    ContinuationGrant,
    EditableSubmission,
    HealthStatus,
    MutationOutcome,
    MutationPath,
    SubmissionSummary,
)
from services.action.submission_engine.fields import (
    FieldValidationError,
    clean_fields,
    honeypot_triggered,
    is_uuid,
    resolve_language,
    strip_control_fields,
)
from services.action.submission_engine.service import SubmissionEngineService
from services.state.submission_authority.domain import SubmissionRecord
from services.state.submission_authority.ledger import edited_entry
from services.state.submission_authority.service import SubmissionAuthorityService

_LOGGER = get_logger(__name__)

_EDIT_TOKEN_KEYS = ("editToken", "__editToken")
_NOTE_MAX_LENGTH = 200

LINK_NOT_FOUND = "Edit link not found or already used."
LINK_EXPIRED = "This edit link has expired."
CAPTCHA_MISSING = "Security check token missing. Please reload and try again."
CAPTCHA_FAILED = "Security check failed. Please reload and try again."
CAPTCHA_UNAVAILABLE = (
    "Security check could not be completed. Please try again in a moment."
)


class DefaultSubmissionEngineService(SubmissionEngineService):
    """Resolve one of three write paths and drive the submission authority.

    Create and token edit return a continuation over the public record so a
    client can trigger delivery. An admin override never does.
    """

    def __init__(
        self,
        *,
        settings: SubmissionEngineSettings,
        profile: SubmissionEngineProfile,
        submission_service: SubmissionAuthorityService,
        signer: ContinuationSigner,
        clock: Callable[[], datetime] = utc_now,
        captcha: CaptchaVerifier | None = None,
    ) -> None:
        self._settings = settings
        self._profile = profile
        self._submissions = submission_service
        self._signer = signer
        self._clock = clock
        self._captcha = captcha

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def submit(
        self,
        *,
        meta: EnvelopeMeta,
        body: Mapping[str, JsonValue],
        admin: AdminIdentity | None = None,
        client: ClientContext | None = None,
    ) -> Envelope[MutationOutcome]:
        """Apply one create, token edit or admin override from ``body``.

        Client writes pass the bot check after the honeypot; an admin
        override is authenticated instead and skips it.
        """
        client = client or ClientContext()
        errors = self._validate_body(meta=meta, body=body)
        if errors:
            return failure(meta=meta, errors=errors)

        path, path_error = _resolve_path(body)
        if path_error is not None:
            return failure(meta=meta, errors=[path_error])
        if path is MutationPath.ADMIN_OVERRIDE:
            return self._admin_override(meta=meta, body=body, admin=admin)

        lang = resolve_language(body)
        if honeypot_triggered(body):
            _LOGGER.info("submission discarded by honeypot: path=%s", path.value)
            return success(
                meta=meta,
                payload=MutationOutcome(path=path, discarded=True, lang=lang),
            )

        captcha_error = self._check_captcha(body=body, client=client)
        if captcha_error is not None:
            return failure(meta=meta, errors=[captcha_error])

        payload = strip_control_fields(body)
        try:
            fields = clean_fields(payload, allowed=CLIENT_FIELDS)
        except FieldValidationError as exc:
            return failure(meta=meta, errors=[_field_error(exc)])
        if client.country:
            fields[COUNTRY_FIELD] = client.country

        if path is MutationPath.TOKEN_EDIT:
            return self._token_edit(
                meta=meta, token=_edit_token_value(body), fields=fields, lang=lang
            )
        return self._create(meta=meta, fields=fields, lang=lang)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def get_by_token(
        self, *, meta: EnvelopeMeta, token: str
    ) -> Envelope[EditableSubmission]:
        """Return the client-editable view for a valid, unexpired token."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(meta=meta, errors=[_invalid(str(exc))])

        found = self._record_for_token(meta=meta, token=token)
        if not found.ok:
            return failure(meta=meta, errors=found.errors)
        record = found.value
        assert record is not None
        return success(
            meta=meta,
            payload=EditableSubmission(
                id=record.id,
                fields={
                    name: record.fields[name]
                    for name in CLIENT_FIELDS
                    if name in record.fields
                },
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def check_duplicate(
        self, *, meta: EnvelopeMeta, email: str, brand_name: str
    ) -> Envelope[bool]:
        """Report whether this email and brand pair was already submitted.

        A blank email or brand name is never a duplicate.
        """
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(meta=meta, errors=[_invalid(str(exc))])

        email = str(email or "").strip()
        brand_name = str(brand_name or "").strip()
        if email == "" or brand_name == "":
            return success(meta=meta, payload=False)
        return self._submissions.find_duplicate(
            meta=meta, email=email[:254], brand_name=brand_name[:120]
        )

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def list_submissions(
        self, *, meta: EnvelopeMeta, admin: AdminIdentity | None
    ) -> Envelope[list[SubmissionSummary]]:
        """List submissions newest first for an administrator."""
        if admin is None:
            return failure(meta=meta, errors=[_unauthenticated()])

        listed = self._submissions.list_submissions(meta=meta)
        if not listed.ok:
            return failure(meta=meta, errors=listed.errors)
        return success(
            meta=meta,
            payload=[
                SubmissionSummary(
                    id=record.id,
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                    history=record.history,
                    fields=dict(record.fields),
                )
                for record in listed.value or []
            ],
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("submission_id",),
    )
    def delete_submission(
        self,
        *,
        meta: EnvelopeMeta,
        admin: AdminIdentity | None,
        submission_id: str,
    ) -> Envelope[bool]:
        """Delete one submission for an administrator; missing is not found."""
        if admin is None:
            return failure(meta=meta, errors=[_unauthenticated()])
        if not is_uuid(submission_id):
            return failure(meta=meta, errors=[_invalid("Invalid submission id.")])

        deleted = self._submissions.delete_submission(
            meta=meta, submission_id=submission_id.strip()
        )
        if not deleted.ok:
            return failure(meta=meta, errors=deleted.errors)
        if not deleted.value:
            return failure(meta=meta, errors=[_not_found("Submission not found.")])
        _LOGGER.info(
            "submission deleted by admin: submission_id=%s admin_email=%s",
            submission_id,
            admin.email,
        )
        return success(meta=meta, payload=True)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return engine, submission store and signer readiness."""
        store = self._submissions.health(meta=meta)
        store_ready = bool(store.ok and store.value and store.value.store_ready)
        details = []
        if not store_ready:
            details.append(
                store.value.detail if store.value is not None else "store unavailable"
            )
        if not self._signer.configured:
            details.append("continuation secret is not configured")
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                submission_store_ready=store_ready,
                continuation_ready=self._signer.configured,
                detail="; ".join(details) or "ok",
            ),
        )

    def _create(
        self, *, meta: EnvelopeMeta, fields: dict[str, JsonValue], lang: str
    ) -> Envelope[MutationOutcome]:
        created = self._submissions.create_submission(
            meta=meta, fields=fields, created_by="client"
        )
        if not created.ok:
            return failure(meta=meta, errors=created.errors)
        record = created.value
        assert record is not None and record.edit_token is not None

        link = (
            f"{self._profile.site_url}/?token={quote(record.edit_token, safe='')}"
            f"&lang={lang}"
        )
        return success(
            meta=meta,
            payload=self._outcome(
                path=MutationPath.CREATE,
                record=record,
                link_payload=link,
                created=True,
                lang=lang,
            ),
        )

    def _token_edit(
        self,
        *,
        meta: EnvelopeMeta,
        token: str,
        fields: dict[str, JsonValue],
        lang: str,
    ) -> Envelope[MutationOutcome]:
        found = self._record_for_token(meta=meta, token=token)
        if not found.ok:
            return failure(meta=meta, errors=found.errors)
        record = found.value
        assert record is not None and record.edit_token is not None

        revised = self._submissions.revise_submission(
            meta=meta,
            submission_id=record.id,
            fields=fields,
            entry=edited_entry(edited_by="client", timestamp=self._clock()),
            edit_token=record.edit_token,
        )
        if not revised.ok:
            if revised.has_category(ErrorCategory.NOT_FOUND):
                return failure(meta=meta, errors=[_not_found(LINK_NOT_FOUND)])
            return failure(meta=meta, errors=revised.errors)
        assert revised.value is not None
        return success(
            meta=meta,
            payload=self._outcome(
                path=MutationPath.TOKEN_EDIT,
                record=revised.value,
                link_payload="",
                created=False,
                lang=lang,
            ),
        )

    def _admin_override(
        self,
        *,
        meta: EnvelopeMeta,
        body: Mapping[str, JsonValue],
        admin: AdminIdentity | None,
    ) -> Envelope[MutationOutcome]:
        if admin is None:
            return failure(meta=meta, errors=[_unauthenticated()])

        target = body.get("overrideId")
        if not is_uuid(target):
            return failure(meta=meta, errors=[_invalid("Missing or invalid overrideId.")])
        assert isinstance(target, str)
        target = target.strip().lower()

        raw_fields = body.get("fields", strip_control_fields(body))
        if not isinstance(raw_fields, dict):
            return failure(
                meta=meta, errors=[_invalid("Missing or invalid fields object.")]
            )
        if len(raw_fields) > self._settings.max_field_count:
            return failure(meta=meta, errors=[self._too_many_fields()])
        try:
            fields = clean_fields(raw_fields, allowed=ADMIN_FIELDS)
        except FieldValidationError as exc:
            return failure(meta=meta, errors=[_field_error(exc)])
        if len(fields) == 0:
            return failure(
                meta=meta, errors=[_invalid("No valid fields provided to update.")]
            )

        current = self._submissions.get_submission(meta=meta, submission_id=target)
        if not current.ok:
            return failure(meta=meta, errors=current.errors)

        if current.value is None:
            return self._override_missing(
                meta=meta, admin=admin, submission_id=target, fields=fields
            )

        revised = self._submissions.revise_submission(
            meta=meta,
            submission_id=target,
            fields=fields,
            entry=edited_entry(
                edited_by="admin",
                timestamp=self._clock(),
                note=_history_note(body.get("historyEntry")),
                admin_email=admin.email,
            ),
        )
        if not revised.ok:
            return failure(meta=meta, errors=revised.errors)
        assert revised.value is not None
        return success(
            meta=meta,
            payload=MutationOutcome(
                path=MutationPath.ADMIN_OVERRIDE,
                record=revised.value.public_view(),
            ),
        )

    def _override_missing(
        self,
        *,
        meta: EnvelopeMeta,
        admin: AdminIdentity,
        submission_id: str,
        fields: dict[str, JsonValue],
    ) -> Envelope[MutationOutcome]:
        """Handle an override whose target id does not exist."""
        if self._settings.override_missing_target == "reject":
            return failure(meta=meta, errors=[_not_found("Submission not found.")])

        _LOGGER.warning(
            "admin override target missing; inserting new submission: "
            "submission_id=%s admin_email=%s",
            submission_id,
            admin.email,
        )
        created = self._submissions.create_submission(
            meta=meta,
            fields=fields,
            created_by="admin",
            submission_id=submission_id,
            issue_edit_token=False,
        )
        if not created.ok:
            return failure(meta=meta, errors=created.errors)
        assert created.value is not None
        return success(
            meta=meta,
            payload=MutationOutcome(
                path=MutationPath.ADMIN_OVERRIDE,
                record=created.value.public_view(),
                created=True,
            ),
        )

    def _record_for_token(
        self, *, meta: EnvelopeMeta, token: object
    ) -> Envelope[SubmissionRecord]:
        """Look up a live edit token: 400 bad format, 404 unknown, 410 expired."""
        if not is_uuid(token):
            return failure(meta=meta, errors=[_invalid("Invalid edit token format.")])
        assert isinstance(token, str)

        found = self._submissions.get_submission_by_edit_token(
            meta=meta, edit_token=token.strip()
        )
        if not found.ok:
            return failure(meta=meta, errors=found.errors)
        record = found.value
        if record is None:
            return failure(meta=meta, errors=[_not_found(LINK_NOT_FOUND)])
        expires_at = record.edit_token_expires_at
        if expires_at is not None and expires_at < self._clock():
            return failure(
                meta=meta,
                errors=[expired_error(LINK_EXPIRED, code=codes.TOKEN_EXPIRED)],
            )
        return success(meta=meta, payload=record)

    def _outcome(
        self,
        *,
        path: MutationPath,
        record: SubmissionRecord,
        link_payload: str,
        created: bool,
        lang: str,
    ) -> MutationOutcome:
        """Build a client outcome, signing the public view when possible.

        A signing failure never undoes the write; the outcome then simply
        carries no continuation.
        """
        public = record.public_view()
        continuation: ContinuationGrant | None = None
        try:
            continuation = ContinuationGrant.from_continuation(
                self._signer.issue(record=public, link_payload=link_payload)
            )
        except ContinuationConfigurationError:
            _LOGGER.error(
                "continuation not issued; delivery will not run: submission_id=%s",
                record.id,
            )
        return MutationOutcome(
            path=path,
            record=public,
            continuation=continuation,
            created=created,
            lang=lang,
        )

    def _check_captcha(
        self, *, body: Mapping[str, JsonValue], client: ClientContext
    ) -> ErrorDetail | None:
        """Run the bot check; a configured verifier never fails open."""
        if self._captcha is None or not self._captcha.enabled:
            return None

        token = _captcha_token(body.get(CAPTCHA_TOKEN_FIELD))
        if token == "":
            return _invalid(CAPTCHA_MISSING)
        if client.local_request and self._captcha.local_bypass_allowed:
            _LOGGER.info("captcha check bypassed for local request")
            return None

        try:
            verdict = self._captcha.verify(token=token, remote_ip=client.remote_ip)
        except CaptchaAdapterError as exc:
            _LOGGER.error("captcha verification unavailable: error=%s", exc)
            return dependency_error(
                CAPTCHA_UNAVAILABLE, code=codes.BOT_CHECK_UNAVAILABLE
            )
        if not verdict.success:
            _LOGGER.warning(
                "captcha verification rejected: error_codes=%s",
                ",".join(verdict.error_codes) or "none",
            )
            return policy_error(CAPTCHA_FAILED, code=codes.PERMISSION_DENIED)
        return None

    def _validate_body(
        self, *, meta: EnvelopeMeta, body: object
    ) -> list[ErrorDetail]:
        """Validate metadata, body shape and the key-count cap."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return [_invalid(str(exc))]
        if not isinstance(body, Mapping):
            return [_invalid("Request body must be a JSON object.")]
        if len(body) > self._settings.max_field_count:
            return [self._too_many_fields()]
        return []

    def _too_many_fields(self) -> ErrorDetail:
        return validation_error(
            f"Too many fields (max {self._settings.max_field_count}).",
            code=codes.PAYLOAD_TOO_LARGE,
        )


def _resolve_path(
    body: Mapping[str, JsonValue],
) -> tuple[MutationPath, ErrorDetail | None]:
    has_override = _present(body.get("overrideId"))
    has_token = any(_present(body.get(key)) for key in _EDIT_TOKEN_KEYS)
    if has_override and has_token:
        return MutationPath.ADMIN_OVERRIDE, _invalid(
            "overrideId and editToken cannot be combined."
        )
    if has_override:
        return MutationPath.ADMIN_OVERRIDE, None
    if has_token:
        return MutationPath.TOKEN_EDIT, None
    return MutationPath.CREATE, None


def _present(value: object) -> bool:
    if value is None:
        return False
    return not (isinstance(value, str) and value.strip() == "")


def _edit_token_value(body: Mapping[str, JsonValue]) -> Any:
    for key in _EDIT_TOKEN_KEYS:
        if _present(body.get(key)):
            return body[key]
    return None


def _captcha_token(value: object) -> str:
    """Return the widget token, taking the first non-blank one from a list."""
    if isinstance(value, list):
        value = next(
            (item for item in value if isinstance(item, str) and item.strip()), ""
        )
    if not isinstance(value, str):
        return ""
    return value.strip()


def _history_note(value: object) -> str | None:
    if not isinstance(value, dict):
        return None
    note = value.get("note")
    if not isinstance(note, str):
        return None
    return note.strip()[:_NOTE_MAX_LENGTH] or None


def _field_error(exc: FieldValidationError) -> ErrorDetail:
    return validation_error(
        str(exc), code=codes.INVALID_ARGUMENT, metadata={"field": exc.field}
    )


def _invalid(message: str) -> ErrorDetail:
    return validation_error(message, code=codes.INVALID_ARGUMENT)


def _not_found(message: str) -> ErrorDetail:
    return not_found_error(message, code=codes.RESOURCE_NOT_FOUND)


def _unauthenticated() -> ErrorDetail:
    return policy_error("Unauthorized", code=codes.UNAUTHENTICATED)
