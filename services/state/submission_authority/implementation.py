"""Concrete Submission Authority Service implementation."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable
from uuid import uuid4

from pydantic import BaseModel, JsonValue, ValidationError

from packages.intake_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    utc_now,
    validate_meta,
)
from packages.intake_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    not_found_error,
    validation_error,
)
from packages.intake_shared.logging import get_logger, public_api_instrumented
from resources.substrates.postgres import normalize_postgres_error
from services.state.submission_authority.component import SERVICE_COMPONENT_ID
from services.state.submission_authority.config import SubmissionAuthoritySettings
from services.state.submission_authority.domain import (
    EditedBy,
    HealthStatus,
    HistoryEntry,
    SubmissionRecord,
)
from services.state.submission_authority.interfaces import SubmissionRepository
from services.state.submission_authority.ledger import append_entry, original_entry
from services.state.submission_authority.service import SubmissionAuthorityService
from services.state.submission_authority.validation import (
    CreateSubmissionRequest,
    DeleteSubmissionRequest,
    EditTokenRequest,
    FindDuplicateRequest,
    GetSubmissionRequest,
    ReviseSubmissionRequest,
)

_LOGGER = get_logger(__name__)


class DefaultSubmissionAuthorityService(SubmissionAuthorityService):
    """Default implementation backed by a ``SubmissionRepository``.

    Every update is a compare-and-swap on ``version``. A lost race re-reads
    the row and re-applies the merge up to ``max_write_attempts`` times, so
    concurrent edits each append their own history entry.
    """

    def __init__(
        self,
        *,
        settings: SubmissionAuthoritySettings,
        repository: SubmissionRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._clock = clock

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("submission_id", "created_by"),
    )
    def create_submission(
        self,
        *,
        meta: EnvelopeMeta,
        fields: dict[str, JsonValue],
        created_by: EditedBy,
        submission_id: str | None = None,
        issue_edit_token: bool = True,
    ) -> Envelope[SubmissionRecord]:
        """Insert a new submission, optionally holding a fresh edit token."""
        request, errors = self._validate_request(
            meta=meta,
            model=CreateSubmissionRequest,
            payload={
                "submission_id": submission_id,
                "fields": fields,
                "created_by": created_by,
                "issue_edit_token": issue_edit_token,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, CreateSubmissionRequest)

        now = self._clock()
        edit_token = str(uuid4()) if request.issue_edit_token else None
        record = SubmissionRecord(
            id=request.submission_id or str(uuid4()),
            fields=dict(request.fields),
            history=(original_entry(edited_by=request.created_by, timestamp=now),),
            version=1,
            created_at=now,
            updated_at=now,
            edit_token=edit_token,
            edit_token_expires_at=(
                None
                if edit_token is None
                else now + timedelta(days=self._settings.edit_token_ttl_days)
            ),
        )
        try:
            stored = self._repository.insert_submission(record=record)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="create_submission", exc=exc)
        return success(meta=meta, payload=stored)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("submission_id",),
    )
    def get_submission(
        self, *, meta: EnvelopeMeta, submission_id: str
    ) -> Envelope[SubmissionRecord | None]:
        """Read one submission by id."""
        request, errors = self._validate_request(
            meta=meta,
            model=GetSubmissionRequest,
            payload={"submission_id": submission_id},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, GetSubmissionRequest)

        try:
            record = self._repository.get_submission(submission_id=request.submission_id)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="get_submission", exc=exc)
        return success(meta=meta, payload=record)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def get_submission_by_edit_token(
        self, *, meta: EnvelopeMeta, edit_token: str
    ) -> Envelope[SubmissionRecord | None]:
        """Read the submission currently holding ``edit_token``."""
        request, errors = self._validate_request(
            meta=meta,
            model=EditTokenRequest,
            payload={"edit_token": edit_token},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, EditTokenRequest)

        try:
            record = self._repository.get_by_edit_token(edit_token=request.edit_token)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(
                meta=meta, operation="get_submission_by_edit_token", exc=exc
            )
        return success(meta=meta, payload=record)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("submission_id",),
    )
    def revise_submission(
        self,
        *,
        meta: EnvelopeMeta,
        submission_id: str,
        fields: dict[str, JsonValue],
        entry: HistoryEntry,
        edit_token: str | None = None,
    ) -> Envelope[SubmissionRecord]:
        """Merge fields and append one history entry with optimistic retries."""
        request, errors = self._validate_request(
            meta=meta,
            model=ReviseSubmissionRequest,
            payload={
                "submission_id": submission_id,
                "fields": fields,
                "entry": entry,
                "edit_token": edit_token,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, ReviseSubmissionRequest)

        for attempt in range(1, self._settings.max_write_attempts + 1):
            try:
                current = self._repository.get_submission(
                    submission_id=request.submission_id
                )
            except Exception as exc:  # noqa: BLE001
                return self._store_failure(
                    meta=meta, operation="revise_submission", exc=exc
                )

            if current is None:
                return failure(meta=meta, errors=[_not_found("submission not found")])
            if request.edit_token is not None and current.edit_token != request.edit_token:
                return failure(
                    meta=meta,
                    errors=[_not_found("edit token not found or already used")],
                )

            try:
                updated = self._repository.update_submission(
                    submission_id=current.id,
                    expected_version=current.version,
                    fields={**current.fields, **request.fields},
                    history=append_entry(
                        current.history, request.entry, created_at=current.created_at
                    ),
                    updated_at=self._clock(),
                    expected_edit_token=request.edit_token,
                )
            except Exception as exc:  # noqa: BLE001
                return self._store_failure(
                    meta=meta, operation="revise_submission", exc=exc
                )

            if updated is not None:
                return success(meta=meta, payload=updated)
            _LOGGER.info(
                "submission write lost a concurrent update: submission_id=%s attempt=%d",
                current.id,
                attempt,
            )

        return failure(
            meta=meta,
            errors=[
                conflict_error(
                    "submission was modified concurrently; retry the request",
                    code=codes.CONCURRENT_MODIFICATION,
                    retryable=True,
                )
            ],
        )

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def find_duplicate(
        self, *, meta: EnvelopeMeta, email: str, brand_name: str
    ) -> Envelope[bool]:
        """Report whether a submission already uses this email and brand."""
        request, errors = self._validate_request(
            meta=meta,
            model=FindDuplicateRequest,
            payload={"email": email, "brand_name": brand_name},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, FindDuplicateRequest)

        try:
            found = self._repository.find_duplicate(
                email_key=request.email.lower(), brand_key=request.brand_name.lower()
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="find_duplicate", exc=exc)
        return success(meta=meta, payload=found)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def list_submissions(
        self, *, meta: EnvelopeMeta
    ) -> Envelope[list[SubmissionRecord]]:
        """List up to ``list_limit`` submissions newest first."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(
                meta=meta,
                errors=[validation_error(str(exc), code=codes.INVALID_ARGUMENT)],
            )
        try:
            records = self._repository.list_submissions(limit=self._settings.list_limit)
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="list_submissions", exc=exc)
        return success(meta=meta, payload=records)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("submission_id",),
    )
    def delete_submission(
        self, *, meta: EnvelopeMeta, submission_id: str
    ) -> Envelope[bool]:
        """Delete one submission by id."""
        request, errors = self._validate_request(
            meta=meta,
            model=DeleteSubmissionRequest,
            payload={"submission_id": submission_id},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, DeleteSubmissionRequest)

        try:
            deleted = self._repository.delete_submission(
                submission_id=request.submission_id
            )
        except Exception as exc:  # noqa: BLE001
            return self._store_failure(meta=meta, operation="delete_submission", exc=exc)
        return success(meta=meta, payload=deleted)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and database readiness."""
        try:
            store_ready = bool(self._repository.ping())
            detail = "ok" if store_ready else "submission store ping returned false"
        except Exception as exc:  # noqa: BLE001
            store_ready = False
            detail = f"submission store ping failed: {type(exc).__name__}"
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True, store_ready=store_ready, detail=detail
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

    def _store_failure(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
    ) -> Envelope[Any]:
        """Map repository exceptions into structured envelope errors."""
        _LOGGER.warning(
            "submission store operation failed: operation=%s exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(meta=meta, errors=[normalize_postgres_error(exc)])


def _not_found(message: str) -> ErrorDetail:
    return not_found_error(message, code=codes.RESOURCE_NOT_FOUND)
