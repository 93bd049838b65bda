"""Canonical structured logging field names.

Keeping names centralized keeps log queries stable across services.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Envelope/correlation fields.
TRACE_ID = "trace_id"
ENVELOPE_ID = "envelope_id"
PARENT_ID = "parent_id"
SOURCE = "source"
PRINCIPAL = "principal"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT = "public_api_instrumentation_failure"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
ERROR_CATEGORIES = "error_categories"
STAGE = "stage"
CONCERN = "concern"

# Intake domain fields.
CALLER_ID = "caller_id"
ENDPOINT = "endpoint"
SUBMISSION_ID = "submission_id"
MUTATION_PATH = "mutation_path"
QUOTA_BACKEND = "quota_backend"
HTTP_METHOD = "http_method"
HTTP_PATH = "http_path"
HTTP_STATUS = "http_status"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
