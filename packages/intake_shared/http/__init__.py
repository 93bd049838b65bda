"""Shared HTTP helpers: outbound httpx client and inbound FastAPI utilities."""

from .client import HttpClient
from .errors import (
    HttpClientError,
    HttpError,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpServerError,
    HttpStatusError,
    InvalidBodyError,
    InvalidJsonBodyError,
    PayloadTooLargeError,
)
from .server import create_app, get_header, read_json_body, run_app

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "HttpServerError",
    "HttpStatusError",
    "InvalidBodyError",
    "InvalidJsonBodyError",
    "PayloadTooLargeError",
    "create_app",
    "get_header",
    "read_json_body",
    "run_app",
]
