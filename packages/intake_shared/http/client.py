"""Minimal shared HTTP client wrapper over httpx."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .errors import HttpJsonDecodeError, HttpRequestError, HttpStatusError

_MAX_ERROR_BODY_CHARS = 2000


def _response_text(response: httpx.Response) -> str:
    """Return a bounded response text without raising decode errors."""
    try:
        return response.text[:_MAX_ERROR_BODY_CHARS]
    except Exception:  # noqa: BLE001
        return ""


class HttpClient:
    """Thin synchronous wrapper over ``httpx.Client`` with typed failures."""

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            transport=transport,
        )

    def close(self) -> None:
        """Close underlying transport resources."""
        self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one request, raising typed errors for transport and status failures."""
        try:
            response = self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            raise HttpRequestError(
                message=f"HTTP request failed for {method.upper()} {url}",
                method=method.upper(),
                url=url,
                retryable=True,
                cause=exc,
            ) from exc

        if response.is_error:
            status_code = response.status_code
            raise HttpStatusError(
                message=f"HTTP {status_code} for {method.upper()} {url}",
                method=method.upper(),
                url=url,
                retryable=status_code >= 500 or status_code == 429,
                status_code=status_code,
                response_body=_response_text(response),
            )
        return response

    def post_json(self, url: str, *, json: Any, **kwargs: Any) -> Any:
        """POST a JSON body and decode the JSON response."""
        response = self.request("POST", url, json=json, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise HttpJsonDecodeError(
                message=f"Invalid JSON response for POST {url}",
                method="POST",
                url=url,
                status_code=response.status_code,
            ) from exc
