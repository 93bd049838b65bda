"""Unit tests for the shared HTTP client wrapper."""

from __future__ import annotations

import json

import httpx
import pytest

from packages.intake_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)


def _client(handler) -> HttpClient:
    return HttpClient(
        base_url="https://api.example.test",
        transport=httpx.MockTransport(handler),
    )


def test_post_json_sends_body_and_returns_decoded_payload() -> None:
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.content)
        return httpx.Response(200, json={"id": "msg-1"}, request=request)

    with _client(handler) as client:
        assert client.post_json("/emails", json={"to": ["a@x.com"]}) == {"id": "msg-1"}

    assert [json.loads(body) for body in seen] == [{"to": ["a@x.com"]}]


@pytest.mark.parametrize(("status", "retryable"), [(503, True), (429, True), (422, False)])
def test_status_failure_maps_to_typed_error(status: int, retryable: bool) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text="nope", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            client.post_json("/emails", json={})

    error = exc_info.value
    assert error.method == "POST"
    assert error.status_code == status
    assert error.retryable is retryable
    assert error.response_body == "nope"


def test_transport_failure_maps_to_typed_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection failed", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpRequestError) as exc_info:
            client.post_json("/health", json={})

    error = exc_info.value
    assert error.method == "POST"
    assert error.url == "/health"
    assert error.retryable is True
    assert isinstance(error.cause, httpx.ConnectError)


def test_non_json_success_body_maps_to_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not-json", request=request)

    with _client(handler) as client:
        with pytest.raises(HttpJsonDecodeError) as exc_info:
            client.post_json("/emails", json={})

    assert exc_info.value.status_code == 200
    assert exc_info.value.method == "POST"
