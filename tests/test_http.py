import pytest
import requests

from musebridge.errors import (
    ApiError,
    DecodingError,
    InvalidRequest,
    InvalidResponse,
    NetworkError,
    NotAuthorized,
    RateLimitExceeded,
)
from musebridge.sources.http import HttpClient, HttpRequest
from tests.utils import FakeResponse

URL = "https://api.example/v1/thing"


def serve(monkeypatch, response):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=15, **kwargs):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return response

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


def test_perform_decodes_success(monkeypatch):
    calls = serve(monkeypatch, FakeResponse(200, json_data={"value": 7}))

    result = HttpClient(timeout=5).perform(
        HttpRequest.get(URL, params={"limit": 1}, headers={"Authorization": "Bearer t"}),
        lambda data: data["value"],
    )

    assert result == 7
    assert calls == [{"url": URL, "params": {"limit": 1}, "headers": {"Authorization": "Bearer t"}, "timeout": 5}]


def test_perform_without_decoder_returns_none(monkeypatch):
    serve(monkeypatch, FakeResponse(204))
    assert HttpClient().perform(HttpRequest.get(URL)) is None


@pytest.mark.parametrize("status", [200, 201, 299])
def test_2xx_is_success(status):
    HttpClient.validate(FakeResponse(status))


def test_401_is_not_authorized():
    with pytest.raises(NotAuthorized):
        HttpClient.validate(FakeResponse(401))


def test_429_carries_retry_after():
    with pytest.raises(RateLimitExceeded) as excinfo:
        HttpClient.validate(FakeResponse(429, headers={"Retry-After": "30"}))
    assert excinfo.value.retry_after == 30.0
    assert str(excinfo.value) == "Rate limit exceeded. Please try again in 30 seconds."


def test_429_with_bracketed_retry_after_is_ignored():
    with pytest.raises(RateLimitExceeded) as excinfo:
        HttpClient.validate(FakeResponse(429, headers={"Retry-After": "[/bad]"}))
    assert excinfo.value.retry_after is None


def test_429_without_retry_after():
    with pytest.raises(RateLimitExceeded) as excinfo:
        HttpClient.validate(FakeResponse(429))
    assert excinfo.value.retry_after is None
    assert str(excinfo.value) == "Rate limit exceeded. Please try again later."


@pytest.mark.parametrize("status", [400, 403, 404, 499, 500, 503, 599])
def test_other_4xx_and_5xx_are_api_errors(status):
    with pytest.raises(ApiError) as excinfo:
        HttpClient.validate(FakeResponse(status, text="nope"))
    assert excinfo.value.status_code == status
    assert excinfo.value.message == "nope"
    assert str(excinfo.value) == f"API error (code {status}): nope"


@pytest.mark.parametrize("status", [100, 302, 304, 600])
def test_unexpected_status_is_invalid_response(status):
    with pytest.raises(InvalidResponse):
        HttpClient.validate(FakeResponse(status))


def test_transport_failure_is_network_error(monkeypatch):
    def fake_get(url, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests, "get", fake_get)

    with pytest.raises(NetworkError) as excinfo:
        HttpClient().perform(HttpRequest.get(URL), dict)
    assert isinstance(excinfo.value.cause, requests.Timeout)


def test_decode_failure_after_success_is_decoding_error(monkeypatch):
    serve(monkeypatch, FakeResponse(200, json_data={"other": 1}))

    with pytest.raises(DecodingError) as excinfo:
        HttpClient().perform(HttpRequest.get(URL), lambda data: data["value"])
    assert isinstance(excinfo.value.cause, KeyError)


def test_invalid_json_is_decoding_error(monkeypatch):
    serve(monkeypatch, FakeResponse(200, json_data=ValueError("Expecting value"), text="<html>"))

    with pytest.raises(DecodingError):
        HttpClient().perform(HttpRequest.get(URL), dict)


def test_post_form_sends_form_body(monkeypatch):
    seen = {}

    def fake_post(url, data=None, headers=None, timeout=15, **kwargs):
        seen.update(url=url, data=data, headers=headers)
        return FakeResponse(200, json_data={"ok": True})

    monkeypatch.setattr(requests, "post", fake_post)

    result = HttpClient().perform(HttpRequest.post_form(URL, {"a": "1"}), lambda data: data["ok"])

    assert result is True
    assert seen == {"url": URL, "data": {"a": "1"}, "headers": {"Content-Type": "application/x-www-form-urlencoded"}}


def test_unsupported_method_is_invalid_request():
    with pytest.raises(InvalidRequest):
        HttpClient().perform(HttpRequest("DELETE", URL))
