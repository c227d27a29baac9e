import asyncio
import base64
import hashlib
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from musebridge.errors import AuthorizationFailed, MusicBridgeError
from musebridge.sources.consent import ConsentFlow
from musebridge.sources.oauth2 import (
    TokenKeys,
    extract_authorization_code,
    make_code_challenge,
    make_code_verifier,
)
from musebridge.sources.spotify import SpotifyTokenManager
from tests.utils import FakeResponse


class FakeConsent(ConsentFlow):
    def __init__(self, callback_url=None, error=None):
        self.callback_url = callback_url
        self.error = error
        self.seen_urls = []

    async def run(self, authorization_url):
        self.seen_urls.append(authorization_url)
        if self.error:
            raise self.error
        return self.callback_url


def test_code_verifier_is_url_safe_and_long_enough():
    verifier = make_code_verifier()
    assert len(verifier) >= 43
    assert "=" not in verifier
    assert set(verifier) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")
    assert make_code_verifier() != verifier


def test_code_challenge_is_s256_of_verifier():
    # Example verifier/challenge pair from RFC 7636 appendix B
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    assert make_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    expected = base64.urlsafe_b64encode(hashlib.sha256(b"abc").digest()).rstrip(b"=").decode()
    assert make_code_challenge("abc") == expected


def test_spotify_authorization_url_contains_pkce_params(token_manager):
    url = token_manager.build_authorization_url("challenge123")
    parts = urlsplit(url)
    query = parse_qs(parts.query)

    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://accounts.spotify.com/authorize"
    assert query["client_id"] == ["cid"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["musee://spotify-callback"]
    assert query["code_challenge_method"] == ["S256"]
    assert query["code_challenge"] == ["challenge123"]
    assert query["scope"] == ["user-library-read playlist-read-private playlist-read-collaborative"]


def test_authorization_url_parameter_order(token_manager):
    query = urlsplit(token_manager.build_authorization_url("c")).query
    names = [pair.split("=")[0] for pair in query.split("&")]
    assert names == ["client_id", "response_type", "redirect_uri", "code_challenge_method", "code_challenge", "scope"]


def test_extract_authorization_code():
    assert extract_authorization_code("musee://spotify-callback?code=abc123&state=xyz") == "abc123"


@pytest.mark.parametrize(
    "callback_url",
    [
        None,
        "",
        "musee://spotify-callback",
        "musee://spotify-callback?state=xyz",
        "musee://spotify-callback?code=",
        "musee://spotify-callback?error=access_denied",
    ],
)
def test_extract_authorization_code_failures(callback_url):
    with pytest.raises(AuthorizationFailed):
        extract_authorization_code(callback_url)


def test_spotify_exchange_code_saves_tokens(monkeypatch, token_manager, store, tokens_payload):
    """Test that exchanging an auth code posts the PKCE form and stores tokens."""
    seen = {}

    def fake_post(url, data=None, headers=None, timeout=15, **kwargs):
        seen["url"] = url
        seen["data"] = data
        seen["headers"] = headers
        return FakeResponse(200, json_data=tokens_payload)

    monkeypatch.setattr(requests, "post", fake_post)

    token_manager.exchange_code("authcode123", "verifier123")

    assert seen["url"] == "https://accounts.spotify.com/api/token"
    assert seen["data"] == {
        "grant_type": "authorization_code",
        "code": "authcode123",
        "redirect_uri": "musee://spotify-callback",
        "client_id": "cid",
        "client_secret": "secret",
        "code_verifier": "verifier123",
    }
    assert seen["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert store.retrieve(TokenKeys.ACCESS_TOKEN) == "access123"
    assert store.retrieve(TokenKeys.REFRESH_TOKEN) == "refresh123"
    assert store.retrieve(TokenKeys.EXPIRY) == "2024-01-01T13:00:00+00:00"


def test_exchange_code_rejects_incomplete_token_response(monkeypatch, token_manager, store):
    monkeypatch.setattr(
        requests,
        "post",
        lambda url, data=None, timeout=15, **kw: FakeResponse(200, json_data={"access_token": "only"}),
    )

    with pytest.raises(MusicBridgeError):
        token_manager.exchange_code("code", "verifier")
    assert store.retrieve(TokenKeys.ACCESS_TOKEN) is None


def test_authorize_runs_full_pkce_flow(monkeypatch, config, store, clock, tokens_payload):
    posted = {}

    def fake_post(url, data=None, timeout=15, **kwargs):
        posted.update(data)
        return FakeResponse(200, json_data=tokens_payload)

    monkeypatch.setattr(requests, "post", fake_post)
    consent = FakeConsent("musee://spotify-callback?code=granted")
    manager = SpotifyTokenManager(config, store=store, clock=clock, consent=consent)

    asyncio.run(manager.authorize())

    challenge = parse_qs(urlsplit(consent.seen_urls[0]).query)["code_challenge"][0]
    assert posted["code"] == "granted"
    assert make_code_challenge(posted["code_verifier"]) == challenge
    assert manager.is_authorized() is True


def test_authorize_without_code_fails(config, store, clock):
    consent = FakeConsent("musee://spotify-callback?error=access_denied")
    manager = SpotifyTokenManager(config, store=store, clock=clock, consent=consent)

    with pytest.raises(AuthorizationFailed):
        asyncio.run(manager.authorize())
    assert manager.is_authorized() is False


def test_authorize_wraps_consent_failure(config, store, clock):
    boom = OSError("browser crashed")
    manager = SpotifyTokenManager(config, store=store, clock=clock, consent=FakeConsent(error=boom))

    with pytest.raises(AuthorizationFailed) as excinfo:
        asyncio.run(manager.authorize())
    assert excinfo.value.cause is boom


def test_authorize_requires_consent_flow(token_manager):
    with pytest.raises(AuthorizationFailed):
        asyncio.run(token_manager.authorize())


def test_callback_error_with_bracketed_text_fails_cleanly():
    with pytest.raises(AuthorizationFailed):
        extract_authorization_code("musee://spotify-callback?error=%5B/oops%5D")
