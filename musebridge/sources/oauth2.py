"""OAuth2 authorization-code flow with PKCE and token lifecycle management."""

from __future__ import annotations

import asyncio
import base64
import hashlib
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from musebridge.config import SpotifyOAuthConfig
from musebridge.errors import (
    AuthorizationFailed,
    MusicBridgeError,
    NotAuthorized,
    TokenRefreshFailed,
)
from musebridge.logger import get_logger
from musebridge.sources.consent import ConsentFlow
from musebridge.sources.credentials import CredentialStore, FileCredentialStore
from musebridge.sources.http import HttpClient, HttpRequest

logger = get_logger(__name__)

# Tokens are treated as expired when fewer than this many seconds remain.
EXPIRY_MARGIN = timedelta(seconds=300)


class TokenKeys:
    """Credential store keys holding the token state."""

    ACCESS_TOKEN = "accessToken"
    REFRESH_TOKEN = "refreshToken"
    EXPIRY = "tokenExpiry"

    ALL = (ACCESS_TOKEN, REFRESH_TOKEN, EXPIRY)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------------------------------------------------
# PKCE helpers
# ----------------------------------------------------------------------


def make_code_verifier() -> str:
    """Generate a random code verifier for PKCE (43 characters)."""
    return secrets.token_urlsafe(32)  # 32 bytes = 43 base64url chars, no padding


def make_code_challenge(verifier: str) -> str:
    """Create the S256 code challenge for a verifier."""
    digest = hashlib.sha256(verifier.encode()).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def extract_authorization_code(callback_url: Optional[str]) -> str:
    """Return the ``code`` query parameter of a redirect callback URL.

    A missing URL, an ``error`` parameter or a missing ``code`` all raise
    :class:`AuthorizationFailed`.
    """
    if not callback_url:
        raise AuthorizationFailed()
    query = parse_qs(urlsplit(callback_url).query)
    if "error" in query:
        logger.warning(f"Authorization callback reported an error: {query['error'][0]}")
        raise AuthorizationFailed()
    codes = query.get("code")
    if not codes or not codes[0]:
        raise AuthorizationFailed()
    return codes[0]


def _parse_expiry(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        expiry = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry


@dataclass(frozen=True)
class TokenResponse:
    """Token endpoint response body."""

    access_token: str
    token_type: str
    expires_in: int
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TokenResponse:
        return cls(
            access_token=data["access_token"],
            token_type=data["token_type"],
            expires_in=int(data["expires_in"]),
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
        )


class TokenManager(ABC):
    """
    Abstract base class for the OAuth2 PKCE flow of one service.

    Owns the authorize / refresh / expiry state machine and keeps a valid
    bearer token available on demand. Token state lives in a
    :class:`CredentialStore` under the keys of :class:`TokenKeys`.

    Every method that reads or changes the token state holds the manager's
    lock, so concurrent callers never refresh twice or observe a half-written
    token.
    """

    def __init__(
        self,
        config: SpotifyOAuthConfig,
        *,
        store: Optional[CredentialStore] = None,
        http: Optional[HttpClient] = None,
        consent: Optional[ConsentFlow] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize the token manager.

        Args:
            config: Client credentials, redirect URI and scopes
            store: Where token state is persisted (defaults to the JSON file store)
            http: Executor used for token endpoint requests
            consent: Interactive consent flow used by :meth:`authorize`
            clock: Returns the current aware UTC time
        """
        self.config = config
        self.store = store if store is not None else FileCredentialStore()
        self.http = http or HttpClient()
        self.consent = consent
        self.clock = clock
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Abstract methods - must be implemented by subclasses
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def auth_url(self) -> str:
        """Return the OAuth2 authorization endpoint URL."""

    @property
    @abstractmethod
    def token_url(self) -> str:
        """Return the OAuth2 token endpoint URL."""

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Return the name of the service (e.g. 'Spotify')."""

    def _requires_client_secret_for_exchange(self) -> bool:
        """Override if the service must not receive the secret on code exchange."""
        return True

    def _requires_client_secret_for_refresh(self) -> bool:
        """Override if the service must not receive the secret on refresh."""
        return True

    # ------------------------------------------------------------------
    # Authorization flow
    # ------------------------------------------------------------------

    def build_authorization_url(self, code_challenge: str) -> str:
        params = {
            "client_id": self.config.client_id,
            "response_type": "code",
            "redirect_uri": self.config.redirect_uri,
            "code_challenge_method": "S256",
            "code_challenge": code_challenge,
            "scope": " ".join(self.config.scopes),
        }
        return f"{self.auth_url}?{urlencode(params)}"

    async def authorize(self) -> None:
        """
        Run the full PKCE flow: consent, code exchange and token persistence.

        Raises:
            AuthorizationFailed: The consent flow failed, was cancelled by the
                user or returned a callback without a ``code``.
            MusicBridgeError: The code exchange or token storage failed.
        """
        if self.consent is None:
            raise AuthorizationFailed(RuntimeError("No consent flow configured"))

        verifier = make_code_verifier()
        url = self.build_authorization_url(make_code_challenge(verifier))

        logger.info(f"Starting {self.service_name} authorization")
        try:
            callback_url = await self.consent.run(url)
        except MusicBridgeError:
            raise
        except Exception as e:
            raise AuthorizationFailed(e) from e

        code = extract_authorization_code(callback_url)
        await asyncio.to_thread(self.exchange_code, code, verifier)
        logger.info(f"{self.service_name} authorization complete")

    def exchange_code(self, code: str, code_verifier: str) -> None:
        """
        Exchange an authorization code for tokens and persist them.

        Args:
            code: Authorization code from the redirect callback
            code_verifier: The verifier whose challenge was sent with the authorization URL
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "client_id": self.config.client_id,
            "code_verifier": code_verifier,
        }
        if self._requires_client_secret_for_exchange():
            data["client_secret"] = self.config.client_secret

        response = self.http.perform(HttpRequest.post_form(self.token_url, data), TokenResponse.from_dict)
        with self._lock:
            self._store_tokens(response)

    # ------------------------------------------------------------------
    # Token state
    # ------------------------------------------------------------------

    def _store_tokens(self, response: TokenResponse) -> None:
        self.store.store(response.access_token, TokenKeys.ACCESS_TOKEN)

        # Refresh responses may omit the refresh token; keep the previous one then
        if response.refresh_token:
            self.store.store(response.refresh_token, TokenKeys.REFRESH_TOKEN)

        expiry = self.clock() + timedelta(seconds=response.expires_in)
        self.store.store(expiry.isoformat(), TokenKeys.EXPIRY)

    def token_expiry(self) -> Optional[datetime]:
        return _parse_expiry(self.store.retrieve(TokenKeys.EXPIRY))

    def is_token_expired(self) -> bool:
        """A token with 300 seconds or less of validity left counts as expired; no expiry means expired."""
        with self._lock:
            expiry = self.token_expiry()
            if expiry is None:
                return True
            return self.clock() + EXPIRY_MARGIN >= expiry

    def refresh_access_token(self) -> None:
        """
        Refresh the access token using the stored refresh token.

        Raises:
            TokenRefreshFailed: No refresh token is stored or the token endpoint failed
        """
        with self._lock:
            refresh_token = self.store.retrieve(TokenKeys.REFRESH_TOKEN)
            if not refresh_token:
                raise TokenRefreshFailed()

            data = {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.config.client_id,
            }
            if self._requires_client_secret_for_refresh():
                data["client_secret"] = self.config.client_secret

            logger.debug(f"Refreshing {self.service_name} access token")
            try:
                response = self.http.perform(HttpRequest.post_form(self.token_url, data), TokenResponse.from_dict)
            except MusicBridgeError as e:
                logger.warning(f"{self.service_name} token refresh failed: {e}")
                raise TokenRefreshFailed(e) from e
            self._store_tokens(response)

    def is_authorized(self) -> bool:
        """
        Check for a usable token, refreshing an expired one as a side effect.

        Never raises: a failed refresh yields ``False``.
        """
        with self._lock:
            if not self.store.exists(TokenKeys.ACCESS_TOKEN):
                return False
            if not self.is_token_expired():
                return True
            try:
                self.refresh_access_token()
            except MusicBridgeError:
                return False
            return True

    def get_access_token(self) -> str:
        """
        Return a bearer token that is valid for at least the expiry margin.

        Raises:
            NotAuthorized: No token has ever been stored
            TokenRefreshFailed: The token was expired and could not be refreshed
        """
        with self._lock:
            token = self.store.retrieve(TokenKeys.ACCESS_TOKEN)
            if token is None:
                raise NotAuthorized()
            if not self.is_token_expired():
                return token

            self.refresh_access_token()
            token = self.store.retrieve(TokenKeys.ACCESS_TOKEN)
            if not token:
                raise TokenRefreshFailed()
            return token

    def deauthorize(self) -> None:
        """Remove all stored token state. Safe to call when nothing is stored."""
        with self._lock:
            # Access token first so a partial failure never leaves a usable stale token
            for key in TokenKeys.ALL:
                self.store.delete(key)
        logger.info(f"{self.service_name} tokens cleared")
