"""Spotify OAuth2 PKCE token manager."""

from __future__ import annotations

from musebridge.config import SPOTIFY_AUTH_URL, SPOTIFY_TOKEN_URL
from musebridge.sources.oauth2 import TokenManager


class SpotifyTokenManager(TokenManager):
    """Token manager specifically for Spotify."""

    @property
    def auth_url(self) -> str:
        return SPOTIFY_AUTH_URL

    @property
    def token_url(self) -> str:
        return SPOTIFY_TOKEN_URL

    @property
    def service_name(self) -> str:
        return "Spotify"
