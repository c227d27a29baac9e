"""Spotify Web API provider."""

from .auth import SpotifyTokenManager
from .client import SpotifyAPIClient
from .provider import SpotifyProvider

__all__ = [
    "SpotifyAPIClient",
    "SpotifyProvider",
    "SpotifyTokenManager",
]
