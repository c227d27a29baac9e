"""OAuth configuration for the REST provider."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from dotenv import find_dotenv, load_dotenv

from musebridge.errors import InvalidRequest

SPOTIFY_AUTH_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE = "https://api.spotify.com/v1"

DEFAULT_REDIRECT_URI = "musee://spotify-callback"
DEFAULT_SCOPES: Tuple[str, ...] = (
    "user-library-read",
    "playlist-read-private",
    "playlist-read-collaborative",
)


@dataclass(frozen=True)
class SpotifyOAuthConfig:
    """Client credentials, redirect URI and scopes for the Spotify PKCE flow."""

    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: Tuple[str, ...] = DEFAULT_SCOPES

    def __post_init__(self) -> None:
        if not (self.client_id and self.client_secret):
            raise InvalidRequest("SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET must be set")
        # Accept any sequence but keep the instance hashable
        object.__setattr__(self, "scopes", tuple(self.scopes))

    @classmethod
    def from_env(
        cls,
        *,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> SpotifyOAuthConfig:
        """
        Build a config from keyword arguments, falling back to the environment.

        Reads ``SPOTIFY_CLIENT_ID``, ``SPOTIFY_CLIENT_SECRET``, ``SPOTIFY_REDIRECT_URI``
        and ``SPOTIFY_SCOPES`` (space or comma separated) after loading a ``.env`` file.
        """
        load_dotenv(find_dotenv(usecwd=True))  # Best-effort env load

        env_scopes = os.getenv("SPOTIFY_SCOPES")
        if scopes is None and env_scopes:
            scopes = [s for s in re.split(r"[\s,]+", env_scopes) if s]

        return cls(
            client_id=client_id or os.getenv("SPOTIFY_CLIENT_ID", ""),
            client_secret=client_secret or os.getenv("SPOTIFY_CLIENT_SECRET", ""),
            redirect_uri=redirect_uri or os.getenv("SPOTIFY_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
            scopes=tuple(scopes) if scopes else DEFAULT_SCOPES,
        )
