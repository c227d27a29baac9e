"""Deep links that open albums and playlists in the provider's app.

Native app links are preferred. The web form is only used when the ID cannot
be embedded verbatim in a native link.
"""

from __future__ import annotations

import re
from typing import Optional, Union
from urllib.parse import quote

from musebridge.sources.base import Album, Playlist, ProviderType

APPLE_MUSIC_APP_BASE = "music://music.apple.com"
APPLE_MUSIC_WEB_BASE = "https://music.apple.com"
SPOTIFY_WEB_BASE = "https://open.spotify.com"

_URI_SAFE = re.compile(r"[A-Za-z0-9._~-]+")


def _is_uri_safe(value: str) -> bool:
    return bool(_URI_SAFE.fullmatch(value))


def _apple_music(kind: str, apple_music_id: Optional[str]) -> Optional[str]:
    if not apple_music_id:
        return None
    if _is_uri_safe(apple_music_id):
        return f"{APPLE_MUSIC_APP_BASE}/{kind}/{apple_music_id}"
    return f"{APPLE_MUSIC_WEB_BASE}/{kind}/{quote(apple_music_id, safe='')}"


def _spotify(kind: str, spotify_id: Optional[str]) -> Optional[str]:
    if not spotify_id:
        return None
    if _is_uri_safe(spotify_id):
        return f"spotify:{kind}:{spotify_id}"
    return f"{SPOTIFY_WEB_BASE}/{kind}/{quote(spotify_id, safe='')}"


def apple_music_link(item: Union[Album, Playlist]) -> Optional[str]:
    """``music://`` link for an item carrying an Apple Music ID, else ``None``."""
    kind = "album" if isinstance(item, Album) else "playlist"
    return _apple_music(kind, item.apple_music_id)


def spotify_link(item: Union[Album, Playlist]) -> Optional[str]:
    """``spotify:<kind>:<id>`` URI for an item carrying a Spotify ID, else ``None``."""
    kind = "album" if isinstance(item, Album) else "playlist"
    return _spotify(kind, item.spotify_id)


def deep_link(item: Union[Album, Playlist]) -> Optional[str]:
    """Build a deep link for the provider the item itself came from."""
    if item.provider is ProviderType.APPLE_MUSIC:
        return apple_music_link(item)
    if item.provider is ProviderType.SPOTIFY:
        return spotify_link(item)
    return None
