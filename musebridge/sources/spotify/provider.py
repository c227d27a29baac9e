"""Spotify implementation of the music provider interface."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Union

from musebridge.config import SpotifyOAuthConfig
from musebridge.errors import MusicBridgeError, NotAuthorized, ProviderSpecificError
from musebridge.logger import get_logger
from musebridge.sources.base import Album, MusicProvider, Playlist, ProviderType
from musebridge.sources.consent import ConsentFlow
from musebridge.sources.credentials import CredentialStore
from musebridge.sources.http import HttpClient
from musebridge.sources.links import spotify_link
from musebridge.sources.oauth2 import TokenManager
from musebridge.sources.spotify.auth import SpotifyTokenManager
from musebridge.sources.spotify.client import SpotifyAPIClient
from musebridge.sources.spotify.mapping import album_from_saved, playlist_from_api

logger = get_logger(__name__)


class SpotifyProvider(MusicProvider):
    """
    Spotify library access over the Web API.

    The token manager and API client are blocking; every call into them runs
    on a worker thread so the event loop is never held up by network I/O.
    """

    type = ProviderType.SPOTIFY

    def __init__(
        self,
        config: Optional[SpotifyOAuthConfig] = None,
        *,
        token_manager: Optional[TokenManager] = None,
        api_client: Optional[SpotifyAPIClient] = None,
        store: Optional[CredentialStore] = None,
        consent: Optional[ConsentFlow] = None,
        http: Optional[HttpClient] = None,
    ) -> None:
        if token_manager is None:
            token_manager = SpotifyTokenManager(
                config or SpotifyOAuthConfig.from_env(),
                store=store,
                http=http,
                consent=consent,
            )
        self.token_manager = token_manager
        self.api_client = api_client or SpotifyAPIClient(token_manager, http=http)

    async def is_authorized(self) -> bool:
        return await asyncio.to_thread(self.token_manager.is_authorized)

    async def authorize(self) -> None:
        await self.token_manager.authorize()

    async def deauthorize(self) -> None:
        await asyncio.to_thread(self.token_manager.deauthorize)

    async def _ensure_authorized(self) -> None:
        if not await self.is_authorized():
            raise NotAuthorized()

    async def fetch_albums(self) -> List[Album]:
        await self._ensure_authorized()
        try:
            saved = await asyncio.to_thread(self.api_client.fetch_saved_albums)
            return [album_from_saved(item) for item in saved]
        except MusicBridgeError:
            raise
        except Exception as e:
            logger.error(f"Unexpected failure fetching Spotify albums: {e}")
            raise ProviderSpecificError(self.type, "fetch_albums_failed", str(e), cause=e) from e

    async def fetch_playlists(self) -> List[Playlist]:
        await self._ensure_authorized()
        try:
            playlists = await asyncio.to_thread(self.api_client.fetch_user_playlists)
            return [playlist_from_api(item) for item in playlists]
        except MusicBridgeError:
            raise
        except Exception as e:
            logger.error(f"Unexpected failure fetching Spotify playlists: {e}")
            raise ProviderSpecificError(self.type, "fetch_playlists_failed", str(e), cause=e) from e

    def get_deep_link(self, item: Union[Album, Playlist]) -> Optional[str]:
        return spotify_link(item)
