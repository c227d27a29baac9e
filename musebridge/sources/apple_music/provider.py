"""Apple Music implementation of the music provider interface."""

from __future__ import annotations

from typing import Callable, List, Optional, Union

from musebridge.errors import (
    AuthorizationDenied,
    AuthorizationFailed,
    MusicBridgeError,
    NotAuthorized,
    ProviderSpecificError,
)
from musebridge.logger import get_logger
from musebridge.sources.apple_music.library import (
    LIBRARY_REQUEST_LIMIT,
    AuthorizationStatus,
    LibraryAlbum,
    LibraryPlaylist,
    LibraryRequest,
    MediaLibrary,
)
from musebridge.sources.apple_music.mapping import album_from_library, playlist_from_library
from musebridge.sources.base import Album, MusicProvider, Playlist, ProviderType
from musebridge.sources.links import apple_music_link

logger = get_logger(__name__)


class AppleMusicProvider(MusicProvider):
    """
    Apple Music library access through the native media library.

    Args:
        library: Adapter over the host's media-library SDK
        limit: Result ceiling for each library request
    """

    type = ProviderType.APPLE_MUSIC

    def __init__(self, library: MediaLibrary, *, limit: int = LIBRARY_REQUEST_LIMIT) -> None:
        self.library = library
        self.limit = limit

    async def is_authorized(self) -> bool:
        return self.library.authorization_status() is AuthorizationStatus.AUTHORIZED

    async def authorize(self) -> None:
        status = await self.library.request_authorization()
        logger.info(f"Apple Music authorization status: {status.value}")

        if status is AuthorizationStatus.AUTHORIZED:
            return
        if status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            raise AuthorizationDenied()
        raise AuthorizationFailed()

    async def _fetch(self, item_type: type, mapper: Callable, error_code: str) -> list:
        if not await self.is_authorized():
            raise NotAuthorized()
        try:
            items = await self.library.fetch(LibraryRequest(item_type, limit=self.limit))
            return [mapper(item) for item in items]
        except MusicBridgeError:
            raise
        except Exception as e:
            logger.error(f"Apple Music library request for {item_type.__name__} failed: {e}")
            raise ProviderSpecificError(self.type, error_code, str(e), cause=e) from e

    async def fetch_albums(self) -> List[Album]:
        return await self._fetch(LibraryAlbum, album_from_library, "fetch_albums_failed")

    async def fetch_playlists(self) -> List[Playlist]:
        return await self._fetch(LibraryPlaylist, playlist_from_library, "fetch_playlists_failed")

    def get_deep_link(self, item: Union[Album, Playlist]) -> Optional[str]:
        return apple_music_link(item)
