"""Spotify Web API client for the user's library."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from musebridge.config import SPOTIFY_API_BASE
from musebridge.logger import get_logger
from musebridge.sources.http import HttpClient, HttpRequest
from musebridge.sources.oauth2 import TokenManager
from musebridge.sources.spotify.schema import SavedAlbum, SpotifyPlaylist

logger = get_logger(__name__)

T = TypeVar("T")

# Spotify's maximum page size for library endpoints
PAGE_LIMIT = 50


class SpotifyAPIClient:
    """Offset/limit paginated reads from the Spotify Web API."""

    def __init__(
        self,
        token_manager: TokenManager,
        *,
        http: Optional[HttpClient] = None,
        page_limit: int = PAGE_LIMIT,
    ) -> None:
        self.token_manager = token_manager
        self.http = http or HttpClient()
        self.page_limit = page_limit

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _authenticated_get(self, path: str, params: Dict[str, Any]) -> HttpRequest:
        # Asked per request: a concurrent refresh may have replaced the token
        token = self.token_manager.get_access_token()
        return HttpRequest.get(f"{SPOTIFY_API_BASE}{path}", params=params, headers={"Authorization": f"Bearer {token}"})

    def _fetch_all(self, path: str, decode_item: Callable[[Dict[str, Any]], T]) -> List[T]:
        """
        Fetch every item of a paginated collection.

        Pages are requested sequentially. A page holding fewer than
        ``page_limit`` items ends the collection; a full page is always
        followed by another request, even if that one comes back empty.
        """

        def decode_page(payload: Dict[str, Any]) -> Tuple[int, List[T]]:
            raw = payload["items"]
            return len(raw), [decode_item(item) for item in raw if item is not None]

        items: List[T] = []
        offset = 0
        page_count = 0

        while True:
            request = self._authenticated_get(path, {"limit": self.page_limit, "offset": offset})
            received, page = self.http.perform(request, decode_page)
            items.extend(page)
            page_count += 1
            logger.debug(f"Fetched page {page_count} of {path} ({received} items at offset {offset})")

            if received < self.page_limit:
                break
            offset += self.page_limit

        logger.info(f"Fetched {len(items)} items from {path} across {page_count} pages")
        return items

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch_saved_albums(self) -> List[SavedAlbum]:
        """Get every album saved in the user's library."""
        return self._fetch_all("/me/albums", SavedAlbum.from_dict)

    def fetch_user_playlists(self) -> List[SpotifyPlaylist]:
        """Get every playlist owned or followed by the user."""
        return self._fetch_all("/me/playlists", SpotifyPlaylist.from_dict)
