from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from musebridge.errors import InvalidData


class ProviderType(str, Enum):
    """The streaming service a record came from."""

    APPLE_MUSIC = "apple_music"
    SPOTIFY = "spotify"

    @property
    def id(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return {
            ProviderType.APPLE_MUSIC: "Apple Music",
            ProviderType.SPOTIFY: "Spotify",
        }[self]

    @property
    def localization_key(self) -> str:
        return f"settings.music_provider.{self.value}"


ARTWORK_SMALL = 300
ARTWORK_MEDIUM = 600
ARTWORK_LARGE = 1200


def _natural_key(text: str) -> tuple:
    # re.split with a group alternates text / digits, so positions line up across keys
    parts = re.split(r"(\d+)", text.casefold())
    return tuple(int(part) if i % 2 else part for i, part in enumerate(parts))


def _iso(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True, slots=True)
class Artwork:
    """Album or playlist artwork.

    Either a URL template containing ``{w}``/``{h}`` placeholders, up to three
    pre-resolved URLs at the small/medium/large breakpoints, or both.
    """

    url_template: Optional[str] = None
    url_300: Optional[str] = None
    url_600: Optional[str] = None
    url_1200: Optional[str] = None

    @classmethod
    def from_template(cls, template: Optional[str]) -> Artwork:
        return cls(
            url_template=template,
            url_300=cls._resolve(template, ARTWORK_SMALL, ARTWORK_SMALL),
            url_600=cls._resolve(template, ARTWORK_MEDIUM, ARTWORK_MEDIUM),
            url_1200=cls._resolve(template, ARTWORK_LARGE, ARTWORK_LARGE),
        )

    @staticmethod
    def _resolve(template: Optional[str], width: int, height: int) -> Optional[str]:
        if not template:
            return None
        return template.replace("{w}", str(width)).replace("{h}", str(height))

    def url(self, width: int, height: int) -> Optional[str]:
        """Return a URL for the requested size, or ``None`` if nothing resolves."""
        resolved = self._resolve(self.url_template, width, height)
        if resolved:
            return resolved

        if width < 450:
            candidates = (self.url_300, self.url_600, self.url_1200)
        elif width < 900:
            candidates = (self.url_600, self.url_1200, self.url_300)
        else:
            candidates = (self.url_1200, self.url_600, self.url_300)
        return next((url for url in candidates if url), None)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Artwork:
        return cls(
            url_template=data.get("url_template"),
            url_300=data.get("url_300"),
            url_600=data.get("url_600"),
            url_1200=data.get("url_1200"),
        )


def _check_provider_ids(kind: str, record_id: str, provider: ProviderType, apple_music_id, spotify_id) -> None:
    expected = {ProviderType.APPLE_MUSIC: apple_music_id, ProviderType.SPOTIFY: spotify_id}
    own = expected.pop(provider)
    if own != record_id or any(other is not None for other in expected.values()):
        raise InvalidData(f"{kind} {record_id!r} has provider IDs inconsistent with {provider.value}")


@dataclass(frozen=True, slots=True)
class Album:
    """A saved album from any provider."""

    id: str  # Unique within its provider
    title: str
    artist_name: str
    provider: ProviderType
    artwork: Optional[Artwork] = None
    release_date: Optional[date] = None
    library_added_date: Optional[datetime] = None
    track_count: Optional[int] = None
    apple_music_id: Optional[str] = None
    spotify_id: Optional[str] = None

    def __lt__(self, other: Album) -> bool:
        return _natural_key(self.title) < _natural_key(other.title)

    def validate(self) -> Album:
        """Raise :class:`InvalidData` unless exactly the provider's own ID is set."""
        _check_provider_ids("Album", self.id, self.provider, self.apple_music_id, self.spotify_id)
        return self

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "artist_name": self.artist_name,
            "provider": self.provider.value,
            "artwork": self.artwork.to_dict() if self.artwork else None,
            "release_date": _iso(self.release_date),
            "library_added_date": _iso(self.library_added_date),
            "track_count": self.track_count,
            "apple_music_id": self.apple_music_id,
            "spotify_id": self.spotify_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Album:
        return cls(
            id=data["id"],
            title=data["title"],
            artist_name=data["artist_name"],
            provider=ProviderType(data["provider"]),
            artwork=Artwork.from_dict(data["artwork"]) if data.get("artwork") else None,
            release_date=date.fromisoformat(data["release_date"]) if data.get("release_date") else None,
            library_added_date=(
                datetime.fromisoformat(data["library_added_date"]) if data.get("library_added_date") else None
            ),
            track_count=data.get("track_count"),
            apple_music_id=data.get("apple_music_id"),
            spotify_id=data.get("spotify_id"),
        )


@dataclass(frozen=True, slots=True)
class Playlist:
    """A library playlist from any provider."""

    id: str
    name: str
    provider: ProviderType
    curator_name: Optional[str] = None
    description: Optional[str] = None
    artwork: Optional[Artwork] = None
    track_count: Optional[int] = None
    library_added_date: Optional[datetime] = None
    apple_music_id: Optional[str] = None
    spotify_id: Optional[str] = None
    is_collaborative: Optional[bool] = None
    is_public: Optional[bool] = None

    def __lt__(self, other: Playlist) -> bool:
        return _natural_key(self.name) < _natural_key(other.name)

    def validate(self) -> Playlist:
        _check_provider_ids("Playlist", self.id, self.provider, self.apple_music_id, self.spotify_id)
        return self

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider.value,
            "curator_name": self.curator_name,
            "description": self.description,
            "artwork": self.artwork.to_dict() if self.artwork else None,
            "track_count": self.track_count,
            "library_added_date": _iso(self.library_added_date),
            "apple_music_id": self.apple_music_id,
            "spotify_id": self.spotify_id,
            "is_collaborative": self.is_collaborative,
            "is_public": self.is_public,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Playlist:
        return cls(
            id=data["id"],
            name=data["name"],
            provider=ProviderType(data["provider"]),
            curator_name=data.get("curator_name"),
            description=data.get("description"),
            artwork=Artwork.from_dict(data["artwork"]) if data.get("artwork") else None,
            track_count=data.get("track_count"),
            library_added_date=(
                datetime.fromisoformat(data["library_added_date"]) if data.get("library_added_date") else None
            ),
            apple_music_id=data.get("apple_music_id"),
            spotify_id=data.get("spotify_id"),
            is_collaborative=data.get("is_collaborative"),
            is_public=data.get("is_public"),
        )


class MusicProvider(ABC):
    """
    Capability interface shared by every music provider.
    """

    type: ProviderType

    @abstractmethod
    async def is_authorized(self) -> bool:
        """
        Return whether the user has granted access to the library.
        """
        raise NotImplementedError("Subclasses should implement this method.")

    @abstractmethod
    async def authorize(self) -> None:
        """
        Request access to the user's library.
        """
        raise NotImplementedError("Subclasses should implement this method.")

    @abstractmethod
    async def fetch_albums(self) -> List[Album]:
        """
        Fetch the user's saved albums.
        """
        raise NotImplementedError("Subclasses should implement this method.")

    @abstractmethod
    async def fetch_playlists(self) -> List[Playlist]:
        """
        Fetch the user's library playlists.
        """
        raise NotImplementedError("Subclasses should implement this method.")

    @abstractmethod
    def get_deep_link(self, item: Union[Album, Playlist]) -> Optional[str]:
        """
        Build a link that opens the album or playlist in the provider's app.
        """
        raise NotImplementedError("Subclasses should implement this method.")
