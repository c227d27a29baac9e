"""
Interface to the host's native media-library SDK.

The SDK itself lives outside this package. A host application adapts it to
:class:`MediaLibrary` and hands that adapter to the Apple Music provider;
tests use an in-memory fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Protocol, Sequence, Type, Union, runtime_checkable

# Largest result set requested from the library in one query
LIBRARY_REQUEST_LIMIT = 1000


class AuthorizationStatus(str, Enum):
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"
    NOT_DETERMINED = "not_determined"


@runtime_checkable
class LibraryArtwork(Protocol):
    """Artwork object that resolves a URL for a requested size."""

    def url(self, width: int, height: int) -> Optional[str]: ...


@dataclass(frozen=True)
class TemplateArtwork:
    """:class:`LibraryArtwork` backed by a ``{w}``/``{h}`` URL template."""

    template: str

    def url(self, width: int, height: int) -> Optional[str]:
        return self.template.replace("{w}", str(width)).replace("{h}", str(height))


@dataclass(frozen=True)
class LibraryAlbum:
    id: str
    title: str
    artist_name: str
    artwork: Optional[LibraryArtwork] = None
    release_date: Optional[date] = None
    library_added_date: Optional[datetime] = None
    track_count: Optional[int] = None


@dataclass(frozen=True)
class LibraryPlaylist:
    # The library exposes no track count for playlists
    id: str
    name: str
    curator_name: Optional[str] = None
    description: Optional[str] = None
    artwork: Optional[LibraryArtwork] = None
    library_added_date: Optional[datetime] = None


LibraryItem = Union[LibraryAlbum, LibraryPlaylist]


@dataclass(frozen=True)
class LibraryRequest:
    """A library-scoped query for one item type, capped at ``limit`` results."""

    item_type: Type[LibraryItem]
    limit: int = LIBRARY_REQUEST_LIMIT


class MediaLibrary(ABC):
    """The media-library capabilities the Apple Music provider consumes."""

    @abstractmethod
    def authorization_status(self) -> AuthorizationStatus:
        """Return the current authorization status without prompting."""

    @abstractmethod
    async def request_authorization(self) -> AuthorizationStatus:
        """Prompt the user if needed and return the resulting status."""

    @abstractmethod
    async def fetch(self, request: LibraryRequest) -> Sequence[LibraryItem]:
        """Return up to ``request.limit`` items of ``request.item_type``."""
