"""Apple Music provider backed by the native media library."""

from .library import (
    AuthorizationStatus,
    LibraryAlbum,
    LibraryArtwork,
    LibraryPlaylist,
    LibraryRequest,
    MediaLibrary,
    TemplateArtwork,
)
from .provider import AppleMusicProvider

__all__ = [
    "AppleMusicProvider",
    "AuthorizationStatus",
    "LibraryAlbum",
    "LibraryArtwork",
    "LibraryPlaylist",
    "LibraryRequest",
    "MediaLibrary",
    "TemplateArtwork",
]
