"""Conversion of media-library items into the canonical model."""

from __future__ import annotations

from typing import Optional

from musebridge.sources.base import (
    ARTWORK_LARGE,
    ARTWORK_MEDIUM,
    ARTWORK_SMALL,
    Album,
    Artwork,
    Playlist,
    ProviderType,
)
from musebridge.sources.apple_music.library import LibraryAlbum, LibraryArtwork, LibraryPlaylist


def artwork_from_library(artwork: Optional[LibraryArtwork]) -> Optional[Artwork]:
    if artwork is None:
        return None
    return Artwork(
        url_300=artwork.url(ARTWORK_SMALL, ARTWORK_SMALL),
        url_600=artwork.url(ARTWORK_MEDIUM, ARTWORK_MEDIUM),
        url_1200=artwork.url(ARTWORK_LARGE, ARTWORK_LARGE),
    )


def album_from_library(album: LibraryAlbum) -> Album:
    return Album(
        id=album.id,
        title=album.title,
        artist_name=album.artist_name,
        provider=ProviderType.APPLE_MUSIC,
        artwork=artwork_from_library(album.artwork),
        release_date=album.release_date,
        library_added_date=album.library_added_date,
        track_count=album.track_count,
        apple_music_id=album.id,
    ).validate()


def playlist_from_library(playlist: LibraryPlaylist) -> Playlist:
    return Playlist(
        id=playlist.id,
        name=playlist.name,
        provider=ProviderType.APPLE_MUSIC,
        curator_name=playlist.curator_name,
        description=playlist.description,
        artwork=artwork_from_library(playlist.artwork),
        library_added_date=playlist.library_added_date,
        apple_music_id=playlist.id,
    ).validate()
