"""Conversion of Spotify records into the canonical model."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from musebridge.sources.base import Album, Artwork, Playlist, ProviderType
from musebridge.sources.spotify.schema import SavedAlbum, SpotifyImage, SpotifyPlaylist

UNKNOWN_ARTIST = "Unknown Artist"

RELEASE_DATE_FORMATS = {
    "year": "%Y",
    "month": "%Y-%m",
    "day": "%Y-%m-%d",
}

SMALL_TARGET = 300
# Spotify commonly serves exactly 640x640
MEDIUM_TARGET = 640


def parse_release_date(value: Optional[str], precision: Optional[str]) -> Optional[date]:
    """Parse a release date at its precision; unknown precisions use the day format.

    Returns ``None`` for anything that does not parse.
    """
    if not value:
        return None
    fmt = RELEASE_DATE_FORMATS.get(precision or "", RELEASE_DATE_FORMATS["day"])
    try:
        return datetime.strptime(value, fmt).date()
    except ValueError:
        return None


def closest_image(images: List[SpotifyImage], target: int) -> Optional[SpotifyImage]:
    """Pick the image whose width is nearest ``target``.

    ``images`` must be sorted widest first; on a tie the earlier (wider) one wins.
    """
    if not images:
        return None
    return min(images, key=lambda image: abs((image.width or 0) - target))


def artwork_from_images(images: List[SpotifyImage]) -> Optional[Artwork]:
    if not images:
        return None
    by_width = sorted(images, key=lambda image: image.width or 0, reverse=True)
    small = closest_image(by_width, SMALL_TARGET)
    medium = closest_image(by_width, MEDIUM_TARGET)
    return Artwork(
        url_300=small.url if small else None,
        url_600=medium.url if medium else None,
        url_1200=by_width[0].url,
    )


def album_from_saved(saved: SavedAlbum) -> Album:
    album = saved.album
    return Album(
        id=album.id,
        title=album.name,
        artist_name=album.artists[0].name if album.artists else UNKNOWN_ARTIST,
        provider=ProviderType.SPOTIFY,
        artwork=artwork_from_images(album.images),
        release_date=parse_release_date(album.release_date, album.release_date_precision),
        library_added_date=saved.added_at,
        track_count=album.total_tracks,
        spotify_id=album.id,
    ).validate()


def playlist_from_api(playlist: SpotifyPlaylist) -> Playlist:
    return Playlist(
        id=playlist.id,
        name=playlist.name,
        provider=ProviderType.SPOTIFY,
        curator_name=playlist.owner.display_name or playlist.owner.id,
        description=playlist.description,
        artwork=artwork_from_images(playlist.images),
        track_count=playlist.tracks_total,
        library_added_date=None,  # Not exposed for playlists
        spotify_id=playlist.id,
        is_collaborative=playlist.collaborative,
        is_public=playlist.public,
    ).validate()
