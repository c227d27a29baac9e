"""Spotify Web API records, decoded from the JSON payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class SpotifyImage:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpotifyImage:
        return cls(url=data["url"], width=data.get("width"), height=data.get("height"))


def _images(data: Dict[str, Any]) -> List[SpotifyImage]:
    # Spotify sends ``null`` instead of an empty list for some playlists
    return [SpotifyImage.from_dict(i) for i in data.get("images") or []]


@dataclass(frozen=True, slots=True)
class SpotifyArtist:
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpotifyArtist:
        return cls(id=data["id"], name=data["name"])


@dataclass(frozen=True, slots=True)
class SpotifyAlbum:
    id: str
    name: str
    release_date: str
    release_date_precision: str
    total_tracks: int
    artists: List[SpotifyArtist] = field(default_factory=list)
    images: List[SpotifyImage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpotifyAlbum:
        return cls(
            id=data["id"],
            name=data["name"],
            release_date=data["release_date"],
            release_date_precision=data["release_date_precision"],
            total_tracks=data["total_tracks"],
            artists=[SpotifyArtist.from_dict(a) for a in data.get("artists") or []],
            images=_images(data),
        )


@dataclass(frozen=True, slots=True)
class SavedAlbum:
    """An item of ``/me/albums``: the album plus when it was saved."""

    added_at: datetime
    album: SpotifyAlbum

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SavedAlbum:
        return cls(added_at=_parse_timestamp(data["added_at"]), album=SpotifyAlbum.from_dict(data["album"]))


@dataclass(frozen=True, slots=True)
class SpotifyUser:
    id: str
    display_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpotifyUser:
        return cls(id=data["id"], display_name=data.get("display_name"))


@dataclass(frozen=True, slots=True)
class SpotifyPlaylist:
    id: str
    name: str
    owner: SpotifyUser
    collaborative: bool = False
    public: Optional[bool] = None
    description: Optional[str] = None
    tracks_total: Optional[int] = None
    images: List[SpotifyImage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpotifyPlaylist:
        return cls(
            id=data["id"],
            name=data["name"],
            owner=SpotifyUser.from_dict(data["owner"]),
            collaborative=bool(data.get("collaborative", False)),
            public=data.get("public"),
            description=data.get("description"),
            tracks_total=(data.get("tracks") or {}).get("total"),
            images=_images(data),
        )
