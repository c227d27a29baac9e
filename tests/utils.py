import json
from datetime import datetime, timedelta, timezone

from musebridge.sources.oauth2 import TokenKeys


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None, headers=None, text: str = ""):
        self.status_code = status_code
        self._json_data = json_data or {}
        self.headers = headers or {}
        self.text = text or json.dumps(self._json_data)

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=None):
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def seed_tokens(store, clock, *, seconds_left=3600, access="access123", refresh="refresh123"):
    """Put a token state into ``store`` that expires ``seconds_left`` after ``clock()``."""
    store.store(access, TokenKeys.ACCESS_TOKEN)
    if refresh is not None:
        store.store(refresh, TokenKeys.REFRESH_TOKEN)
    store.store((clock() + timedelta(seconds=seconds_left)).isoformat(), TokenKeys.EXPIRY)


def saved_album_item(album_id="alb1", name="Album", added_at="2024-03-01T10:00:00Z", **overrides):
    album = {
        "id": album_id,
        "name": name,
        "artists": [{"id": "art1", "name": "Artist One"}],
        "images": [
            {"url": f"https://i.scdn.co/{album_id}/640", "width": 640, "height": 640},
            {"url": f"https://i.scdn.co/{album_id}/300", "width": 300, "height": 300},
            {"url": f"https://i.scdn.co/{album_id}/64", "width": 64, "height": 64},
        ],
        "release_date": "2023-10-13",
        "release_date_precision": "day",
        "total_tracks": 12,
    }
    album.update(overrides)
    return {"added_at": added_at, "album": album}


def playlist_item(playlist_id="pl1", name="Playlist", **overrides):
    playlist = {
        "id": playlist_id,
        "name": name,
        "description": "Songs",
        "collaborative": False,
        "public": True,
        "owner": {"id": "owner1", "display_name": "Owner One"},
        "images": [{"url": f"https://mosaic.scdn.co/{playlist_id}", "width": 640, "height": 640}],
        "tracks": {"href": "https://api.spotify.com/v1/playlists/x/tracks", "total": 25},
    }
    playlist.update(overrides)
    return playlist
