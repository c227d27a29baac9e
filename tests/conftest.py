import pytest

from musebridge.config import SpotifyOAuthConfig
from musebridge.sources.credentials import MemoryCredentialStore
from musebridge.sources.spotify import SpotifyTokenManager
from tests.utils import FixedClock


@pytest.fixture
def tokens_payload():
    return {
        "access_token": "access123",
        "refresh_token": "refresh123",
        "expires_in": 3600,
        "token_type": "Bearer",
        "scope": "user-library-read",
    }


@pytest.fixture
def tmp_cache(tmp_path):
    # Create a temp cache path per test to avoid side effects
    cache = tmp_path / ".cache" / "test_token.json"
    cache.parent.mkdir(parents=True, exist_ok=True)
    return cache


@pytest.fixture
def config():
    return SpotifyOAuthConfig(client_id="cid", client_secret="secret", redirect_uri="musee://spotify-callback")


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def token_manager(config, store, clock):
    return SpotifyTokenManager(config, store=store, clock=clock)
