"""Music provider sources."""

from musebridge.sources.base import Album, Artwork, MusicProvider, Playlist, ProviderType
from musebridge.sources.credentials import CredentialStore, FileCredentialStore, MemoryCredentialStore
from musebridge.sources.consent import CallbackConsentFlow, ConsentFlow, ConsoleConsentFlow
from musebridge.sources.links import deep_link
from musebridge.sources.oauth2 import TokenManager
from musebridge.sources.spotify import SpotifyAPIClient, SpotifyProvider, SpotifyTokenManager
from musebridge.sources.apple_music import AppleMusicProvider, MediaLibrary

__all__ = [
    # Base classes and models
    "MusicProvider",
    "ProviderType",
    "Album",
    "Artwork",
    "Playlist",
    "deep_link",
    # Auth plumbing
    "TokenManager",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "ConsentFlow",
    "CallbackConsentFlow",
    "ConsoleConsentFlow",
    # Spotify
    "SpotifyProvider",
    "SpotifyTokenManager",
    "SpotifyAPIClient",
    # Apple Music
    "AppleMusicProvider",
    "MediaLibrary",
]
