"""Error types raised by music provider operations."""

from __future__ import annotations

from typing import Any, Optional


class MusicBridgeError(RuntimeError):
    """Base class for every error raised by the library."""

    recovery_suggestion: Optional[str] = None

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


# ----------------------------------------------------------------------
# Authorization errors
# ----------------------------------------------------------------------


class AuthorizationDenied(MusicBridgeError):
    """Raised when the user denied access to the music library."""

    recovery_suggestion = "Please go to Settings and grant permission to access your music library."

    def __init__(self) -> None:
        super().__init__("Authorization was denied by the user.")


class AuthorizationFailed(MusicBridgeError):
    """Raised when the consent flow or the code exchange failed."""

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        message = f"Authorization failed: {cause}" if cause is not None else "Authorization failed."
        super().__init__(message, cause=cause)


class NotAuthorized(MusicBridgeError):
    """Raised when an operation needs authorization that is not there."""

    recovery_suggestion = "Please go to Settings and grant permission to access your music library."

    def __init__(self) -> None:
        super().__init__("Not authorized. Please grant permission to access your music library.")


# ----------------------------------------------------------------------
# Network errors
# ----------------------------------------------------------------------


class NetworkError(MusicBridgeError):
    """Raised when the transport failed before a response was received."""

    recovery_suggestion = "Please check your internet connection and try again."

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}", cause=cause)


class InvalidResponse(MusicBridgeError):
    def __init__(self) -> None:
        super().__init__("Invalid response received from the server.")


class DecodingError(MusicBridgeError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Failed to decode response: {cause}", cause=cause)


# ----------------------------------------------------------------------
# API errors
# ----------------------------------------------------------------------


class ApiError(MusicBridgeError):
    """Raised for 4xx/5xx responses that have no more specific meaning."""

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        text = f"API error (code {status_code})"
        if message:
            text += f": {message}"
        super().__init__(text)
        self.status_code = status_code
        self.message = message


class RateLimitExceeded(MusicBridgeError):
    """Raised on HTTP 429. ``retry_after`` is in seconds when the server sent one."""

    recovery_suggestion = "You've made too many requests. Please wait a moment and try again."

    def __init__(self, retry_after: Optional[float] = None) -> None:
        if retry_after is not None:
            text = f"Rate limit exceeded. Please try again in {int(retry_after)} seconds."
        else:
            text = "Rate limit exceeded. Please try again later."
        super().__init__(text)
        self.retry_after = retry_after


class InvalidRequest(MusicBridgeError):
    def __init__(self, message: str = "Invalid request parameters.") -> None:
        super().__init__(message)


# ----------------------------------------------------------------------
# Token errors
# ----------------------------------------------------------------------


class TokenExpired(MusicBridgeError):
    recovery_suggestion = "Please reconnect your account in Settings."

    def __init__(self) -> None:
        super().__init__("Authentication token has expired.")


class TokenRefreshFailed(MusicBridgeError):
    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__("Failed to refresh authentication token.", cause=cause)


class TokenStorageError(MusicBridgeError):
    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__("Failed to store authentication token securely.", cause=cause)


# ----------------------------------------------------------------------
# Data errors
# ----------------------------------------------------------------------


class NoData(MusicBridgeError):
    def __init__(self) -> None:
        super().__init__("No data available.")


class InvalidData(MusicBridgeError):
    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(f"Invalid data received: {detail}" if detail else "Invalid data received.")


# ----------------------------------------------------------------------
# Provider-specific and general errors
# ----------------------------------------------------------------------


class ProviderSpecificError(MusicBridgeError):
    """Wraps a foreign error raised inside a provider.

    ``provider`` is a :class:`~musebridge.sources.base.ProviderType`; ``message``
    keeps the foreign error's text for diagnostics.
    """

    def __init__(self, provider: Any, code: str, message: str, *, cause: Optional[BaseException] = None) -> None:
        name = getattr(provider, "display_name", str(provider))
        super().__init__(f"{name} error ({code}): {message}", cause=cause)
        self.provider = provider
        self.code = code
        self.message = message


class Unknown(MusicBridgeError):
    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Unknown error: {cause}" if cause is not None else "Unknown error.", cause=cause)
