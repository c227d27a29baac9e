"""HTTP request executor with status classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

import requests

from musebridge.errors import (
    ApiError,
    DecodingError,
    InvalidRequest,
    InvalidResponse,
    NetworkError,
    NotAuthorized,
    RateLimitExceeded,
)
from musebridge.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 15


@dataclass(frozen=True)
class HttpRequest:
    """A request description, independent of the transport."""

    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    data: Optional[Dict[str, str]] = None

    @classmethod
    def get(cls, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> HttpRequest:
        return cls("GET", url, params=params, headers=dict(headers or {}))

    @classmethod
    def post_form(cls, url: str, data: Dict[str, str], headers: Optional[Dict[str, str]] = None) -> HttpRequest:
        merged = {"Content-Type": "application/x-www-form-urlencoded", **(headers or {})}
        return cls("POST", url, headers=merged, data=data)


def _retry_after(response: requests.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid Retry-After header: {value}")
        return None


class HttpClient:
    """Performs requests with ``requests`` and maps failures onto the error taxonomy."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def _send(self, request: HttpRequest) -> requests.Response:
        if request.method == "GET":
            return requests.get(request.url, params=request.params, headers=request.headers, timeout=self.timeout)
        if request.method == "POST":
            return requests.post(request.url, data=request.data, headers=request.headers, timeout=self.timeout)
        raise InvalidRequest(f"Unsupported HTTP method: {request.method}")

    @staticmethod
    def validate(response: requests.Response) -> None:
        """Raise the error matching a non-2xx status code."""
        status = response.status_code
        if 200 <= status <= 299:
            return
        logger.debug(f"HTTP {status} classified as an error")
        if status == 401:
            raise NotAuthorized()
        if status == 429:
            raise RateLimitExceeded(_retry_after(response))
        if 400 <= status <= 599:
            raise ApiError(status, response.text or None)
        raise InvalidResponse()

    def perform(self, request: HttpRequest, decode: Optional[Callable[[Any], T]] = None) -> Optional[T]:
        """
        Perform ``request`` and decode its JSON body with ``decode``.

        Args:
            request: The request to send.
            decode: Callable turning the parsed JSON into a typed value.
                When omitted the body is ignored and ``None`` is returned.

        Raises:
            NetworkError: Transport failure (connection, timeout, ...).
            NotAuthorized, RateLimitExceeded, ApiError, InvalidResponse: Status classification.
            DecodingError: The body could not be decoded after a successful status.
        """
        try:
            response = self._send(request)
        except requests.RequestException as e:
            raise NetworkError(e) from e

        self.validate(response)

        if decode is None:
            return None
        try:
            return decode(response.json())
        except (KeyError, TypeError, ValueError) as e:
            raise DecodingError(e) from e
