"""Interactive consent flows for the OAuth2 authorization step.

A consent flow shows the authorization URL to the user and hands back the
redirect callback URL once the provider has redirected. Cancelling is done by
abandoning the awaited ``run`` call.
"""

from __future__ import annotations

import asyncio
import webbrowser
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from musebridge.errors import AuthorizationFailed
from musebridge.logger import console, get_logger

logger = get_logger(__name__)


class ConsentFlow(ABC):
    @abstractmethod
    async def run(self, authorization_url: str) -> str:
        """Present ``authorization_url`` and return the redirect callback URL."""
        raise NotImplementedError("Subclasses should implement this method.")


class CallbackConsentFlow(ConsentFlow):
    """
    Opens the authorization URL and waits for an externally delivered callback.

    The host application captures the redirect (custom URL scheme handler,
    local HTTP listener, ...) and passes it to :meth:`handle_callback` or
    reports a failure with :meth:`fail`. Each ``run`` resolves exactly once.
    """

    def __init__(self, open_url: Optional[Callable[[str], Any]] = None) -> None:
        self.open_url = open_url or webbrowser.open
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._future: Optional[asyncio.Future] = None

    @property
    def pending(self) -> bool:
        return self._future is not None and not self._future.done()

    async def run(self, authorization_url: str) -> str:
        if self.pending:
            logger.warning("Consent already in progress; rejecting a second authorization")
            raise AuthorizationFailed()

        self._loop = asyncio.get_running_loop()
        future = self._future = self._loop.create_future()

        try:
            if self.open_url(authorization_url) is False:
                raise AuthorizationFailed()
            return await future
        finally:
            if self._future is future:
                self._future = None

    def _resolve(self, settle: Callable[[asyncio.Future], None]) -> bool:
        future, loop = self._future, self._loop
        if future is None or loop is None or future.done():
            logger.debug("Ignoring consent callback with no pending authorization")
            return False

        def apply() -> None:
            if not future.done():
                settle(future)

        loop.call_soon_threadsafe(apply)
        return True

    def handle_callback(self, callback_url: str) -> bool:
        """Deliver the redirect URL. Returns ``False`` if no authorization is waiting."""
        return self._resolve(lambda f: f.set_result(callback_url))

    def fail(self, cause: Optional[BaseException] = None) -> bool:
        """Report a failed or cancelled consent step."""
        return self._resolve(lambda f: f.set_exception(AuthorizationFailed(cause)))


class ConsoleConsentFlow(ConsentFlow):
    """Prints the authorization URL and reads the pasted callback URL from stdin."""

    def __init__(self, open_browser: bool = False) -> None:
        self.open_browser = open_browser

    async def run(self, authorization_url: str) -> str:
        console.print(f"Please visit this URL to authorize the app:\n{authorization_url}", markup=False)
        if self.open_browser:
            webbrowser.open(authorization_url)
        return await asyncio.to_thread(console.input, "Paste the redirect URL: ")
