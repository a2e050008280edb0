"""
Authorization transports.

The coordinator picks one of two transports per authorize() call:

- AppHandoffTransport: hands the app authorization URL to a companion
  application. Its result arrives later through the client's redirect entry
  point (handle_authorization_redirect).
- BrowserSessionTransport: opens the web authorization URL in a browser and
  runs a local callback server; the session itself resolves with the
  redirect URL or an error.

Both implement AuthorizationTransport.start(url, callback_uri, on_result).
"""

import logging
import threading
import webbrowser
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..exceptions import AuthorizationError
from .auth_server import OAuthCallbackServer

logger = logging.getLogger(__name__)

ResultHandler = Callable[[Optional[str], Optional[BaseException]], None]


class AuthorizationTransport(ABC):
    """Presents an authorization URL to the user."""

    @abstractmethod
    def is_available(self, url: str) -> bool:
        """
        Check whether this transport can handle the URL.

        Args:
            url: Authorization URL

        Returns:
            True if start() can be called with this URL
        """
        pass

    @abstractmethod
    def start(self, url: str, callback_uri: str, on_result: ResultHandler) -> Any:
        """
        Start authorization.

        Args:
            url: Authorization URL to present
            callback_uri: Redirect URI the provider will call back
            on_result: Called with (redirect_url, None) or (None, error) when
                       the transport itself observes the outcome

        Returns:
            Session handle kept alive while the authorization is pending
        """
        pass

    def cancel(self, session: Any) -> None:
        """
        Abandon a session returned by start().

        Called when a newer authorization replaces the pending one. The
        default does nothing; transports with running resources override it.

        Args:
            session: Handle returned by start()
        """
        pass


class AppHandoffTransport(AuthorizationTransport):
    """
    Hands the authorization URL to another application.

    The probe decides whether a handler for the URL scheme is installed. The
    default probe reports none, so the browser session is used unless the
    host application supplies one.
    """

    def __init__(
        self,
        probe: Optional[Callable[[str], bool]] = None,
        opener: Optional[Callable[[str], Any]] = None,
    ):
        """
        Initialize transport.

        Args:
            probe: Returns True if a handler for the URL is installed
            opener: Opens the URL (default: webbrowser.open)
        """
        self.probe = probe
        self.opener = opener or webbrowser.open

    def is_available(self, url: str) -> bool:
        if self.probe is None:
            return False
        return bool(self.probe(url))

    def start(self, url: str, callback_uri: str, on_result: ResultHandler) -> None:
        logger.info("Handing authorization off to companion app")
        self.opener(url)
        return None


class BrowserSession:
    """Handle for a running browser authorization session."""

    def __init__(self, server: OAuthCallbackServer, thread: threading.Thread):
        self.server = server
        self.thread = thread

    def cancel(self) -> None:
        """Shut the callback server down; the waiting thread then exits."""
        self.server.cancel()


class BrowserSessionTransport(AuthorizationTransport):
    """Runs the authorization in the system browser with a local callback server."""

    def __init__(
        self,
        open_browser: bool = True,
        timeout: float = 300,
        ssl_cert_path: Optional[str] = None,
        ssl_key_path: Optional[str] = None,
        server_factory: Callable[..., OAuthCallbackServer] = OAuthCallbackServer,
    ):
        """
        Initialize transport.

        Args:
            open_browser: Open the URL automatically (otherwise only logged)
            timeout: Seconds to wait for the redirect
            ssl_cert_path: Certificate for an https redirect URI
            ssl_key_path: Private key for an https redirect URI
            server_factory: Builds the callback server
        """
        self.open_browser = open_browser
        self.timeout = timeout
        self.ssl_cert_path = ssl_cert_path
        self.ssl_key_path = ssl_key_path
        self.server_factory = server_factory

    def is_available(self, url: str) -> bool:
        return True

    def cancel(self, session: Optional[BrowserSession]) -> None:
        if session is not None:
            logger.info("Cancelling browser authorization session")
            session.cancel()

    def start(self, url: str, callback_uri: str, on_result: ResultHandler) -> BrowserSession:
        server = self.server_factory(
            callback_uri,
            ssl_cert_path=self.ssl_cert_path,
            ssl_key_path=self.ssl_key_path,
        )
        server.start()

        if self.open_browser:
            try:
                webbrowser.open(url)
            except webbrowser.Error as e:
                logger.warning(f"Could not open browser automatically: {e}")
        logger.info(f"Authorize the application by visiting: {url}")

        def wait() -> None:
            try:
                result = server.wait_for_callback(self.timeout)
            finally:
                server.stop()

            if result.success:
                on_result(result.redirect_url, None)
            else:
                on_result(
                    None,
                    AuthorizationError(result.error_description or result.error or "Authorization failed"),
                )

        thread = threading.Thread(target=wait, daemon=True)
        thread.start()
        return BrowserSession(server, thread)
