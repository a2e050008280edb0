"""
Local callback server for the browser-based authorization session.

The server listens on the host and port of the configured redirect URI,
waits for Strava to redirect the browser back, and records the full redirect
URL. It is single-use: it shuts down after the first callback or on timeout.
"""

import logging
import ssl
import threading
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from flask import Flask, Response, request
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<html>
<head><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px;">
    <h1>{title}</h1>
    <p>{message}</p>
    <p style="margin-top: 30px; color: #666;">You can close this window.</p>
</body>
</html>"""


@dataclass
class AuthorizationResult:
    """
    Result of waiting for the authorization redirect.

    Attributes:
        success: Whether a redirect was received
        redirect_url: Full redirect URL including its query string (if successful)
        error: Error code (if failed)
        error_description: Human-readable error description (if failed)
    """

    success: bool
    redirect_url: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None


class OAuthCallbackServer:
    """
    Temporary HTTP(S) server that receives the OAuth redirect.

    The server:
    1. Binds to the host and port of the redirect URI
    2. Waits for the redirect on the redirect URI path
    3. Records the redirect URL (or the error Strava sent)
    4. Shuts down
    """

    def __init__(
        self,
        redirect_uri: str,
        ssl_cert_path: Optional[str] = None,
        ssl_key_path: Optional[str] = None,
    ):
        """
        Initialize callback server.

        Args:
            redirect_uri: Redirect URI registered with Strava (http://host:port/path)
            ssl_cert_path: Certificate for serving https (optional)
            ssl_key_path: Private key for serving https (optional)
        """
        parsed = urlparse(redirect_uri)
        self.host = parsed.hostname or "localhost"
        self.port = parsed.port or (443 if parsed.scheme == "https" else 80)
        self.callback_path = parsed.path or "/"
        self.ssl_cert_path = ssl_cert_path
        self.ssl_key_path = ssl_key_path

        self.app = Flask(__name__)
        self.app.logger.setLevel(logging.WARNING)
        self.result: Optional[AuthorizationResult] = None
        self._server = None
        self._thread: Optional[threading.Thread] = None
        self._callback_event = threading.Event()
        self._stop_lock = threading.Lock()

        self.app.add_url_rule(
            self.callback_path,
            "oauth_callback",
            self._handle_callback,
            methods=["GET"],
        )

    def _handle_callback(self) -> Response:
        """Handle the OAuth redirect from Strava."""
        logger.info("Received OAuth callback")

        error = request.args.get("error")
        if error:
            logger.error(f"OAuth error: {error}")
            self.result = AuthorizationResult(
                success=False,
                error=error,
                error_description=f"Strava returned an error: {error}",
            )
            self._callback_event.set()
            return Response(
                PAGE_TEMPLATE.format(title="Authorization Failed", message=f"Error: {error}"),
                status=400,
                content_type="text/html",
            )

        self.result = AuthorizationResult(success=True, redirect_url=request.url)
        self._callback_event.set()

        return Response(
            PAGE_TEMPLATE.format(
                title="Authorization Received",
                message="Return to the application to finish signing in.",
            ),
            status=200,
            content_type="text/html",
        )

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.ssl_cert_path or not self.ssl_key_path:
            return None
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(self.ssl_cert_path, self.ssl_key_path)
        return context

    def start(self) -> None:
        """
        Start the callback server in a background thread.

        Raises:
            OSError: If the port cannot be bound
            FileNotFoundError: If SSL certificate files are not found
        """
        ssl_context = self._ssl_context()
        try:
            self._server = make_server(
                self.host,
                self.port,
                self.app,
                threaded=True,
                ssl_context=ssl_context,
            )
        except SystemExit as e:
            # werkzeug reports bind failures by exiting the process
            logger.error(f"Could not bind OAuth callback server to {self.host}:{self.port}")
            raise OSError(f"Could not bind callback server to {self.host}:{self.port}") from e
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info(f"OAuth callback server listening on {self.host}:{self.port}{self.callback_path}")

    def wait_for_callback(self, timeout: float = 300) -> AuthorizationResult:
        """
        Wait for the OAuth redirect.

        Args:
            timeout: Maximum seconds to wait (default: 300 = 5 minutes)

        Returns:
            AuthorizationResult with the redirect URL or an error
        """
        logger.info(f"Waiting for OAuth callback (timeout: {timeout}s)")

        if self._callback_event.wait(timeout=timeout):
            return self.result or AuthorizationResult(
                success=False,
                error="unknown",
                error_description="Callback received without result",
            )

        logger.warning(f"Timeout waiting for callback after {timeout}s")
        return AuthorizationResult(
            success=False,
            error="timeout",
            error_description=f"No callback received within {timeout} seconds",
        )

    def stop(self) -> None:
        """Stop the callback server and release its port."""
        with self._stop_lock:
            if self._server is not None:
                logger.info("OAuth callback server shutting down")
                self._server.shutdown()
                self._server.server_close()
                self._server = None
            if self._thread is not None:
                self._thread.join(timeout=1)
                self._thread = None

    def cancel(self) -> None:
        """
        Abandon the wait for the redirect.

        Shuts the server down and wakes wait_for_callback(), which then
        reports a "cancelled" result unless a callback already arrived.
        """
        self.stop()
        if not self._callback_event.is_set():
            self.result = AuthorizationResult(
                success=False,
                error="cancelled",
                error_description="Authorization was replaced by a newer request",
            )
            self._callback_event.set()
