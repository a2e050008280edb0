"""
OAuth coordinator for the Strava authorization-code flow.

State machine per authorize() call:

    IDLE -> AWAITING_NATIVE_HANDOFF | AWAITING_EMBEDDED_SESSION
         -> EXCHANGING_CODE -> COMPLETED -> IDLE

Only one authorization can be pending. It lives in a single slot holding the
completion and the session handle; calling authorize() again while one is
pending overwrites the slot and cancels the earlier session; the earlier
completion is never invoked.
The completion of an authorization that reaches a terminal state fires
exactly once.
"""

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import parse_qs, urlparse

from ..api.router import AUTHORIZATION_STATE, Router
from ..completion import Completion, FailureCallback
from ..exceptions import AuthorizationError
from ..models import OAuthToken
from .config import StravaConfig
from .token_manager import TokenManager
from .transports import AppHandoffTransport, AuthorizationTransport, BrowserSessionTransport

logger = logging.getLogger(__name__)


class AuthorizationState(Enum):
    """Where the coordinator is in the authorization flow."""

    IDLE = "idle"
    AWAITING_NATIVE_HANDOFF = "awaiting_native_handoff"
    AWAITING_EMBEDDED_SESSION = "awaiting_embedded_session"
    EXCHANGING_CODE = "exchanging_code"
    COMPLETED = "completed"


@dataclass
class PendingAuthorization:
    """The in-flight authorization slot."""

    completion: Completion
    transport: Optional[AuthorizationTransport] = None
    session: Any = None


def query_parameters(url: str) -> Dict[str, str]:
    """
    Query parameters of a URL (first value wins, blank values kept).

    Args:
        url: URL to inspect

    Returns:
        Mapping of parameter name to value
    """
    params = parse_qs(urlparse(url).query, keep_blank_values=True)
    return {name: values[0] for name, values in params.items()}


class AuthorizationCoordinator:
    """
    Drives the OAuth handshake.

    Example:
        coordinator.authorize(on_success=handle_token, on_failure=handle_error)
        ...
        # host forwards the custom-scheme callback
        coordinator.handle_authorization_redirect(url)
    """

    def __init__(
        self,
        config_provider: Callable[[], StravaConfig],
        token_manager: TokenManager,
        executor: Executor,
        native_transport: Optional[AuthorizationTransport] = None,
        embedded_transport: Optional[AuthorizationTransport] = None,
        callback_executor: Optional[Executor] = None,
    ):
        """
        Initialize OAuth coordinator.

        Args:
            config_provider: Returns the active configuration or raises
                             ConfigurationError
            token_manager: Performs the code exchange and refresh
            executor: Executor the token requests run on
            native_transport: Companion app handoff (default: AppHandoffTransport)
            embedded_transport: Browser session (default: BrowserSessionTransport)
            callback_executor: Default executor for callbacks (None: inline)
        """
        self._config_provider = config_provider
        self.token_manager = token_manager
        self.executor = executor
        self.native_transport = native_transport or AppHandoffTransport()
        self.embedded_transport = embedded_transport or BrowserSessionTransport()
        self.callback_executor = callback_executor
        self._pending: Optional[PendingAuthorization] = None
        self._state = AuthorizationState.IDLE

    @property
    def state(self) -> AuthorizationState:
        return self._state

    @property
    def pending(self) -> Optional[PendingAuthorization]:
        return self._pending

    def _transition(self, state: AuthorizationState) -> None:
        logger.debug(f"Authorization state: {self._state.value} -> {state.value}")
        self._state = state

    def authorize(
        self,
        on_success: Optional[Callable[[OAuthToken], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[OAuthToken]":
        """
        Start the authorization flow.

        Uses the companion app when the native transport accepts the app
        authorization URL, otherwise a browser session on the web URL.

        Args:
            on_success: Called with the new token
            on_failure: Called with the error
            callback_executor: Executor for callbacks (overrides the default)

        Returns:
            Future resolved with the new token

        Raises:
            ConfigurationError: If the client is not configured
        """
        config = self._config_provider()
        completion = Completion(on_success, on_failure, callback_executor or self.callback_executor)

        if self._pending is not None:
            logger.warning("Authorization already pending, replacing it")
            replaced, self._pending = self._pending, None
            if replaced.transport is not None:
                replaced.transport.cancel(replaced.session)

        def on_result(url: Optional[str], error: Optional[BaseException]) -> None:
            self._on_transport_result(completion, url, error)

        app_url = Router.app_authorization_url(config)
        if self.native_transport.is_available(app_url):
            transport, url = self.native_transport, app_url
            self._pending = PendingAuthorization(completion, transport)
            self._transition(AuthorizationState.AWAITING_NATIVE_HANDOFF)
        else:
            transport, url = self.embedded_transport, Router.web_authorization_url(config)
            self._pending = PendingAuthorization(completion, transport)
            self._transition(AuthorizationState.AWAITING_EMBEDDED_SESSION)

        try:
            session = transport.start(url, config.redirect_uri, on_result)
        except OSError as e:
            logger.error(f"Could not start authorization: {e}")
            self._finish(completion, error=AuthorizationError(f"Could not start authorization: {e}"))
            return completion.future

        if self._pending is not None and self._pending.completion is completion:
            self._pending.session = session
        return completion.future

    def handle_authorization_redirect(self, url: str) -> bool:
        """
        Redirect entry point for the host environment.

        The URL is accepted only if it starts with the configured redirect
        URI, carries a scope and carries the expected state. Accepted URLs
        complete the pending authorization (if any); a missing code completes
        it with AuthorizationError.

        Args:
            url: Callback URL received by the host

        Returns:
            True if the URL was recognized and consumed, False otherwise

        Raises:
            ConfigurationError: If the client is not configured
        """
        config = self._config_provider()

        if not url.startswith(config.redirect_uri):
            return False

        params = query_parameters(url)
        if "scope" not in params or params.get("state") != AUTHORIZATION_STATE:
            return False

        pending, self._pending = self._pending, None
        self._handle_redirect(url, pending.completion if pending else None)
        return True

    def _on_transport_result(
        self, completion: Completion, url: Optional[str], error: Optional[BaseException]
    ) -> None:
        if not self._owns_slot(completion):
            logger.debug("Ignoring result of a replaced or finished authorization session")
            return

        self._pending = None
        if url is not None and error is None:
            self._handle_redirect(url, completion)
        else:
            self._finish(completion, error=error or AuthorizationError("Authorization failed"))

    def _handle_redirect(self, url: str, completion: Optional[Completion]) -> None:
        code = query_parameters(url).get("code")
        if not code:
            logger.error("No authorization code in redirect")
            self._finish(completion, error=AuthorizationError("Invalid authorization code"))
            return

        self._transition(AuthorizationState.EXCHANGING_CODE)
        self.executor.submit(self._exchange, code, completion)

    def _exchange(self, code: str, completion: Optional[Completion]) -> None:
        try:
            token = self.token_manager.exchange_code_for_token(code)
        except Exception as e:
            logger.error(f"Token exchange failed: {e}")
            self._finish(completion, error=e)
        else:
            logger.info("Authorization complete, token saved")
            self._finish(completion, token=token)

    def _finish(
        self,
        completion: Optional[Completion],
        token: Optional[OAuthToken] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        # A newer authorization may own the slot (replaced during the exchange)
        superseded = self._pending is not None and self._pending.completion is not completion
        if not superseded:
            self._pending = None
            self._transition(AuthorizationState.COMPLETED)

        if completion is not None:
            if error is not None:
                completion.fail(error)
            else:
                completion.succeed(token)

        if not superseded and self._pending is None:
            self._transition(AuthorizationState.IDLE)

    def _owns_slot(self, completion: Completion) -> bool:
        return self._pending is not None and self._pending.completion is completion

    def refresh_access_token(
        self,
        refresh_token: str,
        on_success: Optional[Callable[[OAuthToken], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[OAuthToken]":
        """
        Refresh the access token.

        Independent of the authorize() state machine. On success the new
        token replaces the stored one.

        Args:
            refresh_token: Refresh token from a previous exchange
            on_success: Called with the new token
            on_failure: Called with the error
            callback_executor: Executor for callbacks (overrides the default)

        Returns:
            Future resolved with the new token

        Raises:
            ConfigurationError: If the client is not configured
        """
        self._config_provider()
        completion = Completion(on_success, on_failure, callback_executor or self.callback_executor)

        def run() -> None:
            try:
                token = self.token_manager.refresh_token(refresh_token)
            except Exception as e:
                logger.error(f"Token refresh failed: {e}")
                completion.fail(e)
            else:
                completion.succeed(token)

        self.executor.submit(run)
        return completion.future

    def is_authorized(self) -> bool:
        """True if a token with an access token is stored."""
        token = self.token_manager.current_token()
        return token is not None and bool(token.access_token)

    def get_status(self) -> dict:
        """
        Get current authorization status for diagnostics.

        Returns:
            Token status (see TokenManager.get_token_status) plus the
            coordinator state under "state"
        """
        status = self.token_manager.get_token_status()
        status["state"] = self._state.value
        return status
