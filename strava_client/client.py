"""
Strava API client.

StravaClient is the explicit client context: build it once, configure it
once, and pass it to whatever needs API access. It wires the request
dispatcher and the authorization coordinator to the active configuration.

Every network or authorization call checks that the client is configured
first and raises ConfigurationError synchronously if it is not. All other
errors are delivered through the returned Future and the optional failure
callback.

Example:
    from strava_client import StravaClient, StravaConfig, Scope
    from strava_client.api import Router
    from strava_client.models import Athlete

    client = StravaClient().configure(
        StravaConfig(
            client_id="12345",
            client_secret="secret",
            redirect_uri="http://localhost:8765/strava/callback",
            scopes=(Scope.READ, Scope.ACTIVITY_READ),
        )
    )
    token = client.authorize().result(timeout=300)
    athlete = client.request(Router.athlete(), Athlete).result()

Futures can be awaited from asyncio code with asyncio.wrap_future().
"""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Type

from .api.dispatcher import RequestDispatcher
from .api.router import Route
from .api.serializers import T
from .api.transport import RequestsTransport
from .api.upload import UploadData
from .completion import FailureCallback
from .exceptions import ConfigurationError
from .models import OAuthToken
from .oauth.config import StravaConfig
from .oauth.coordinator import AuthorizationCoordinator
from .oauth.token_manager import TokenManager
from .oauth.transports import AuthorizationTransport

logger = logging.getLogger(__name__)


class StravaClient:
    """
    Client context for the Strava API.

    Attributes:
        dispatcher: Runs API requests
        token_manager: Performs token exchange and refresh
        coordinator: Drives the authorization flow
    """

    def __init__(
        self,
        transport: Optional[RequestsTransport] = None,
        executor: Optional[Executor] = None,
        callback_executor: Optional[Executor] = None,
        native_transport: Optional[AuthorizationTransport] = None,
        embedded_transport: Optional[AuthorizationTransport] = None,
    ):
        """
        Initialize an unconfigured client.

        Args:
            transport: HTTP transport (creates a RequestsTransport if not provided)
            executor: Executor requests run on (creates a thread pool if not provided)
            callback_executor: Default executor for callbacks (None: the
                               thread that completes the request)
            native_transport: Companion app handoff for authorize()
            embedded_transport: Browser session for authorize()
        """
        self._config: Optional[StravaConfig] = None
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="strava-client"
        )
        self.dispatcher = RequestDispatcher(
            self.require_config,
            self.executor,
            transport=transport,
            callback_executor=callback_executor,
        )
        self.token_manager = TokenManager(self.require_config, self.dispatcher)
        self.coordinator = AuthorizationCoordinator(
            self.require_config,
            self.token_manager,
            self.executor,
            native_transport=native_transport,
            embedded_transport=embedded_transport,
            callback_executor=callback_executor,
        )

    @classmethod
    def from_config(cls, config: StravaConfig, **kwargs) -> "StravaClient":
        """Build and configure a client in one step."""
        return cls(**kwargs).configure(config)

    def configure(self, config: StravaConfig) -> "StravaClient":
        """
        Install the configuration, replacing any previous one.

        Args:
            config: Client configuration

        Returns:
            self, for chaining
        """
        self._config = config
        logger.info(f"Strava client configured for client_id {config.client_id}")
        return self

    @property
    def config(self) -> Optional[StravaConfig]:
        return self._config

    def is_configured(self) -> bool:
        return self._config is not None

    def require_config(self) -> StravaConfig:
        """
        Return the active configuration.

        Raises:
            ConfigurationError: If configure() has not been called
        """
        if self._config is None:
            raise ConfigurationError("Strava client is not configured")
        return self._config

    @property
    def token(self) -> Optional[OAuthToken]:
        """Token held by the configured TokenStore (None if unconfigured)."""
        if self._config is None:
            return None
        return self._config.token_store.get()

    # Authorization

    def authorize(
        self,
        on_success: Optional[Callable[[OAuthToken], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[OAuthToken]":
        """Start the authorization flow (see AuthorizationCoordinator.authorize)."""
        return self.coordinator.authorize(on_success, on_failure, callback_executor)

    def handle_authorization_redirect(self, url: str) -> bool:
        """Forward a callback URL received by the host; True if consumed."""
        return self.coordinator.handle_authorization_redirect(url)

    def refresh_access_token(
        self,
        refresh_token: str,
        on_success: Optional[Callable[[OAuthToken], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[OAuthToken]":
        """Refresh the access token (see AuthorizationCoordinator.refresh_access_token)."""
        return self.coordinator.refresh_access_token(
            refresh_token, on_success, on_failure, callback_executor
        )

    # Requests

    def request(
        self,
        route: Route,
        model: Type[T],
        on_success: Optional[Callable[[T], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[T]":
        """Request a single object (see RequestDispatcher.request)."""
        return self.dispatcher.request(route, model, on_success, on_failure, callback_executor)

    def request_array(
        self,
        route: Route,
        model: Type[T],
        on_success: Optional[Callable[[List[T]], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[List[T]]":
        """Request a list of objects (see RequestDispatcher.request_array)."""
        return self.dispatcher.request_array(
            route, model, on_success, on_failure, callback_executor
        )

    def upload(
        self,
        route: Route,
        upload: UploadData,
        model: Type[T],
        on_success: Optional[Callable[[T], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[T]":
        """Upload a file (see RequestDispatcher.upload)."""
        return self.dispatcher.upload(
            route, upload, model, on_success, on_failure, callback_executor
        )

    # Lifecycle

    def close(self) -> None:
        """Shut down the owned executor and close the HTTP session."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)
        self.dispatcher.transport.close()

    def __enter__(self) -> "StravaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
