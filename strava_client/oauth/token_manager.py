"""
Token manager for Strava OAuth.

Implements the shared contract of the code exchange and the refresh grant:
issue the token request, reject responses without an access token, persist
the new token through the configured TokenStore and return it.
"""

import logging
from typing import Callable, Optional

from ..api.dispatcher import RequestDispatcher
from ..api.router import Route, Router
from ..api.serializers import ResponseSerializer
from ..exceptions import AuthorizationError
from ..models import OAuthToken
from .config import StravaConfig

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Manages the OAuth token lifecycle.

    Responsibilities:
    - Exchange authorization codes for tokens
    - Refresh access tokens
    - Report token status
    """

    def __init__(
        self,
        config_provider: Callable[[], StravaConfig],
        dispatcher: RequestDispatcher,
    ):
        """
        Initialize token manager.

        Args:
            config_provider: Returns the active configuration or raises
                             ConfigurationError
            dispatcher: Dispatcher used to run the token requests
        """
        self._config_provider = config_provider
        self.dispatcher = dispatcher

    def exchange_code_for_token(self, code: str) -> OAuthToken:
        """
        Exchange an authorization code for access and refresh tokens.

        Args:
            code: Code received on the authorization redirect

        Returns:
            The new token (already persisted)

        Raises:
            AuthorizationError: If the response holds no access token
            StravaError: Transport, status or decode errors
        """
        logger.info("Exchanging authorization code for tokens")
        config = self._config_provider()
        return self._obtain_token(config, Router.token(config, code))

    def refresh_token(self, refresh_token: str) -> OAuthToken:
        """
        Refresh the access token with a refresh token.

        Args:
            refresh_token: Refresh token from a previous exchange

        Returns:
            The new token (already persisted, replacing the old one)

        Raises:
            AuthorizationError: If the response holds no access token
            StravaError: Transport, status or decode errors
        """
        logger.info("Refreshing access token")
        config = self._config_provider()
        return self._obtain_token(config, Router.refresh(config, refresh_token))

    def _obtain_token(self, config: StravaConfig, route: Route) -> OAuthToken:
        token = self.dispatcher.perform(route, ResponseSerializer(OAuthToken))

        if not token.access_token:
            logger.error("Token endpoint response did not contain an access token")
            raise AuthorizationError("No valid token")

        config.token_store.set(token)
        logger.info("Successfully obtained and saved token")
        return token

    def current_token(self) -> Optional[OAuthToken]:
        """Token currently held by the configured TokenStore."""
        return self._config_provider().token_store.get()

    def get_token_status(self) -> dict:
        """
        Get current token status for diagnostics.

        Returns:
            Dictionary with token status information:
            - authorized: Whether a token is stored
            - expired: Whether access token is expired (if authorized)
            - expires_at: Epoch seconds of expiry (if authorized)
            - athlete_id: Authorized athlete ID, if known (if authorized)
        """
        token = self.current_token()

        if not token or not token.access_token:
            return {"authorized": False, "message": "No token stored"}

        return {
            "authorized": True,
            "expired": token.is_expired,
            "expires_at": token.expires_at,
            "athlete_id": token.athlete.id if token.athlete else None,
        }
