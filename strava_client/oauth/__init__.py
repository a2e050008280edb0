"""
OAuth 2.0 module for Strava API integration.

Implements the authorization-code flow: the app or browser handoff, redirect
validation, code exchange and token refresh.

Public API:
    StravaConfig: OAuth configuration
    TokenStore: Token persistence interface
    MemoryTokenStore / FileTokenStore: Token persistence implementations
    TokenManager: Token exchange and refresh
    AuthorizationCoordinator: Authorization state machine
    AppHandoffTransport / BrowserSessionTransport: Authorization transports
"""

from .auth_server import AuthorizationResult, OAuthCallbackServer
from .config import Scope, StravaConfig, StravaSettings
from .coordinator import AuthorizationCoordinator, AuthorizationState
from .token_manager import TokenManager
from .token_storage import FileTokenStore, MemoryTokenStore, TokenStore
from .transports import AppHandoffTransport, AuthorizationTransport, BrowserSessionTransport

__all__ = [
    # Configuration
    "StravaConfig",
    "StravaSettings",
    "Scope",
    # Token Storage
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
    # Token Manager
    "TokenManager",
    # Authorization
    "AuthorizationCoordinator",
    "AuthorizationState",
    "AuthorizationTransport",
    "AppHandoffTransport",
    "BrowserSessionTransport",
    "OAuthCallbackServer",
    "AuthorizationResult",
]
