"""
Strava API client.

Client-side SDK for the Strava REST API. It provides:

- StravaClient: configured-once client context
- OAuth 2.0 authorization-code flow with token exchange and refresh
- A request pipeline that decodes responses into typed models and
  classifies failures

Public API:
    StravaClient: Client context
    StravaConfig: Client configuration
    Scope: OAuth scopes
    OAuthToken: Token pair returned by Strava
"""

from .client import StravaClient
from .exceptions import (
    ApiStatusError,
    AuthorizationError,
    ConfigurationError,
    EmptyBodyError,
    MalformedShapeError,
    ParseError,
    RouteError,
    StravaError,
    TokenStorageError,
    TransportError,
)
from .models import OAuthToken
from .oauth.config import Scope, StravaConfig

__all__ = [
    "StravaClient",
    "StravaConfig",
    "Scope",
    "OAuthToken",
    # Exceptions
    "StravaError",
    "ConfigurationError",
    "TransportError",
    "EmptyBodyError",
    "ParseError",
    "MalformedShapeError",
    "ApiStatusError",
    "AuthorizationError",
    "RouteError",
    "TokenStorageError",
]
