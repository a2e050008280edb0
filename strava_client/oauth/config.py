"""
OAuth configuration for the Strava client.

StravaConfig is the immutable bundle of credentials, scopes, redirect URI and
token store that the client is configured with once. Configuration can be
provided programmatically or loaded from STRAVA_* environment variables.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError
from .token_storage import FileTokenStore, MemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    """OAuth scopes understood by Strava."""

    READ = "read"
    READ_ALL = "read_all"
    PROFILE_READ_ALL = "profile:read_all"
    PROFILE_WRITE = "profile:write"
    ACTIVITY_READ = "activity:read"
    ACTIVITY_READ_ALL = "activity:read_all"
    ACTIVITY_WRITE = "activity:write"


class StravaSettings(BaseSettings):
    """Environment-backed settings (STRAVA_ prefix).

    Attributes:
        client_id: Strava application client ID
        client_secret: Strava application client secret
        redirect_uri: Registered redirect URI
        scopes: Comma-separated scope list
        force_prompt: Always show the approval screen
        token_file: Token file path (in-memory store when empty)
    """

    model_config = SettingsConfigDict(env_prefix="STRAVA_", case_sensitive=False)

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://localhost:8765/strava/callback"
    scopes: str = "read,activity:read"
    force_prompt: bool = True
    token_file: str = ""


@dataclass(frozen=True)
class StravaConfig:
    """
    Client configuration for Strava OAuth 2.0.

    Instances are frozen: reconfigure the client with a fresh instance rather
    than mutating fields.

    Attributes:
        client_id: Strava application client ID
        client_secret: Strava application client secret
        redirect_uri: Redirect URI registered with the Strava application
        scopes: Requested OAuth scopes
        force_prompt: Send approval_prompt=force instead of auto
        token_store: Persistence for the OAuth token
    """

    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: Tuple[Scope, ...] = (Scope.READ,)
    force_prompt: bool = True
    token_store: TokenStore = field(default_factory=MemoryTokenStore)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not self.client_secret:
            raise ConfigurationError("client_secret cannot be empty")

        if not self.redirect_uri:
            raise ConfigurationError("redirect_uri cannot be empty")

        # Accept any iterable of scopes or scope strings, store a tuple of Scope
        try:
            scopes = tuple(Scope(s) for s in self.scopes)
        except ValueError as e:
            raise ConfigurationError(f"Unknown scope: {e}") from e
        object.__setattr__(self, "scopes", scopes)

    @property
    def scope_string(self) -> str:
        """Scopes joined the way Strava expects them (comma-separated)."""
        return ",".join(scope.value for scope in self.scopes)

    @property
    def approval_prompt(self) -> str:
        """Value of the approval_prompt authorization parameter."""
        return "force" if self.force_prompt else "auto"

    @classmethod
    def from_env(cls) -> "StravaConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            STRAVA_CLIENT_ID: Strava application client ID
            STRAVA_CLIENT_SECRET: Strava application client secret

        Optional environment variables:
            STRAVA_REDIRECT_URI: Redirect URI (default: http://localhost:8765/strava/callback)
            STRAVA_SCOPES: Comma-separated scopes (default: read,activity:read)
            STRAVA_FORCE_PROMPT: true/false (default: true)
            STRAVA_TOKEN_FILE: Token file path (default: in-memory storage)

        Returns:
            StravaConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        settings = StravaSettings()

        if not settings.client_id or not settings.client_secret:
            raise ConfigurationError(
                "Missing Strava OAuth credentials. Set environment variables:\n"
                "  STRAVA_CLIENT_ID=your_client_id\n"
                "  STRAVA_CLIENT_SECRET=your_client_secret\n"
                "\n"
                "Get credentials from: https://www.strava.com/settings/api"
            )

        if settings.token_file:
            token_store: TokenStore = FileTokenStore(settings.token_file)
        else:
            logger.debug("STRAVA_TOKEN_FILE not set, tokens kept in memory")
            token_store = MemoryTokenStore()

        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            scopes=tuple(s.strip() for s in settings.scopes.split(",") if s.strip()),
            force_prompt=settings.force_prompt,
            token_store=token_store,
        )
