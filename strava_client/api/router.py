"""
Route definitions for the Strava API.

A Route describes one logical endpoint call (method, path, query and form
parameters, and an optional key path that locates the payload inside the
response). Route.resolve() turns it into a transport-level RequestDescriptor.

Router collects the well-known OAuth constructs and a handful of endpoint
constructors.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import urlencode, urlparse

from ..exceptions import RouteError
from . import endpoints

if TYPE_CHECKING:
    from ..oauth.config import StravaConfig

# Anti-forgery state sent with every authorization request. This is a fixed
# value, not a per-session nonce; changing it alters wire-visible behavior.
AUTHORIZATION_STATE = "ios"

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass
class RequestDescriptor:
    """
    Transport-level request produced by resolving a Route.

    Attributes:
        method: HTTP method
        url: Absolute URL
        headers: Request headers
        params: Query string parameters
        data: Form-encoded body parameters
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Route:
    """
    A logical Strava API call.

    Attributes:
        method: HTTP method
        url: Absolute URL, or a path relative to the API base URL
        params: Query string parameters
        body: Form body parameters
        key_path: Optional key path of the payload inside the response
        headers: Extra request headers
        authenticated: Whether to send the stored access token
    """

    method: str
    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    key_path: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    authenticated: bool = True

    def resolve(self, access_token: Optional[str] = None) -> RequestDescriptor:
        """
        Resolve into a transport request.

        Args:
            access_token: Access token to send as Bearer credentials

        Returns:
            RequestDescriptor ready for the transport

        Raises:
            RouteError: If the method is unsupported or the URL is not http(s)
        """
        method = self.method.upper()
        if method not in HTTP_METHODS:
            raise RouteError(f"Unsupported HTTP method: {self.method}")

        url = self.url
        if not urlparse(url).scheme:
            url = f"{endpoints.API_BASE_URL}/{url.lstrip('/')}"

        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise RouteError(f"Cannot build a request for URL: {self.url}")

        headers = {"Accept": "application/json"}
        headers.update(self.headers)
        if self.authenticated and access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        return RequestDescriptor(
            method=method,
            url=url,
            headers=headers,
            params=dict(self.params),
            data=dict(self.body),
        )


class Router:
    """Constructors for the routes the client knows about."""

    @staticmethod
    def authorization_params(config: "StravaConfig") -> Dict[str, str]:
        """Query parameters shared by the app and web authorization URLs."""
        return {
            "client_id": config.client_id,
            "redirect_uri": config.redirect_uri,
            "scope": config.scope_string,
            "state": AUTHORIZATION_STATE,
            "approval_prompt": config.approval_prompt,
            "response_type": "code",
        }

    @staticmethod
    def app_authorization_url(config: "StravaConfig") -> str:
        """Authorization URL handled by the Strava companion app."""
        return f"{endpoints.APP_AUTHORIZATION_URL}?{urlencode(Router.authorization_params(config))}"

    @staticmethod
    def web_authorization_url(config: "StravaConfig") -> str:
        """Authorization URL for the browser-based flow."""
        return f"{endpoints.WEB_AUTHORIZATION_URL}?{urlencode(Router.authorization_params(config))}"

    @staticmethod
    def token(config: "StravaConfig", code: str) -> Route:
        """Exchange an authorization code for a token pair."""
        return Route(
            "POST",
            endpoints.TOKEN_URL,
            body={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "code": code,
                "grant_type": "authorization_code",
            },
            authenticated=False,
        )

    @staticmethod
    def refresh(config: "StravaConfig", refresh_token: str) -> Route:
        """Obtain a new access token from a refresh token."""
        return Route(
            "POST",
            endpoints.TOKEN_URL,
            body={
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            authenticated=False,
        )

    @staticmethod
    def athlete() -> Route:
        return Route("GET", endpoints.ATHLETE)

    @staticmethod
    def athlete_activities(
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        before: Optional[int] = None,
        after: Optional[int] = None,
    ) -> Route:
        params = {
            key: value
            for key, value in (
                ("page", page),
                ("per_page", per_page),
                ("before", before),
                ("after", after),
            )
            if value is not None
        }
        return Route("GET", endpoints.ATHLETE_ACTIVITIES, params=params)

    @staticmethod
    def activity(activity_id: int) -> Route:
        return Route("GET", endpoints.ACTIVITY.format(activity_id=activity_id))

    @staticmethod
    def upload_file() -> Route:
        return Route("POST", endpoints.UPLOADS)

    @staticmethod
    def upload_status(upload_id: int) -> Route:
        return Route("GET", endpoints.UPLOAD.format(upload_id=upload_id))
