"""
Exception classes for the Strava client.

All recoverable errors are delivered unchanged to the failure path of the
operation that produced them. ConfigurationError is the exception: it is
raised synchronously at the call site because it signals a programming error.
"""

from typing import Optional


class StravaError(Exception):
    """Base exception for all Strava client errors."""

    pass


class ConfigurationError(StravaError):
    """Client used before configure() was called, or configuration is invalid."""

    pass


class TransportError(StravaError):
    """Network or connectivity failure reported by the transport."""

    pass


class EmptyBodyError(StravaError):
    """Response body was absent or zero-length."""

    pass


class ParseError(StravaError):
    """Response body could not be parsed as JSON."""

    pass


class MalformedShapeError(StravaError):
    """An array was expected but the response held some other JSON value."""

    pass


class RouteError(StravaError):
    """A route could not be resolved into a transport request."""

    pass


class AuthorizationError(StravaError):
    """OAuth authorization flow error (missing code, no token in response)."""

    pass


class TokenStorageError(StravaError):
    """Token storage operation failed (file I/O error)."""

    pass


class ApiStatusError(StravaError):
    """
    Strava answered with a client error status (400-499).

    Attributes:
        status_code: HTTP status code of the response
        body: Raw response body, kept for diagnostics
    """

    def __init__(
        self,
        message: str = "Strava API Error",
        status_code: int = 0,
        body: Optional[bytes] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(f"{message} ({status_code})")
