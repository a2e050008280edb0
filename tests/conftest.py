"""Shared pytest fixtures for Strava client tests.

Requests run on an ImmediateExecutor so every Future is resolved by the time
the call returns, and HTTP traffic goes through a scripted FakeTransport.
"""

import json
from typing import Any, List, Optional

import pytest

from strava_client import StravaClient
from strava_client.api.router import RequestDescriptor
from strava_client.api.transport import TransportResponse
from strava_client.completion import ImmediateExecutor
from strava_client.exceptions import TransportError
from strava_client.oauth.config import Scope, StravaConfig
from strava_client.oauth.token_storage import MemoryTokenStore
from strava_client.oauth.transports import AuthorizationTransport


def json_response(payload: Any, status_code: int = 200) -> TransportResponse:
    """Build a transport response with a JSON body."""
    return TransportResponse(
        status_code=status_code,
        headers={"Content-Type": "application/json"},
        body=json.dumps(payload).encode(),
    )


class FakeTransport:
    """Transport double that returns queued responses and records requests."""

    def __init__(self, responses: Optional[List[TransportResponse]] = None):
        self.responses = list(responses or [])
        self.sent: List[RequestDescriptor] = []
        self.multipart: List[tuple] = []
        self.closed = False

    def queue(self, response: TransportResponse) -> None:
        self.responses.append(response)

    def queue_json(self, payload: Any, status_code: int = 200) -> None:
        self.queue(json_response(payload, status_code))

    def queue_error(self, message: str = "connection refused") -> None:
        self.queue(TransportResponse(error=TransportError(message)))

    def _next(self) -> TransportResponse:
        if not self.responses:
            raise AssertionError("No response queued for request")
        return self.responses.pop(0)

    def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        self.sent.append(descriptor)
        return self._next()

    def send_multipart(self, descriptor, files, data=None) -> TransportResponse:
        self.sent.append(descriptor)
        self.multipart.append((files, data))
        return self._next()

    def close(self) -> None:
        self.closed = True


class FakeAuthTransport(AuthorizationTransport):
    """Authorization transport double that records start() calls."""

    def __init__(self, available: bool = True, session: Any = "session-handle"):
        self.available = available
        self.session = session
        self.started: List[tuple] = []
        self.cancelled: List[Any] = []
        self.on_result = None
        self.start_error: Optional[BaseException] = None

    def is_available(self, url: str) -> bool:
        return self.available

    def start(self, url, callback_uri, on_result):
        if self.start_error is not None:
            raise self.start_error
        self.started.append((url, callback_uri))
        self.on_result = on_result
        return self.session

    def cancel(self, session):
        self.cancelled.append(session)


@pytest.fixture
def token_payload():
    """Token endpoint response body."""
    return {
        "token_type": "Bearer",
        "expires_at": 1893456000,
        "expires_in": 21600,
        "refresh_token": "refresh_abc",
        "access_token": "access_abc",
        "athlete": {"id": 227615, "firstname": "John", "lastname": "Applestrava"},
    }


@pytest.fixture
def token_store():
    """Empty in-memory token store."""
    return MemoryTokenStore()


@pytest.fixture
def config(token_store):
    """Test client configuration."""
    return StravaConfig(
        client_id="12345",
        client_secret="test_secret",
        redirect_uri="myapp://strava/callback",
        scopes=(Scope.READ, Scope.ACTIVITY_READ),
        token_store=token_store,
    )


@pytest.fixture
def transport():
    """Scripted HTTP transport."""
    return FakeTransport()


@pytest.fixture
def native_transport():
    """Companion app handoff double (available)."""
    return FakeAuthTransport(available=True, session=None)


@pytest.fixture
def embedded_transport():
    """Browser session double."""
    return FakeAuthTransport(available=True)


@pytest.fixture
def unconfigured_client(transport, native_transport, embedded_transport):
    """Client that has not been configured."""
    return StravaClient(
        transport=transport,
        executor=ImmediateExecutor(),
        native_transport=native_transport,
        embedded_transport=embedded_transport,
    )


@pytest.fixture
def client(unconfigured_client, config):
    """Configured client running synchronously on fakes."""
    return unconfigured_client.configure(config)
