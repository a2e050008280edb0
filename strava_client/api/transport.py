"""
HTTP transport built on requests.

The transport executes a resolved request and reports what happened as a
TransportResponse. It never raises for network failures: those are returned
as a TransportError so the dispatcher can route them to the caller's failure
path. No retries and no timeout beyond what the session provides.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from ..exceptions import TransportError
from .router import RequestDescriptor

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """
    Result of executing a request.

    Attributes:
        status_code: HTTP status (None if no response was received)
        headers: Response headers
        body: Raw response body
        error: Transport-level failure, if any
    """

    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    error: Optional[TransportError] = None


class RequestsTransport:
    """Executes requests through a shared requests.Session."""

    def __init__(
        self, session: Optional[requests.Session] = None, timeout: Optional[float] = None
    ):
        """
        Initialize transport.

        Args:
            session: Session to use (creates one if not provided)
            timeout: Per-request timeout in seconds (None: requests default)
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        """Execute a plain (query or form-encoded) request."""
        return self._execute(
            descriptor,
            params=descriptor.params or None,
            data=descriptor.data or None,
        )

    def send_multipart(
        self,
        descriptor: RequestDescriptor,
        files: Dict[str, Any],
        data: Optional[Dict[str, str]] = None,
    ) -> TransportResponse:
        """
        Execute a multipart/form-data request.

        Args:
            descriptor: Resolved request (its form data is merged into data)
            files: requests-style files mapping
            data: Additional string form fields
        """
        form = dict(descriptor.data)
        form.update(data or {})
        return self._execute(
            descriptor,
            params=descriptor.params or None,
            data=form or None,
            files=files,
        )

    def _execute(self, descriptor: RequestDescriptor, **kwargs: Any) -> TransportResponse:
        logger.debug(f"{descriptor.method} {descriptor.url}")

        try:
            response = self.session.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.warning(f"Network error for {descriptor.method} {descriptor.url}: {e}")
            error = TransportError(f"Network error: {e}")
            error.__cause__ = e
            return TransportResponse(error=error)

        logger.debug(f"Response: {response.status_code}")
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
