"""Maps HTTP status codes to the client's error taxonomy."""

from typing import Optional

from ..exceptions import ApiStatusError

CLIENT_ERROR_STATUSES = range(400, 500)


def classify_status(
    status_code: Optional[int], body: Optional[bytes] = None
) -> Optional[ApiStatusError]:
    """
    Classify a response status.

    Client errors (400-499) fail the call even when the body would decode
    into a valid object. Every other status, including 5xx, is left to the
    serializer.

    Args:
        status_code: HTTP status, None when the transport produced no response
        body: Response body, attached to the error for diagnostics

    Returns:
        ApiStatusError for 400-499, None otherwise
    """
    if status_code is not None and status_code in CLIENT_ERROR_STATUSES:
        return ApiStatusError("Strava API Error", status_code=status_code, body=body)
    return None
