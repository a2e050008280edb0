"""
Response serializers.

Turn raw response bytes into domain objects. Failure order:

1. a transport error is re-raised unchanged
2. an absent or empty body raises EmptyBodyError
3. bytes that are not JSON raise ParseError
4. the optional key path narrows the document (absent path -> None)
5. array mode only: a non-list value raises MalformedShapeError
6. the value is decoded with the model's total from_json()
"""

import json
import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from ..exceptions import EmptyBodyError, MalformedShapeError, ParseError
from ..models import StravaModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=StravaModel)


def extract_key_path(document: Any, key_path: Optional[str]) -> Any:
    """
    Navigate to the sub-value at a key path.

    A key present verbatim in the document wins, so keys that contain dots
    stay reachable; otherwise the path is split on dots.

    Args:
        document: Parsed JSON document
        key_path: Key path such as "items" or "data.items"; empty means the root

    Returns:
        The value at the path, or None if any segment is missing
    """
    if not key_path:
        return document

    if isinstance(document, dict) and key_path in document:
        return document[key_path]

    value = document
    for key in key_path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


class ResponseSerializer(Generic[T]):
    """Decodes a response body into a single model instance."""

    def __init__(self, model: Type[T], key_path: Optional[str] = None):
        """
        Initialize serializer.

        Args:
            model: StravaModel subclass to decode into
            key_path: Optional key path of the payload inside the response
        """
        self.model = model
        self.key_path = key_path

    def _extract(self, body: Optional[bytes], error: Optional[BaseException]) -> Any:
        if error is not None:
            raise error

        if not body:
            raise EmptyBodyError("Response body is empty")

        try:
            document = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug(f"Response is not valid JSON: {e}")
            raise ParseError(f"Response is not valid JSON: {e}") from e

        return extract_key_path(document, self.key_path)

    def serialize(
        self, body: Optional[bytes], error: Optional[BaseException] = None
    ) -> T:
        """
        Decode one model instance.

        Args:
            body: Raw response bytes
            error: Transport error, if the request failed

        Returns:
            Decoded model; missing fields take their defaults

        Raises:
            The transport error, EmptyBodyError or ParseError
        """
        return self.model.from_json(self._extract(body, error))


class ArrayResponseSerializer(ResponseSerializer[T]):
    """Decodes a response body into a list of model instances."""

    def serialize(  # type: ignore[override]
        self, body: Optional[bytes], error: Optional[BaseException] = None
    ) -> List[T]:
        """
        Decode a list of model instances, preserving order and length.

        Raises:
            MalformedShapeError: If the narrowed value is not a JSON array
        """
        value = self._extract(body, error)

        if not isinstance(value, list):
            raise MalformedShapeError(f"Expected JSON array but got: {json.dumps(value)}")

        return [self.model.from_json(item) for item in value]
