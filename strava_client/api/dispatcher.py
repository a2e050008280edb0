"""
Request dispatcher.

Runs the request pipeline for the client:

    Route -> transport -> status classification -> serializer -> Future/callbacks

Client error statuses (400-499) always fail the call, even when the body
would decode. Everything else goes through the serializer, whose errors are
delivered to the failure path as well. There are no retries and no ordering
guarantees between independent calls.
"""

import logging
from concurrent.futures import Executor, Future
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Type

from ..completion import Completion, FailureCallback, SuccessCallback
from .classifier import classify_status
from .router import RequestDescriptor, Route
from .serializers import ArrayResponseSerializer, ResponseSerializer, T
from .transport import RequestsTransport, TransportResponse
from .upload import UploadData

if TYPE_CHECKING:
    from ..oauth.config import StravaConfig

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Executes routes and decodes their responses.

    The dispatcher does not own configuration: it asks config_provider for
    the current StravaConfig on every call. The provider raises
    ConfigurationError when the client has not been configured, which
    propagates synchronously to the caller before any network call is made.
    """

    def __init__(
        self,
        config_provider: Callable[[], "StravaConfig"],
        executor: Executor,
        transport: Optional[RequestsTransport] = None,
        callback_executor: Optional[Executor] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            config_provider: Returns the active configuration or raises
                             ConfigurationError
            executor: Executor the request pipeline runs on
            transport: HTTP transport (creates a RequestsTransport if not provided)
            callback_executor: Default executor for callbacks (None: inline)
        """
        self._config_provider = config_provider
        self.executor = executor
        self.transport = transport or RequestsTransport()
        self.callback_executor = callback_executor

    # Synchronous pipeline

    def _resolve(self, config: "StravaConfig", route: Route) -> RequestDescriptor:
        token = config.token_store.get()
        return route.resolve(token.access_token if token else None)

    def _handle_response(self, response: TransportResponse, serializer: ResponseSerializer) -> Any:
        status_error = classify_status(response.status_code, response.body)
        if status_error is not None:
            logger.warning(f"Strava API error ({response.status_code})")
            raise status_error

        return serializer.serialize(response.body, response.error)

    def perform(self, route: Route, serializer: ResponseSerializer) -> Any:
        """
        Run a request synchronously in the calling thread.

        Args:
            route: Route to execute
            serializer: Serializer for the response body

        Returns:
            Decoded value

        Raises:
            ConfigurationError: If the client is not configured
            StravaError: Any route, transport, status or decode error
        """
        config = self._config_provider()
        descriptor = self._resolve(config, route)
        response = self.transport.send(descriptor)
        return self._handle_response(response, serializer)

    def perform_upload(
        self, route: Route, upload: UploadData, serializer: ResponseSerializer
    ) -> Any:
        """Run a multipart upload synchronously in the calling thread."""
        config = self._config_provider()
        descriptor = self._resolve(config, route)
        files, data = upload.multipart_fields()
        logger.info(f"Uploading {upload.file_name}")
        response = self.transport.send_multipart(descriptor, files, data)
        return self._handle_response(response, serializer)

    # Asynchronous API

    def _submit(
        self,
        work: Callable[[], Any],
        on_success: Optional[SuccessCallback],
        on_failure: Optional[FailureCallback],
        callback_executor: Optional[Executor],
    ) -> Future:
        completion = Completion(
            on_success,
            on_failure,
            callback_executor or self.callback_executor,
        )

        def run() -> None:
            try:
                value = work()
            except Exception as e:
                completion.fail(e)
            else:
                completion.succeed(value)

        self.executor.submit(run)
        return completion.future

    def request(
        self,
        route: Route,
        model: Type[T],
        on_success: Optional[Callable[[T], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[T]":
        """
        Request a single object.

        Args:
            route: Route to execute (its key_path narrows the response)
            model: StravaModel subclass to decode into
            on_success: Called with the decoded object
            on_failure: Called with the error
            callback_executor: Executor for callbacks (overrides the default)

        Returns:
            Future resolved with the decoded object

        Raises:
            ConfigurationError: If the client is not configured
        """
        self._config_provider()
        serializer = ResponseSerializer(model, route.key_path)
        return self._submit(
            lambda: self.perform(route, serializer), on_success, on_failure, callback_executor
        )

    def request_array(
        self,
        route: Route,
        model: Type[T],
        on_success: Optional[Callable[[List[T]], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[List[T]]":
        """
        Request a list of objects.

        Same contract as request(); a response that is not a JSON array fails
        with MalformedShapeError.
        """
        self._config_provider()
        serializer = ArrayResponseSerializer(model, route.key_path)
        return self._submit(
            lambda: self.perform(route, serializer), on_success, on_failure, callback_executor
        )

    def upload(
        self,
        route: Route,
        upload: UploadData,
        model: Type[T],
        on_success: Optional[Callable[[T], None]] = None,
        on_failure: Optional[FailureCallback] = None,
        callback_executor: Optional[Executor] = None,
    ) -> "Future[T]":
        """
        Upload a file as multipart/form-data and decode a single object.

        Raises:
            ConfigurationError: If the client is not configured
        """
        self._config_provider()
        serializer = ResponseSerializer(model, route.key_path)
        return self._submit(
            lambda: self.perform_upload(route, upload, serializer),
            on_success,
            on_failure,
            callback_executor,
        )
