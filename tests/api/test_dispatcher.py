"""Tests for the request dispatcher pipeline."""

from unittest import mock

import pytest

from strava_client.api.router import Route, Router
from strava_client.api.serializers import ResponseSerializer
from strava_client.api.transport import TransportResponse
from strava_client.api.upload import DataType, UploadData
from strava_client.completion import ImmediateExecutor
from strava_client.exceptions import (
    ApiStatusError,
    ConfigurationError,
    EmptyBodyError,
    MalformedShapeError,
    ParseError,
    RouteError,
    TransportError,
)
from strava_client.models import Activity, Athlete, OAuthToken, UploadStatus


class RecordingExecutor(ImmediateExecutor):
    """Immediate executor that counts submissions."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, /, *args, **kwargs):
        self.submitted.append(fn)
        return super().submit(fn, *args, **kwargs)


class TestRequest:
    """Tests for single-object requests."""

    def test_success_decodes_model(self, client, transport):
        """A 200 response decodes into the model and fires on_success once."""
        transport.queue_json({"id": 227615, "firstname": "John"})
        on_success = mock.Mock()
        on_failure = mock.Mock()

        future = client.request(Router.athlete(), Athlete, on_success, on_failure)

        athlete = future.result()
        assert athlete.id == 227615
        on_success.assert_called_once_with(athlete)
        on_failure.assert_not_called()

    def test_sends_stored_token(self, client, transport, token_store):
        """The stored access token is sent as a Bearer header."""
        token_store.set(OAuthToken(access_token="access_abc"))
        transport.queue_json({"id": 1})

        client.request(Router.athlete(), Athlete).result()

        assert transport.sent[0].headers["Authorization"] == "Bearer access_abc"
        assert transport.sent[0].url == "https://www.strava.com/api/v3/athlete"

    def test_no_token_no_auth_header(self, client, transport):
        """Without a stored token no Authorization header is sent."""
        transport.queue_json({"id": 1})

        client.request(Router.athlete(), Athlete).result()

        assert "Authorization" not in transport.sent[0].headers

    def test_key_path_narrows_response(self, client, transport):
        """The route's key path selects the payload."""
        transport.queue_json({"data": {"athlete": {"id": 3}}})
        route = Route("GET", "/athlete", key_path="data.athlete")

        assert client.request(route, Athlete).result().id == 3

    @pytest.mark.parametrize("status_code", [400, 401, 404, 499])
    def test_client_error_status_fails_even_with_valid_body(self, client, transport, status_code):
        """400-499 fail with ApiStatusError regardless of the body."""
        transport.queue_json({"id": 1, "firstname": "John"}, status_code=status_code)
        on_success = mock.Mock()
        on_failure = mock.Mock()

        future = client.request(Router.athlete(), Athlete, on_success, on_failure)

        error = future.exception()
        assert isinstance(error, ApiStatusError)
        assert error.status_code == status_code
        on_failure.assert_called_once_with(error)
        on_success.assert_not_called()

    def test_status_classification_precedes_parse(self, client, transport):
        """A 4xx with a non-JSON body is a status error, not a parse error."""
        transport.queue(TransportResponse(status_code=401, body=b"<html>Unauthorized</html>"))

        error = client.request(Router.athlete(), Athlete).exception()

        assert isinstance(error, ApiStatusError)

    @pytest.mark.parametrize("status_code", [200, 399, 500])
    def test_other_statuses_are_decoded(self, client, transport, status_code):
        """Statuses outside 400-499 go to the serializer."""
        transport.queue_json({"id": 5}, status_code=status_code)

        assert client.request(Router.athlete(), Athlete).result().id == 5

    def test_server_error_with_html_is_parse_error(self, client, transport):
        """A 500 with an HTML body fails while parsing."""
        transport.queue(TransportResponse(status_code=500, body=b"<html>Oops</html>"))

        assert isinstance(client.request(Router.athlete(), Athlete).exception(), ParseError)

    def test_transport_error_delivered(self, client, transport):
        """Network failures reach on_failure unchanged."""
        transport.queue_error("connection refused")
        on_failure = mock.Mock()

        future = client.request(Router.athlete(), Athlete, on_failure=on_failure)

        error = future.exception()
        assert isinstance(error, TransportError)
        assert str(error) == "connection refused"
        on_failure.assert_called_once_with(error)

    def test_empty_body(self, client, transport):
        """An empty 200 response fails with EmptyBodyError."""
        transport.queue(TransportResponse(status_code=200, body=b""))

        assert isinstance(client.request(Router.athlete(), Athlete).exception(), EmptyBodyError)

    def test_route_error_delivered_without_network_call(self, client, transport):
        """An unresolvable route fails through the callback, not the call site."""
        on_failure = mock.Mock()

        future = client.request(Route("GET", "ftp://example.com"), Athlete, on_failure=on_failure)

        assert isinstance(future.exception(), RouteError)
        on_failure.assert_called_once()
        assert transport.sent == []

    def test_unconfigured_raises_synchronously(self, unconfigured_client, transport):
        """Requests before configure() raise at the call site without network calls."""
        on_success = mock.Mock()
        on_failure = mock.Mock()

        with pytest.raises(ConfigurationError):
            unconfigured_client.request(Router.athlete(), Athlete, on_success, on_failure)

        assert transport.sent == []
        on_success.assert_not_called()
        on_failure.assert_not_called()

    def test_callback_executor_runs_callbacks(self, client, transport):
        """Callbacks are scheduled on the given executor."""
        transport.queue_json({"id": 1})
        callback_executor = RecordingExecutor()
        on_success = mock.Mock()

        client.request(
            Router.athlete(), Athlete, on_success=on_success, callback_executor=callback_executor
        )

        assert callback_executor.submitted == [on_success]
        on_success.assert_called_once()


class TestRequestArray:
    """Tests for list requests."""

    def test_success_preserves_order(self, client, transport):
        """A JSON array decodes into a list in order."""
        transport.queue_json([{"id": 1, "name": "Morning Ride"}, {"id": 2, "name": "Lunch Run"}])

        activities = client.request_array(Router.athlete_activities(page=1), Activity).result()

        assert [a.id for a in activities] == [1, 2]
        assert transport.sent[0].params == {"page": 1}

    def test_object_response_fails_with_shape_error(self, client, transport):
        """A JSON object where an array was expected fails."""
        transport.queue_json({"a": 1})
        on_success = mock.Mock()
        on_failure = mock.Mock()

        future = client.request_array(Router.athlete_activities(), Activity, on_success, on_failure)

        error = future.exception()
        assert isinstance(error, MalformedShapeError)
        assert '{"a": 1}' in str(error)
        on_success.assert_not_called()
        on_failure.assert_called_once_with(error)

    def test_client_error_status(self, client, transport):
        """Status errors take precedence in array mode too."""
        transport.queue_json([], status_code=403)

        assert isinstance(
            client.request_array(Router.athlete_activities(), Activity).exception(),
            ApiStatusError,
        )


class TestUpload:
    """Tests for multipart uploads."""

    def test_upload_sends_file_and_string_params(self, client, transport, token_store):
        """The file part and string parameters are sent with the auth header."""
        token_store.set(OAuthToken(access_token="access_abc"))
        transport.queue_json({"id": 99, "status": "Your activity is still being processed."}, 201)
        upload = UploadData(
            b"<gpx/>",
            DataType.GPX,
            name="evening_ride",
            params={"data_type": "gpx", "trainer": 1},
        )

        status = client.upload(Router.upload_file(), upload, UploadStatus).result()

        assert status.id == 99
        files, data = transport.multipart[0]
        assert files == {"file": ("evening_ride.gpx", b"<gpx/>", "application/octet-stream")}
        assert data == {"data_type": "gpx"}
        assert transport.sent[0].method == "POST"
        assert transport.sent[0].url == "https://www.strava.com/api/v3/uploads"
        assert transport.sent[0].headers["Authorization"] == "Bearer access_abc"

    def test_upload_failure(self, client, transport):
        """Upload errors reach on_failure."""
        transport.queue_json({"message": "Bad Request"}, status_code=400)
        on_failure = mock.Mock()

        future = client.upload(
            Router.upload_file(), UploadData(b"x"), UploadStatus, on_failure=on_failure
        )

        assert isinstance(future.exception(), ApiStatusError)
        on_failure.assert_called_once()

    def test_upload_unconfigured(self, unconfigured_client, transport):
        """Uploads before configure() raise synchronously."""
        with pytest.raises(ConfigurationError):
            unconfigured_client.upload(Router.upload_file(), UploadData(b"x"), UploadStatus)

        assert transport.sent == []


class TestPerform:
    """Tests for the synchronous pipeline."""

    def test_perform_raises_errors(self, client, transport):
        """perform() raises instead of delivering through a future."""
        transport.queue_json({}, status_code=401)

        with pytest.raises(ApiStatusError):
            client.dispatcher.perform(Router.athlete(), ResponseSerializer(Athlete))
