"""Tests for Strava domain models and their lenient decoding."""

import time

from strava_client.models import Activity, Athlete, OAuthToken, StravaModel, UploadStatus


class SimpleModel(StravaModel):
    """Model with a number and a string field."""

    id: int = 0
    name: str = ""


class TestLenientDecoding:
    """Tests for StravaModel.from_json."""

    def test_empty_object_yields_defaults(self):
        """An empty object decodes to field defaults without error."""
        model = SimpleModel.from_json({})

        assert model.id == 0
        assert model.name == ""

    def test_non_object_values_yield_defaults(self):
        """None, lists and scalars decode to defaults."""
        for value in (None, [], [1, 2], "text", 42, True):
            model = SimpleModel.from_json(value)
            assert model.id == 0
            assert model.name == ""

    def test_valid_fields_are_decoded(self):
        """Well-formed fields are taken as-is."""
        model = SimpleModel.from_json({"id": 7, "name": "Morning Ride"})

        assert model.id == 7
        assert model.name == "Morning Ride"

    def test_malformed_fields_fall_back_to_defaults(self):
        """Fields with the wrong type take their defaults."""
        model = SimpleModel.from_json({"id": {"nested": True}, "name": ["a", "b"]})

        assert model.id == 0
        assert model.name == ""

    def test_null_fields_fall_back_to_defaults(self):
        """JSON null for a non-optional field takes the default."""
        model = SimpleModel.from_json({"id": None, "name": None})

        assert model.id == 0
        assert model.name == ""

    def test_lax_coercion_applies_before_fallback(self):
        """Numeric strings are coerced to numbers."""
        model = SimpleModel.from_json({"id": "42"})

        assert model.id == 42

    def test_one_bad_field_does_not_affect_others(self):
        """Only the malformed field is defaulted."""
        model = SimpleModel.from_json({"id": "not a number", "name": "Lunch Run"})

        assert model.id == 0
        assert model.name == "Lunch Run"

    def test_unknown_fields_are_ignored(self):
        """Extra keys in the payload are ignored."""
        model = SimpleModel.from_json({"id": 1, "brand_new_field": "x"})

        assert model.id == 1
        assert not hasattr(model, "brand_new_field")

    def test_malformed_nested_model_becomes_none(self):
        """A nested model that is not an object decodes to its default."""
        activity = Activity.from_json({"id": 1, "athlete": "oops"})

        assert activity.id == 1
        assert activity.athlete is None

    def test_nested_model_is_decoded_leniently(self):
        """Nested models apply the same lenient rules."""
        token = OAuthToken.from_json({"access_token": "a", "athlete": {"id": "5", "firstname": 3.5}})

        assert token.athlete is not None
        assert token.athlete.id == 5
        assert token.athlete.firstname == ""


class TestOAuthToken:
    """Tests for OAuthToken helpers."""

    def test_decodes_token_response(self):
        """A token endpoint response decodes into all fields."""
        token = OAuthToken.from_json(
            {
                "token_type": "Bearer",
                "access_token": "access",
                "refresh_token": "refresh",
                "expires_at": 1893456000,
                "expires_in": 21600,
                "athlete": {"id": 99, "username": "rider"},
            }
        )

        assert token.access_token == "access"
        assert token.refresh_token == "refresh"
        assert token.expires_at == 1893456000
        assert token.token_type == "Bearer"
        assert token.athlete.username == "rider"

    def test_is_expired(self):
        """is_expired compares expires_at with the current time."""
        past = OAuthToken(access_token="a", expires_at=int(time.time()) - 10)
        future = OAuthToken(access_token="a", expires_at=int(time.time()) + 3600)

        assert past.is_expired is True
        assert future.is_expired is False

    def test_expires_within(self):
        """expires_within looks ahead by the given number of seconds."""
        token = OAuthToken(access_token="a", expires_at=int(time.time()) + 120)

        assert token.expires_within(300) is True
        assert token.expires_within(10) is False

    def test_to_dict_round_trips_through_from_json(self):
        """to_dict output decodes back to an equal token."""
        token = OAuthToken(access_token="a", refresh_token="r", expires_at=1, athlete=Athlete(id=3))

        assert OAuthToken.from_json(token.to_dict()) == token


class TestUploadStatus:
    """Tests for UploadStatus decoding."""

    def test_pending_upload(self):
        """A pending upload has no activity id yet."""
        status = UploadStatus.from_json(
            {"id": 1, "status": "Your activity is still being processed.", "error": None}
        )

        assert status.id == 1
        assert status.activity_id is None
        assert status.error is None
