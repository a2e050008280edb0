"""
Strava domain models.

Every model is decodable from a generic JSON value (None, number, string,
bool, list or dict) and decoding is total: a missing or malformed field
resolves to that field's default instead of raising. This keeps existing
client code working when the API adds, drops or retypes fields.

Example:
    athlete = Athlete.from_json({"id": "42", "firstname": None})
    # athlete.id == 42, athlete.firstname == ""
"""

import time
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

M = TypeVar("M", bound="StravaModel")


class StravaModel(BaseModel):
    """
    Base class for models decoded from Strava responses.

    Subclasses must give every field a default. Values are coerced in lax
    mode first (e.g. "5" -> 5); anything that still fails validation falls
    back to the field default.
    """

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_malformed(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)

    @classmethod
    def from_json(cls: Type[M], value: Any) -> M:
        """
        Build a model from a generic JSON value.

        Args:
            value: Parsed JSON; anything that is not a dict decodes to defaults

        Returns:
            Model instance (never raises for malformed input)
        """
        if not isinstance(value, dict):
            value = {}
        return cls.model_validate(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump()


class MetaAthlete(StravaModel):
    """Athlete reference embedded in other resources."""

    id: int = 0


class Athlete(StravaModel):
    """Strava athlete profile."""

    id: int = 0
    username: str = ""
    firstname: str = ""
    lastname: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    sex: str = ""
    premium: bool = False
    profile: str = ""
    profile_medium: str = ""
    created_at: str = ""
    updated_at: str = ""


class OAuthToken(StravaModel):
    """
    OAuth token pair returned by the code exchange and refresh endpoints.

    Attributes:
        access_token: Short-lived token sent as Bearer credentials
        refresh_token: Long-lived token used to obtain a new access token
        expires_at: Epoch seconds at which the access token expires
        expires_in: Lifetime in seconds at issue time
        token_type: Token type (Strava returns "Bearer")
        athlete: Authorized athlete (only on the initial code exchange)
    """

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0
    expires_in: int = 0
    token_type: str = ""
    athlete: Optional[Athlete] = None

    @property
    def is_expired(self) -> bool:
        """True if the access token has expired."""
        return time.time() >= self.expires_at

    def expires_within(self, seconds: int) -> bool:
        """
        Check if the access token expires within the given number of seconds.

        Args:
            seconds: Look-ahead window in seconds

        Returns:
            True if the token will have expired by then
        """
        return time.time() + seconds >= self.expires_at


class Activity(StravaModel):
    """Summary representation of an activity."""

    id: int = 0
    external_id: str = ""
    upload_id: int = 0
    athlete: Optional[MetaAthlete] = None
    name: str = ""
    distance: float = 0.0
    moving_time: int = 0
    elapsed_time: int = 0
    total_elevation_gain: float = 0.0
    type: str = ""
    sport_type: str = ""
    start_date: str = ""
    start_date_local: str = ""
    timezone: str = ""
    kudos_count: int = 0
    trainer: bool = False
    commute: bool = False
    private: bool = False
    average_speed: float = 0.0
    max_speed: float = 0.0


class UploadStatus(StravaModel):
    """Processing status of a file upload."""

    id: int = 0
    id_str: str = ""
    external_id: str = ""
    error: Optional[str] = None
    status: str = ""
    activity_id: Optional[int] = None
