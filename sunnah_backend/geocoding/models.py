"""Pydantic models for geocoding"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GeocodingStatus(str, Enum):
    """Statuses reported to clients in a GeocodingResponse."""

    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    INVALID_REQUEST = "INVALID_REQUEST"
    AN_ERROR_OCCURRED = "AN_ERROR_OCCURRED"


class Location(BaseModel):
    """Geographic coordinates"""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitude in decimal degrees")
    lng: float = Field(..., description="Longitude in decimal degrees")


class GeocodingResult(BaseModel):
    """A single resolved address"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    formatted_address: str = Field(..., alias="formattedAddress")
    location: Location


class GeocodingResponse(BaseModel):
    """Provider-independent geocoding response.

    ``status`` is a plain string so the primary provider's own non-success
    statuses (``OVER_QUERY_LIMIT``, ``REQUEST_DENIED``...) can be inspected
    before they are replaced by a fallback.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    results: list[GeocodingResult] = Field(default_factory=list)
    status: str

    @classmethod
    def zero_results(cls) -> "GeocodingResponse":
        return cls(results=[], status=GeocodingStatus.ZERO_RESULTS.value)

    @classmethod
    def invalid_request(cls) -> "GeocodingResponse":
        return cls(results=[], status=GeocodingStatus.INVALID_REQUEST.value)

    @classmethod
    def error(cls) -> "GeocodingResponse":
        return cls(results=[], status=GeocodingStatus.AN_ERROR_OCCURRED.value)

    def to_payload(self) -> dict:
        """Serialize with the camelCase field names clients expect."""
        return self.model_dump(mode="json", by_alias=True)


class GoogleLocation(BaseModel):
    lat: float
    lng: float


class GoogleGeometry(BaseModel):
    location: GoogleLocation


class GoogleResult(BaseModel):
    """One entry of a Google Geocoding API ``results`` array"""

    formatted_address: str
    geometry: GoogleGeometry


class GooglePayload(BaseModel):
    """Google Geocoding API response body"""

    results: list[GoogleResult] = Field(default_factory=list)
    status: str
    error_message: str | None = None


class OpenWeatherPlace(BaseModel):
    """One entry of the OpenWeather direct geocoding response"""

    name: str
    local_names: dict[str, str] | None = None
    lat: float
    lon: float
    country: str | None = None
    state: str | None = None
