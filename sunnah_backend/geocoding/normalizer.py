"""Normalization of provider payloads into GeocodingResponse.

Both functions are pure: no I/O, no shared state. Malformed payloads raise
``pydantic.ValidationError`` and are reported as faults by the resolver.
"""

from typing import Any

from sunnah_backend.geocoding.models import (
    GeocodingResponse,
    GeocodingResult,
    GeocodingStatus,
    GooglePayload,
    Location,
    OpenWeatherPlace,
)


def normalize_google_response(payload: Any) -> GeocodingResponse:
    """Map a Google Geocoding API body onto the canonical response.

    The provider status is kept verbatim. An ``OK`` without results is
    reported as ``ZERO_RESULTS``.
    """
    data = GooglePayload.model_validate(payload)
    results = [
        GeocodingResult(
            formatted_address=result.formatted_address,
            location=Location(
                lat=result.geometry.location.lat,
                lng=result.geometry.location.lng,
            ),
        )
        for result in data.results
    ]
    status = data.status.upper()
    if status == GeocodingStatus.OK.value and not results:
        status = GeocodingStatus.ZERO_RESULTS.value
    return GeocodingResponse(results=results, status=status)


def place_display_name(place: OpenWeatherPlace, language: str) -> str:
    """Localized name for ``language`` if the provider has one, else ``name``."""
    if place.local_names:
        localized = place.local_names.get(language)
        if localized:
            return localized
    return place.name


def openweather_place_to_result(
    place: OpenWeatherPlace, language: str
) -> GeocodingResult:
    """Build a result from an OpenWeather place.

    The formatted address joins name, state and country with ", ",
    leaving out whichever parts are missing.
    """
    parts = [place_display_name(place, language), place.state, place.country]
    return GeocodingResult(
        formatted_address=", ".join(part for part in parts if part),
        location=Location(lat=place.lat, lng=place.lon),
    )


def normalize_openweather_response(payload: Any, language: str) -> GeocodingResponse:
    """Map an OpenWeather direct geocoding body onto the canonical response.

    Only the first entry is used; an empty array means ``ZERO_RESULTS``.
    """
    if not isinstance(payload, list):
        raise TypeError(
            f"Expected a JSON array from OpenWeather, got {type(payload).__name__}"
        )
    if not payload:
        return GeocodingResponse.zero_results()

    place = OpenWeatherPlace.model_validate(payload[0])
    return GeocodingResponse(
        results=[openweather_place_to_result(place, language)],
        status=GeocodingStatus.OK.value,
    )
