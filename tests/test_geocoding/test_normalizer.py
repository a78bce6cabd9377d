"""Tests for provider payload normalization."""

import pytest
from pydantic import ValidationError

from sunnah_backend.geocoding.models import (
    GeocodingResponse,
    GeocodingResult,
    GeocodingStatus,
    Location,
    OpenWeatherPlace,
)
from sunnah_backend.geocoding.normalizer import (
    normalize_google_response,
    normalize_openweather_response,
    openweather_place_to_result,
    place_display_name,
)
from tests.fixtures.api import google_payload

PARIS = {
    "name": "Paris",
    "local_names": {"en": "Paris", "ar": "باريس", "ru": "Париж"},
    "lat": 48.8588897,
    "lon": 2.3200410217200766,
    "country": "FR",
}


class TestGoogleNormalization:
    """Google Geocoding API bodies."""

    def test_maps_results(self) -> None:
        payload = google_payload(
            ("Champ de Mars, 75007 Paris, France", 48.8583701, 2.2944813)
        )

        response = normalize_google_response(payload)

        assert response.status == "OK"
        assert response.results == [
            GeocodingResult(
                formatted_address="Champ de Mars, 75007 Paris, France",
                location=Location(lat=48.8583701, lng=2.2944813),
            )
        ]

    def test_keeps_result_order(self) -> None:
        payload = google_payload(("First", 1.0, 1.0), ("Second", 2.0, 2.0))

        response = normalize_google_response(payload)

        assert [r.formatted_address for r in response.results] == ["First", "Second"]

    def test_ok_without_results_is_zero_results(self) -> None:
        response = normalize_google_response({"results": [], "status": "OK"})

        assert response == GeocodingResponse.zero_results()

    def test_non_success_status_is_kept(self) -> None:
        response = normalize_google_response(
            {
                "results": [],
                "status": "REQUEST_DENIED",
                "error_message": "The provided API key is invalid.",
            }
        )

        assert response.status == "REQUEST_DENIED"
        assert response.results == []

    def test_missing_status_is_invalid(self) -> None:
        with pytest.raises(ValidationError):
            normalize_google_response({"results": []})


class TestOpenWeatherNormalization:
    """OpenWeather direct geocoding bodies."""

    def test_city_and_country(self) -> None:
        response = normalize_openweather_response([PARIS], "en")

        assert response.status == GeocodingStatus.OK.value
        assert response.results[0].formatted_address == "Paris, FR"
        assert response.results[0].location == Location(
            lat=48.8588897, lng=2.3200410217200766
        )

    def test_uses_local_name_for_language(self) -> None:
        response = normalize_openweather_response([PARIS], "ar")

        assert response.results[0].formatted_address == "باريس, FR"

    def test_unknown_language_uses_name(self) -> None:
        response = normalize_openweather_response([PARIS], "sw")

        assert response.results[0].formatted_address == "Paris, FR"

    def test_includes_state(self) -> None:
        place = {
            "name": "Springfield",
            "lat": 39.7990175,
            "lon": -89.6439575,
            "country": "US",
            "state": "Illinois",
        }

        response = normalize_openweather_response([place], "en")

        assert response.results[0].formatted_address == "Springfield, Illinois, US"

    def test_only_first_entry_is_used(self) -> None:
        london_ca = {"name": "London", "lat": 42.98, "lon": -81.24, "country": "CA"}

        response = normalize_openweather_response([PARIS, london_ca], "en")

        assert len(response.results) == 1
        assert response.results[0].formatted_address == "Paris, FR"

    def test_empty_array_is_zero_results(self) -> None:
        assert normalize_openweather_response([], "en") == GeocodingResponse.zero_results()

    def test_non_array_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            normalize_openweather_response({"cod": 401}, "en")

    def test_missing_coordinates_are_invalid(self) -> None:
        with pytest.raises(ValidationError):
            normalize_openweather_response([{"name": "Paris"}], "en")

    def test_is_idempotent(self) -> None:
        first = normalize_openweather_response([PARIS], "ar")
        second = normalize_openweather_response([PARIS], "ar")

        assert first == second


def test_place_without_local_names() -> None:
    place = OpenWeatherPlace(name="Mecca", lat=21.42, lon=39.82)

    assert place_display_name(place, "ar") == "Mecca"
    assert openweather_place_to_result(place, "ar").formatted_address == "Mecca"


def test_payload_uses_camel_case() -> None:
    response = normalize_openweather_response([PARIS], "en")

    assert response.to_payload() == {
        "results": [
            {
                "formattedAddress": "Paris, FR",
                "location": {"lat": 48.8588897, "lng": 2.3200410217200766},
            }
        ],
        "status": "OK",
    }
