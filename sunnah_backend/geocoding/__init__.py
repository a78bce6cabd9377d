"""Geocoding package.

This package provides:
- Provider clients for the Google and OpenWeather geocoding APIs
- Normalization of provider payloads into one response schema
- Address suffix filtering
- The resolver that ties them together with provider fallback
"""

from sunnah_backend.geocoding.filters import AddressFilterSet
from sunnah_backend.geocoding.models import (
    GeocodingResponse,
    GeocodingResult,
    GeocodingStatus,
    Location,
)
from sunnah_backend.geocoding.providers import (
    GoogleGeocodingProvider,
    OpenWeatherGeocodingProvider,
    ProviderError,
)
from sunnah_backend.geocoding.resolver import GeocodingError, GeocodingResolver

__all__ = [
    "AddressFilterSet",
    "GeocodingError",
    "GeocodingResolver",
    "GeocodingResponse",
    "GeocodingResult",
    "GeocodingStatus",
    "GoogleGeocodingProvider",
    "Location",
    "OpenWeatherGeocodingProvider",
    "ProviderError",
]
