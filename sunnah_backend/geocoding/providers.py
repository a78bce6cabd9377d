"""HTTP clients for the third-party geocoding providers.

The clients only move bytes: they return the decoded JSON body and raise
``ProviderError`` for transport failures. Mapping the bodies onto the
canonical schema lives in ``sunnah_backend.geocoding.normalizer``.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a provider call fails at the transport level."""

    def __init__(
        self, provider: str, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class MalformedResponseError(Exception):
    """Raised when a provider answers with a body that is not valid JSON."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class GeocodingProvider(ABC):
    """Base class for geocoding provider clients.

    All providers share one ``httpx.AsyncClient`` owned by the application.
    """

    name: str = "provider"

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str) -> None:
        """Initialize the provider client.

        Args:
            client: Shared async HTTP client
            api_key: Provider API key
            base_url: Endpoint of the provider's geocoding API
        """
        self._client = client
        self._api_key = api_key
        self.base_url = base_url

    @abstractmethod
    def build_params(self, address: str, language: str) -> dict[str, str]:
        """Query parameters for a forward geocoding request."""
        raise NotImplementedError

    async def fetch(self, address: str, language: str) -> Any:
        """Run a forward geocoding request and return the decoded JSON body.

        Raises:
            ProviderError: On network errors or non-2xx responses
            MalformedResponseError: If the body is not valid JSON
        """
        params = self.build_params(address, language)
        logger.debug(f"Querying {self.name} geocoding for '{address[:50]}'")
        try:
            response = await self._client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ProviderError(
                self.name,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise MalformedResponseError(self.name, f"invalid JSON body: {e}") from e


class GoogleGeocodingProvider(GeocodingProvider):
    """Google Geocoding API (primary provider)."""

    name = "google"

    def build_params(self, address: str, language: str) -> dict[str, str]:
        return {"address": address, "key": self._api_key, "language": language}


class OpenWeatherGeocodingProvider(GeocodingProvider):
    """OpenWeather direct geocoding API (fallback provider).

    The API has no language parameter; the language only selects among the
    ``local_names`` of the returned place.
    """

    name = "openweather"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        base_url: str,
        limit: int = 1,
    ) -> None:
        super().__init__(client, api_key, base_url)
        self.limit = limit

    def build_params(self, address: str, language: str) -> dict[str, str]:
        return {"q": address, "appid": self._api_key, "limit": str(self.limit)}
