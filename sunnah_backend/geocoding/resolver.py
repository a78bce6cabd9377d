"""Geocoding resolution with provider fallback.

The resolver queries the primary provider (Google) and falls back to the
secondary provider (OpenWeather) when the primary answers with a status
outside the successful set or cannot be reached. The selected response is
trimmed with the configured address filter before it is returned.
"""

import logging
from collections.abc import Iterable

from sunnah_backend.core.metrics import GEOCODING_FALLBACKS, PROVIDER_REQUESTS
from sunnah_backend.geocoding.filters import AddressFilterSet
from sunnah_backend.geocoding.models import GeocodingResponse, GeocodingStatus
from sunnah_backend.geocoding.normalizer import (
    normalize_google_response,
    normalize_openweather_response,
)
from sunnah_backend.geocoding.providers import GeocodingProvider, ProviderError
from sunnah_backend.notifications import LoggingNotifier, NotificationPolicy, Notifier

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
SUCCESSFUL_STATUSES = frozenset(
    {GeocodingStatus.OK.value, GeocodingStatus.ZERO_RESULTS.value}
)


class GeocodingError(Exception):
    """Raised when an address could not be resolved because of a fault.

    The message is safe to show to callers; the underlying cause is chained.
    """

    def __init__(self, message: str = "An error occurred while performing this action"):
        super().__init__(message)


class GeocodingResolver:
    """Resolve free-text addresses through a primary and a fallback provider."""

    def __init__(
        self,
        primary: GeocodingProvider,
        secondary: GeocodingProvider,
        filters: AddressFilterSet | None = None,
        notifier: Notifier | None = None,
        policy: NotificationPolicy | None = None,
        success_statuses: Iterable[str] = SUCCESSFUL_STATUSES,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            primary: Provider queried first
            secondary: Provider queried when the primary does not succeed
            filters: Address suffixes stripped from formatted addresses
            notifier: Operator notification channel
            policy: Which events are reported through ``notifier``
            success_statuses: Primary statuses returned without fallback
        """
        self.primary = primary
        self.secondary = secondary
        self.filters = filters or AddressFilterSet()
        self.notifier = notifier or LoggingNotifier()
        self.policy = policy or NotificationPolicy()
        self.success_statuses = frozenset(s.upper() for s in success_statuses)

    async def resolve(
        self, address: str, language: str = DEFAULT_LANGUAGE
    ) -> GeocodingResponse:
        """Resolve ``address`` to coordinates and a formatted address.

        Args:
            address: Non-empty free-text address
            language: Language for localized names

        Returns:
            GeocodingResponse whose status is ``OK`` or ``ZERO_RESULTS``

        Raises:
            GeocodingError: On any fault while talking to the providers
        """
        language = language or DEFAULT_LANGUAGE
        try:
            response = await self._primary_or_fallback(address, language)
            return self.filters.apply(response)
        except Exception as e:
            logger.error(
                f"Geocoding failed for '{address[:50]}': {type(e).__name__}: {e}",
                exc_info=True,
            )
            if self.policy.notify_on_fault:
                self.notifier.notify(
                    f"Your server has experienced an exception.\n {e}"
                )
            raise GeocodingError() from e

    async def _primary_or_fallback(
        self, address: str, language: str
    ) -> GeocodingResponse:
        response = await self._query_primary(address, language)
        if response is not None and response.status in self.success_statuses:
            return response

        status = response.status if response is not None else "UNREACHABLE"
        logger.info(
            f"Primary provider {self.primary.name} returned {status}, "
            f"falling back to {self.secondary.name}"
        )
        GEOCODING_FALLBACKS.inc()
        if self.policy.notify_on_provider_fallback:
            self.notifier.notify(f"Google Geocoding Api {status}")

        return await self._query_secondary(address, language)

    async def _query_primary(
        self, address: str, language: str
    ) -> GeocodingResponse | None:
        """Query the primary provider; ``None`` means it could not be reached."""
        try:
            payload = await self.primary.fetch(address, language)
        except ProviderError as e:
            logger.warning(f"Primary geocoding request failed: {e}")
            PROVIDER_REQUESTS.labels(provider=self.primary.name, outcome="error").inc()
            return None

        response = normalize_google_response(payload)
        PROVIDER_REQUESTS.labels(
            provider=self.primary.name, outcome=response.status.lower()
        ).inc()
        return response

    async def _query_secondary(self, address: str, language: str) -> GeocodingResponse:
        try:
            payload = await self.secondary.fetch(address, language)
        except ProviderError:
            PROVIDER_REQUESTS.labels(
                provider=self.secondary.name, outcome="error"
            ).inc()
            raise

        response = normalize_openweather_response(payload, language)
        PROVIDER_REQUESTS.labels(
            provider=self.secondary.name, outcome=response.status.lower()
        ).inc()
        return response
