"""Application startup and shutdown events."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from redis.asyncio import Redis
from redis.exceptions import ConnectionError, TimeoutError

from sunnah_backend.access.gate import AccessGate
from sunnah_backend.access.store import RedisRateLimitStore
from sunnah_backend.core.config import Settings
from sunnah_backend.core.logging import configure_logging
from sunnah_backend.geocoding.filters import AddressFilterSet
from sunnah_backend.geocoding.providers import (
    GoogleGeocodingProvider,
    OpenWeatherGeocodingProvider,
)
from sunnah_backend.geocoding.resolver import GeocodingResolver
from sunnah_backend.notifications import (
    NotificationPolicy,
    Notifier,
    SendGridNotifier,
    create_notifier,
)

logger: logging.Logger = logging.getLogger("sunnah_backend.core.events")


async def create_redis_client(
    settings: Settings, max_retries: int = 3, retry_delay: float = 1.0
) -> Redis:
    """Create the Redis client backing the rate limit store.

    Startup does not fail when Redis is down: the access gate fails open on
    storage errors, so the service keeps answering without throttling.

    Args:
        settings: Application settings
        max_retries: Connection attempts before giving up on the ping
        retry_delay: Seconds between attempts

    Returns:
        Redis client
    """
    client = Redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.REDIS_POOL_SIZE,
        health_check_interval=15,
    )

    for attempt in range(max_retries):
        try:
            await client.ping()
            logger.info(f"Redis client initialized - Size: {settings.REDIS_POOL_SIZE}")
            return client
        except (ConnectionError, TimeoutError, OSError) as e:
            if attempt == max_retries - 1:
                logger.warning(
                    f"Redis unavailable after {max_retries} attempts: {e}. "
                    "Rate limiting will fail open until it recovers."
                )
                break
            logger.warning(
                f"Redis connection attempt {attempt + 1}/{max_retries} "
                f"failed: {e}. Retrying in {retry_delay}s..."
            )
            await asyncio.sleep(retry_delay)

    return client


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client shared by the provider clients and the notifier."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.PROVIDER_TIMEOUT_SECONDS, connect=5.0)
    )


def create_resolver(
    settings: Settings, client: httpx.AsyncClient, notifier: Notifier
) -> GeocodingResolver:
    """Build the resolver; the filter set is derived once here."""
    return GeocodingResolver(
        primary=GoogleGeocodingProvider(
            client,
            api_key=settings.GEOCODING_API_KEY,
            base_url=settings.GOOGLE_GEOCODING_URL,
        ),
        secondary=OpenWeatherGeocodingProvider(
            client,
            api_key=settings.OPENWEATHER_API_KEY,
            base_url=settings.OPENWEATHER_GEOCODING_URL,
            limit=1,
        ),
        filters=AddressFilterSet.from_string(settings.FILTER_STRING),
        notifier=notifier,
        policy=NotificationPolicy.from_settings(settings),
        success_statuses=settings.PRIMARY_SUCCESS_STATUSES,
    )


class AppState:
    """Long-lived components shared by all requests."""

    def __init__(
        self,
        settings: Settings,
        access_gate: AccessGate,
        resolver: GeocodingResolver,
        notifier: Notifier,
        http_client: httpx.AsyncClient | None = None,
        redis: Redis | None = None,
    ) -> None:
        self.settings = settings
        self.access_gate = access_gate
        self.resolver = resolver
        self.notifier = notifier
        self.http_client = http_client
        self.redis = redis

    def install(self, app: Any) -> None:
        """Expose the components on ``app.state``."""
        app.state.settings = self.settings
        app.state.access_gate = self.access_gate
        app.state.resolver = self.resolver
        app.state.notifier = self.notifier

    async def close(self) -> None:
        try:
            if isinstance(self.notifier, SendGridNotifier):
                logger.info("Waiting for pending notifications...")
                await self.notifier.drain()

            if self.http_client is not None:
                await self.http_client.aclose()
                logger.info("HTTP client closed")

            if self.redis is not None:
                logger.info("Closing Redis connections...")
                await self.redis.aclose()
                logger.info("Redis connections closed")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
            raise


async def create_app_state(settings: Settings) -> AppState:
    """Create every long-lived component from ``settings``."""
    redis = await create_redis_client(settings)
    http_client = create_http_client(settings)
    notifier = create_notifier(settings, http_client)

    gate = AccessGate.from_settings(
        settings, store=RedisRateLimitStore(redis), notifier=notifier
    )
    resolver = create_resolver(settings, http_client, notifier)

    return AppState(
        settings=settings,
        access_gate=gate,
        resolver=resolver,
        notifier=notifier,
        http_client=http_client,
        redis=redis,
    )


def create_lifespan(settings: Settings) -> Any:
    """Create the lifespan handler that owns the application state."""

    @asynccontextmanager
    async def lifespan(app: Any) -> AsyncIterator[None]:
        configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
        state = await create_app_state(settings)
        state.install(app)
        logger.info(
            "Application startup complete - "
            f"Redis: {settings.REDIS_URL}, "
            f"Rate limit: {settings.RATE_LIMIT}/{settings.RATE_LIMIT_WINDOW_SECONDS}s"
        )
        try:
            yield
        finally:
            await state.close()
            logger.info("Application shutdown complete")

    return lifespan
