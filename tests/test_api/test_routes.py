"""Tests for the HTTP routes through the full middleware stack."""

import httpx
import pytest
import respx
from fastapi import FastAPI, status
from httpx import AsyncClient

from sunnah_backend.access.gate import AccessGate
from sunnah_backend.core.config import Settings
from tests.fixtures.api import (
    CLIENT_HEADERS,
    GOOGLE_URL,
    OPENWEATHER_URL,
    google_payload,
)
from tests.fixtures.cache import FailingRateLimitStore

AUSTIN = ("Austin, TX, USA", 30.267153, -97.7430608)


class TestOpenRoutes:
    """Routes that are not behind the access gate."""

    @pytest.mark.asyncio
    async def test_health(self, test_app_async_client: AsyncClient) -> None:
        response = await test_app_async_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "UP"}
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_resource_links(self, test_app_async_client: AsyncClient) -> None:
        response = await test_app_async_client.get("/resources/links")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "translationLink": "https://example.com/translations",
            "adhkaarLink": "https://example.com/adhkaar",
            "quranZipFileLink": "https://example.com/quran.zip",
            "quranPagesLink": "https://example.com/quran-pages",
        }

    @pytest.mark.asyncio
    async def test_metrics(self, test_app_async_client: AsyncClient) -> None:
        await test_app_async_client.get("/geocoding-data", params={"address": "x"})

        response = await test_app_async_client.get("/metrics")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/plain")
        assert "app_access_gate_decisions_total" in response.text
        assert "app_http_requests_total" in response.text

    @pytest.mark.asyncio
    async def test_unknown_route_is_json_404(
        self, test_app_async_client: AsyncClient
    ) -> None:
        response = await test_app_async_client.get("/does-not-exist")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"] == "HTTPException"
        assert body["status_code"] == 404
        assert body["correlation_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_cors_preflight_is_not_gated(
        self, test_app_async_client: AsyncClient
    ) -> None:
        response = await test_app_async_client.options(
            "/geocoding-data",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert (
            response.headers["access-control-allow-origin"] == "http://localhost:3000"
        )


class TestGeocodingRoute:
    """GET /geocoding-data."""

    @pytest.mark.asyncio
    async def test_resolves_address(
        self, test_app_async_client: AsyncClient, providers_mock: respx.MockRouter
    ) -> None:
        providers_mock.get(GOOGLE_URL).respond(json=google_payload(AUSTIN))

        response = await test_app_async_client.get(
            "/geocoding-data",
            params={"address": "Austin", "language": "en"},
            headers=CLIENT_HEADERS,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "results": [
                {
                    "formattedAddress": "Austin, TX",
                    "location": {"lat": 30.267153, "lng": -97.7430608},
                }
            ],
            "status": "OK",
        }

    @pytest.mark.asyncio
    async def test_language_defaults_to_english(
        self, test_app_async_client: AsyncClient, providers_mock: respx.MockRouter
    ) -> None:
        google = providers_mock.get(GOOGLE_URL).respond(json=google_payload(AUSTIN))

        await test_app_async_client.get(
            "/geocoding-data", params={"address": "Austin"}, headers=CLIENT_HEADERS
        )

        assert google.calls.last.request.url.params["language"] == "en"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"address": ""}, {"address": "   "}])
    async def test_missing_address_is_invalid_request(
        self,
        test_app_async_client: AsyncClient,
        providers_mock: respx.MockRouter,
        params: dict[str, str],
    ) -> None:
        google = providers_mock.get(GOOGLE_URL)

        response = await test_app_async_client.get(
            "/geocoding-data", params=params, headers=CLIENT_HEADERS
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"results": [], "status": "INVALID_REQUEST"}
        assert not google.called

    @pytest.mark.asyncio
    async def test_fallback_result(
        self, test_app_async_client: AsyncClient, providers_mock: respx.MockRouter
    ) -> None:
        providers_mock.get(GOOGLE_URL).respond(
            json={"results": [], "status": "OVER_QUERY_LIMIT"}
        )
        providers_mock.get(OPENWEATHER_URL).respond(
            json=[{"name": "Cairo", "lat": 30.0443879, "lon": 31.2357257, "country": "EG"}]
        )

        response = await test_app_async_client.get(
            "/geocoding-data", params={"address": "Cairo"}, headers=CLIENT_HEADERS
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["results"][0]["formattedAddress"] == "Cairo, EG"

    @pytest.mark.asyncio
    async def test_fault_is_500_with_error_status(
        self, test_app_async_client: AsyncClient, providers_mock: respx.MockRouter
    ) -> None:
        providers_mock.get(GOOGLE_URL).respond(
            json={"results": [], "status": "REQUEST_DENIED"}
        )
        providers_mock.get(OPENWEATHER_URL).mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        response = await test_app_async_client.get(
            "/geocoding-data", params={"address": "Cairo"}, headers=CLIENT_HEADERS
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"results": [], "status": "AN_ERROR_OCCURRED"}


class TestGeocodingAccess:
    """The access gate in front of /geocoding-data."""

    @pytest.mark.asyncio
    async def test_missing_signature_is_401(
        self, test_app_async_client: AsyncClient, providers_mock: respx.MockRouter
    ) -> None:
        google = providers_mock.get(GOOGLE_URL)

        response = await test_app_async_client.get(
            "/geocoding-data", params={"address": "Austin"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.content == b""
        assert "X-Request-ID" in response.headers
        assert not google.called

    @pytest.mark.asyncio
    async def test_outdated_version_is_426(
        self, test_app_async_client: AsyncClient
    ) -> None:
        response = await test_app_async_client.get(
            "/geocoding-data",
            params={"address": "Austin"},
            headers={**CLIENT_HEADERS, "App-Version": "3"},
        )

        assert response.status_code == status.HTTP_426_UPGRADE_REQUIRED
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_rate_limit_is_429_with_retry_after(
        self, test_app_async_client: AsyncClient, providers_mock: respx.MockRouter
    ) -> None:
        google = providers_mock.get(GOOGLE_URL).respond(json=google_payload(AUSTIN))

        for _ in range(3):
            response = await test_app_async_client.get(
                "/geocoding-data", params={"address": "Austin"}, headers=CLIENT_HEADERS
            )
            assert response.status_code == status.HTTP_200_OK

        response = await test_app_async_client.get(
            "/geocoding-data", params={"address": "Austin"}, headers=CLIENT_HEADERS
        )

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.headers["Retry-After"] == "3600"
        assert response.content == b""
        assert google.call_count == 3

    @pytest.mark.asyncio
    async def test_invalid_requests_count_toward_limit(
        self, test_app_async_client: AsyncClient
    ) -> None:
        for _ in range(3):
            await test_app_async_client.get("/geocoding-data", headers=CLIENT_HEADERS)

        response = await test_app_async_client.get(
            "/geocoding-data", headers=CLIENT_HEADERS
        )

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    @pytest.mark.asyncio
    async def test_other_routes_are_never_limited(
        self, test_app_async_client: AsyncClient
    ) -> None:
        for _ in range(10):
            response = await test_app_async_client.get("/health")
            assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_storage_outage_fails_open(
        self,
        test_app: FastAPI,
        test_settings: Settings,
        test_app_async_client: AsyncClient,
        providers_mock: respx.MockRouter,
    ) -> None:
        test_app.state.access_gate = AccessGate.from_settings(
            test_settings, store=FailingRateLimitStore()
        )
        providers_mock.get(GOOGLE_URL).respond(json=google_payload(AUSTIN))

        for _ in range(5):
            response = await test_app_async_client.get(
                "/geocoding-data", params={"address": "Austin"}, headers=CLIENT_HEADERS
            )
            assert response.status_code == status.HTTP_200_OK
