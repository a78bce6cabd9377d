"""HTTP routes."""

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from sunnah_backend.core.config import Settings
from sunnah_backend.core.logging import get_request_logger
from sunnah_backend.geocoding.models import GeocodingResponse
from sunnah_backend.geocoding.resolver import (
    DEFAULT_LANGUAGE,
    GeocodingError,
    GeocodingResolver,
)

router = APIRouter(default_response_class=JSONResponse)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_resolver(request: Request) -> GeocodingResolver:
    return request.app.state.resolver


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns
    -------
        Dict containing health status information
    """
    return {"status": "UP"}


@router.get("/geocoding-data")
async def geocoding_data(
    request: Request,
    address: str | None = Query(None, description="Free-text address to resolve"),
    language: str | None = Query(None, description="Language of localized names"),
    resolver: GeocodingResolver = Depends(get_resolver),
) -> JSONResponse:
    """
    Resolve an address to coordinates and a formatted address.

    A missing or blank address answers ``INVALID_REQUEST`` with HTTP 200 so
    clients always receive the same response shape. Faults answer
    ``AN_ERROR_OCCURRED`` with HTTP 500.
    """
    if not address or not address.strip():
        return JSONResponse(GeocodingResponse.invalid_request().to_payload())

    try:
        response = await resolver.resolve(address, language or DEFAULT_LANGUAGE)
    except GeocodingError as e:
        logger = get_request_logger(getattr(request.state, "correlation_id", None))
        logger.error("geocoding_failed", error=str(e), cause=repr(e.__cause__))
        return JSONResponse(
            GeocodingResponse.error().to_payload(),
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return JSONResponse(response.to_payload())


@router.get("/resources/links")
async def resource_links(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Static resource URLs used by the clients."""
    return settings.resource_links


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
