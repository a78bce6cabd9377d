"""Request metrics middleware for Prometheus monitoring."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.routing import Match

from sunnah_backend.core.logging import get_logger
from sunnah_backend.core.metrics import REQUEST_DURATION, REQUESTS_TOTAL, RESPONSES_TOTAL

logger = get_logger(__name__)

UNMATCHED_PATH = "unmatched"


def route_path(request: Request) -> str:
    """Path template of the matched route, used as the ``path`` label.

    Requests that matched no route share one label so unknown URLs cannot
    grow the number of series.
    """
    route = request.scope.get("route")
    if route is None:
        # Short-circuited before routing, e.g. by the access gate
        for candidate in request.app.router.routes:
            match, _ = candidate.matches(request.scope)
            if match == Match.FULL:
                route = candidate
                break
    return getattr(route, "path", None) or UNMATCHED_PATH


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect request/response metrics.

    Records:
    - Total requests by method and path
    - Total responses by status code
    - Request duration histogram
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and record metrics.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers
        """
        try:
            start_time = time.perf_counter()
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            path = route_path(request)
            REQUESTS_TOTAL.labels(method=request.method, path=path).inc()
            RESPONSES_TOTAL.labels(status_code=str(response.status_code)).inc()
            REQUEST_DURATION.labels(path=path).observe(duration)

            logger.info(
                "request_processed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration=duration,
            )
            return response

        except Exception as e:
            REQUESTS_TOTAL.labels(method=request.method, path=route_path(request)).inc()
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise
