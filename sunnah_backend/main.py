"""Main FastAPI application module."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sunnah_backend.api.routes import router
from sunnah_backend.core.config import Settings
from sunnah_backend.core.events import create_lifespan
from sunnah_backend.middleware.access import AccessGateMiddleware
from sunnah_backend.middleware.correlation import CorrelationMiddleware
from sunnah_backend.middleware.errors import ErrorHandlingMiddleware
from sunnah_backend.middleware.metrics import MetricsMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Long-lived components (Redis, HTTP client, gate, resolver) are created by
    the lifespan handler and published on ``app.state``.
    """
    settings = settings or Settings()

    app = FastAPI(
        title=settings.app_name,
        description="Geocoding and resources API for the Sunnah Assistant apps",
        version=settings.version,
        default_response_class=JSONResponse,
        lifespan=create_lifespan(settings),
    )
    app.state.settings = settings

    # Middleware in order (inside -> out):
    # 1. Access gate (innermost - may short-circuit geocoding requests)
    # 2. Correlation (adds request ID, also to gate rejections)
    # 3. Metrics (tracks all requests)
    # 4. Error handling (turns unhandled errors into JSON)
    # 5. CORS (outermost - preflight never reaches the gate)
    app.add_middleware(AccessGateMiddleware)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(MetricsMiddleware)
    ErrorHandlingMiddleware.register(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=600,
    )

    app.include_router(router)
    return app


app = create_app()
