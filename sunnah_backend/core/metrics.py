"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

REQUESTS_TOTAL = Counter(
    "app_http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "path"],
)

RESPONSES_TOTAL = Counter(
    "app_http_responses_total",
    "Total number of HTTP responses",
    labelnames=["status_code"],
)

REQUEST_DURATION = Histogram(
    "app_http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["path"],
)

ACCESS_GATE_DECISIONS = Counter(
    "app_access_gate_decisions_total",
    "Access gate outcomes for gated requests",
    labelnames=["outcome"],
)

PROVIDER_REQUESTS = Counter(
    "app_geocoding_provider_requests_total",
    "Geocoding provider calls by outcome",
    labelnames=["provider", "outcome"],
)

GEOCODING_FALLBACKS = Counter(
    "app_geocoding_fallbacks_total",
    "Resolutions that fell back to the secondary provider",
)
