"""Client fingerprinting for rate limiting."""

from collections.abc import Sequence

from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"


def client_fingerprint(request: Request, headers: Sequence[str]) -> str:
    """Identify the network origin of a request.

    The first non-empty header from ``headers`` wins; otherwise the raw
    connection address is used.
    """
    for name in headers:
        value = request.headers.get(name, "").strip()
        if value:
            return value

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT
