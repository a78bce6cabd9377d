"""Tests for client fingerprinting."""

from starlette.requests import Request

from sunnah_backend.access.fingerprint import UNKNOWN_CLIENT, client_fingerprint

HEADERS = ("CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP")


def make_request(
    headers: dict[str, str], client: tuple[str, int] | None = ("10.0.0.5", 443)
) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/geocoding-data",
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            ],
            "client": client,
        }
    )


def test_first_configured_header_wins() -> None:
    request = make_request(
        {"X-Real-IP": "192.0.2.3", "CF-Connecting-IP": "192.0.2.1"}
    )

    assert client_fingerprint(request, HEADERS) == "192.0.2.1"


def test_header_lookup_is_case_insensitive() -> None:
    request = make_request({"x-forwarded-for": "192.0.2.2"})

    assert client_fingerprint(request, HEADERS) == "192.0.2.2"


def test_blank_headers_are_skipped() -> None:
    request = make_request({"CF-Connecting-IP": "  ", "X-Real-IP": "192.0.2.3"})

    assert client_fingerprint(request, HEADERS) == "192.0.2.3"


def test_falls_back_to_connection_address() -> None:
    request = make_request({})

    assert client_fingerprint(request, HEADERS) == "10.0.0.5"


def test_unknown_without_any_origin() -> None:
    request = make_request({}, client=None)

    assert client_fingerprint(request, HEADERS) == UNKNOWN_CLIENT
