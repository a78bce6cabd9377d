"""Test configuration."""

from pytest import Config

from sunnah_backend.core.logging import configure_logging

pytest_plugins: list[str] = [
    "tests.fixtures.cache",
    "tests.fixtures.api",
]


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    configure_logging(testing=True)
