"""Application configuration."""

from typing import Annotated

from pydantic import BeforeValidator, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_csv(value: object) -> object:
    """Accept comma-separated strings for list settings."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


CommaSeparated = Annotated[list[str], NoDecode, BeforeValidator(_split_csv)]


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "Sunnah Assistant Backend"
    version: str = "0.1.0"

    # CORS Settings
    cors_origins: CommaSeparated = ["*"]
    cors_allow_credentials: bool = False

    # Redis Settings (rate limit counter store)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_POOL_SIZE: int = Field(default=10, ge=1)

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Geocoding providers
    GEOCODING_API_KEY: str = ""
    OPENWEATHER_API_KEY: str = ""
    GOOGLE_GEOCODING_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
    OPENWEATHER_GEOCODING_URL: str = "https://api.openweathermap.org/geo/1.0/direct"
    PROVIDER_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    PRIMARY_SUCCESS_STATUSES: CommaSeparated = Field(
        default=["OK", "ZERO_RESULTS"],
        description="Primary provider statuses that are returned without fallback",
    )

    # Comma-separated address suffixes (usually country names) to strip
    FILTER_STRING: str = ""

    # Access gate
    EXPECTED_USER_AGENT: str = ".*"
    CURRENT_APP_VERSION: str = "0"
    USER_AGENT_HEADER: str = "User-Agent"
    APP_VERSION_HEADER: str = "App-Version"
    CLIENT_IP_HEADERS: CommaSeparated = Field(
        default=["CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP"],
        description="Headers identifying the client origin, in priority order",
    )
    RATE_LIMIT: int = Field(default=15, ge=1)  # requests per window
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=3600, ge=1)

    # Operator notifications (SendGrid)
    MY_EMAIL: str = ""
    SENDGRID_API_KEY: str = ""
    SENDGRID_URL: str = "https://api.sendgrid.com/v3/mail/send"
    NOTIFY_ON_RATE_LIMIT: bool = False
    NOTIFY_ON_PROVIDER_FALLBACK: bool = False
    NOTIFY_ON_FAULT: bool = False

    # Static resource links
    TRANSLATION_LINK: str = ""
    ADHKAAR_LINK: str = ""
    QURAN_ZIP_FILE_LINK: str = ""
    QURAN_PAGES_LINK: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @field_validator("PRIMARY_SUCCESS_STATUSES")
    @classmethod
    def normalize_statuses(cls, value: list[str]) -> list[str]:
        """Provider statuses are compared upper-case."""
        return [status.upper() for status in value]

    @model_validator(mode="after")
    def validate_origins(self) -> "Settings":
        """Validate CORS origins."""
        if self.cors_origins == ["*"]:
            self.cors_origins = [
                "http://localhost",
                "http://localhost:8000",
                "http://localhost:3000",
            ]
        return self

    @property
    def notifications_configured(self) -> bool:
        """Whether SendGrid credentials are present."""
        return bool(self.MY_EMAIL and self.SENDGRID_API_KEY)

    @property
    def resource_links(self) -> dict[str, str]:
        """Static links served to clients."""
        return {
            "translationLink": self.TRANSLATION_LINK,
            "adhkaarLink": self.ADHKAAR_LINK,
            "quranZipFileLink": self.QURAN_ZIP_FILE_LINK,
            "quranPagesLink": self.QURAN_PAGES_LINK,
        }
