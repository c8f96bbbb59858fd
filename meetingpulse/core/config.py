# meetingpulse/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime and cover:
    - DB connection
    - Feedback window / prompt expiry
    - Magic-link and session lifetimes
    - Internal API key
    - SMTP delivery of magic links
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "MeetingPulse"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the service.")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./meetingpulse.db",
        description="SQLAlchemy-compatible database URL",
    )

    INTERNAL_API_KEY: str | None = Field(
        default=None,
        description="API key required for hitting /internal endpoints",
    )

    BASE_URL: str = Field(
        "http://localhost:8000",
        description="Public base URL used when building magic links.",
    )

    # --- Feedback lifecycle ---
    FEEDBACK_WINDOW_MINUTES: int = Field(
        default=120,
        description="How long after a meeting ends it stays eligible for feedback.",
    )
    PENDING_FEEDBACK_TTL_MINUTES: int = Field(
        default=30,
        description="Minutes after a meeting ends before its feedback prompt expires.",
    )
    FEEDBACK_COMMENT_MAX_LENGTH: int = Field(
        default=1000,
        description="Maximum accepted length of a free-text feedback comment.",
    )

    # --- Reporting ---
    WASTE_REASONS_INCLUDE_ASYNC: bool = Field(
        default=False,
        description=(
            "If true, reasons attached to 'async' feedback are counted in "
            "top_waste_reasons alongside 'waste' feedback."
        ),
    )
    REPORT_TIMEZONE: str = Field(
        default="UTC",
        description="IANA timezone used to bucket meetings into weeks and weekdays.",
    )

    # --- Auth ---
    MAGIC_LINK_TTL_MINUTES: int = Field(
        default=15,
        description="Lifetime of an issued magic-link token.",
    )
    SESSION_TTL_DAYS: int = Field(
        default=7,
        description="Lifetime of the session credential issued on verification.",
    )

    # --- SMTP / Email configuration ---
    SMTP_HOST: str | None = Field(
        default=None,
        description="SMTP server hostname for sending emails.",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port (usually 587 for TLS).",
    )
    SMTP_USERNAME: str | None = Field(
        default=None,
        description="SMTP username (if authentication is required).",
    )
    SMTP_PASSWORD: str | None = Field(
        default=None,
        description="SMTP password (if authentication is required).",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Whether to use STARTTLS when connecting to SMTP.",
    )
    SMTP_FROM_ADDRESS: str | None = Field(
        default=None,
        description="From address used in magic-link emails.",
    )

    @property
    def is_development(self) -> bool:
        return (self.APP_ENV or "local").lower() in ("local", "test", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
