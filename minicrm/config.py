"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending scheduled emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Verified address that appears as the sender of outgoing emails",
        min_length=3,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to localize datetimes stored without tzinfo",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )
    scheduler_enabled: bool = Field(
        default=True,
        description="Start the scheduled email poller together with the application",
    )
    scheduler_interval_seconds: float = Field(
        default=60.0,
        description="Seconds between two polls of the scheduled email store",
        gt=0,
    )
    scheduler_batch_limit: int = Field(
        default=100,
        description="Maximum number of due emails selected by a single sweep",
        gt=0,
    )
    dispatch_group_size: int = Field(
        default=5,
        description="Number of emails sent concurrently inside a dispatch group",
        gt=0,
    )
    transport_timeout_seconds: float = Field(
        default=30.0,
        description="Upper bound for a single send or realtime publish",
        gt=0,
    )
    notification_push_concurrency: int = Field(
        default=50,
        description="Maximum concurrent realtime pushes performed by a fan-out",
        gt=0,
    )
    notification_list_limit: int = Field(
        default=50,
        description="Number of notifications returned when listing a user's inbox",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
