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
    cron_secret_token: str | None = Field(
        default=None,
        description="Shared secret expected as a bearer token by the trigger endpoints",
    )
    app_timezone: str = Field(
        default="Europe/Paris",
        description="IANA timezone (or UTC+HH:MM offset) used to store and compare dates",
    )
    app_public_url: str = Field(
        default="",
        description="Public base URL of the CRM, prefixed to action links in emails",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    task_due_soon_hours: int = Field(
        default=24, gt=0, description="Window before a task due date that counts as due soon"
    )
    deadline_lead_hours: int = Field(
        default=24, gt=0, description="Window before a project deadline that counts as approaching"
    )
    prospect_rappel_lead_hours: int = Field(
        default=24, gt=0, description="Window before a prospect follow-up that counts as due"
    )
    forgotten_task_days: int = Field(
        default=7, gt=0, description="Days without a status change before a task is forgotten"
    )
    booking_reminder_lead_minutes: int = Field(
        default=60, gt=0, description="Minutes before a booking starts when reminders are sent"
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
