"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
Invalid or missing values raise ``ConfigurationError`` before any report run starts.
"""

import math
from typing import Self

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required setting is missing or invalid."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Telemetry (Log Analytics workspace)
    telemetry_workspace_id: str = Field(
        description="Log Analytics workspace ID holding the transfer activity events",
    )
    telemetry_api_url: str = Field(
        default="https://api.loganalytics.io",
        description="Base URL of the Log Analytics query API",
    )
    telemetry_access_token: str | None = Field(
        default=None,
        description="Pre-issued bearer token for the query API (takes precedence over client credentials)",
    )
    telemetry_tenant_id: str | None = Field(
        default=None,
        description="Tenant ID of the service principal used to query telemetry",
    )
    telemetry_client_id: str | None = Field(
        default=None,
        description="Client ID of the service principal used to query telemetry",
    )
    telemetry_client_secret: str | None = Field(
        default=None,
        description="Client secret of the service principal used to query telemetry",
    )
    telemetry_authority_url: str = Field(
        default="https://login.microsoftonline.com",
        description="Identity platform base URL for the client-credentials flow",
    )
    telemetry_timeout: float = Field(
        default=60.0,
        description="Telemetry query request timeout in seconds",
        gt=0,
    )

    @field_validator("telemetry_workspace_id")
    @classmethod
    def validate_workspace_id(cls, v: str) -> str:
        if not v.strip():
            msg = "telemetry_workspace_id must not be blank"
            raise ValueError(msg)
        return v.strip()

    @field_validator("telemetry_api_url", "telemetry_authority_url")
    @classmethod
    def validate_https_url(cls, v: str) -> str:
        if not v.startswith("https://"):
            msg = "Telemetry endpoints must use HTTPS"
            raise ValueError(msg)
        return v.rstrip("/")

    # Report
    report_time_range_days: float = Field(
        description="Trailing window, in days, of telemetry included in each report",
        gt=0,
    )
    report_container_name: str = Field(
        description="Destination bucket for rendered reports",
    )
    report_prefix: str = Field(
        default="",
        description="Key prefix within the destination bucket",
    )
    report_schedule_interval: int = Field(
        default=86400,
        description="Seconds between scheduled report runs",
        ge=60,
    )

    @field_validator("report_time_range_days")
    @classmethod
    def validate_time_range_days(cls, v: float) -> float:
        if not math.isfinite(v):
            msg = "report_time_range_days must be a finite number"
            raise ValueError(msg)
        return v

    @field_validator("report_container_name")
    @classmethod
    def validate_container_name(cls, v: str) -> str:
        if not v.strip():
            msg = "report_container_name must not be blank"
            raise ValueError(msg)
        return v.strip()

    # Object storage (S3-compatible)
    storage_endpoint_url: str | None = Field(
        default=None,
        description="S3-compatible endpoint URL (unset for AWS S3)",
    )
    storage_access_key_id: str | None = Field(
        default=None,
        description="Storage access key (unset to use the default credential chain)",
    )
    storage_secret_access_key: str | None = Field(
        default=None,
        description="Storage secret key (unset to use the default credential chain)",
    )
    storage_region: str | None = Field(
        default=None,
        description="Storage region name",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )
    log_json: bool = Field(
        default=False,
        description="Emit stderr logs as serialized JSON",
    )

    @model_validator(mode="after")
    def validate_telemetry_credentials(self) -> Self:
        if self.telemetry_access_token:
            return self
        if not all([self.telemetry_tenant_id, self.telemetry_client_id, self.telemetry_client_secret]):
            msg = (
                "Telemetry credentials missing: set TELEMETRY_ACCESS_TOKEN or all of "
                "TELEMETRY_TENANT_ID, TELEMETRY_CLIENT_ID and TELEMETRY_CLIENT_SECRET"
            )
            raise ValueError(msg)
        return self


def get_settings() -> Settings:
    """Create and return application settings.

    Raises:
        ConfigurationError: If any setting is missing or invalid.
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
