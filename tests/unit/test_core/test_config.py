"""Unit tests for core configuration module."""

import pytest
from pydantic import ValidationError

from transfer_report.core.config import ConfigurationError, Settings, get_settings

_REQUIRED_ENV = {
    "TELEMETRY_WORKSPACE_ID": "ws-1",
    "TELEMETRY_ACCESS_TOKEN": "token",
    "REPORT_TIME_RANGE_DAYS": "1",
    "REPORT_CONTAINER_NAME": "reports",
}


@pytest.fixture
def required_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Set the minimum environment for a valid configuration."""
    for name, value in _REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_from_env(self, required_env: pytest.MonkeyPatch) -> None:
        """Settings load from environment variables."""
        required_env.setenv("REPORT_TIME_RANGE_DAYS", "0.5")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.telemetry_workspace_id == "ws-1"
        assert settings.report_time_range_days == 0.5
        assert settings.report_container_name == "reports"

    def test_settings_defaults(self, required_env: pytest.MonkeyPatch) -> None:
        """Default values are applied correctly."""
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.telemetry_api_url == "https://api.loganalytics.io"
        assert settings.telemetry_timeout == 60.0
        assert settings.report_prefix == ""
        assert settings.report_schedule_interval == 86400
        assert settings.storage_endpoint_url is None
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    @pytest.mark.parametrize("days", ["0", "-1", "inf", "nan", "abc"])
    def test_invalid_time_range_days(self, required_env: pytest.MonkeyPatch, days: str) -> None:
        """The report window must be a finite, positive number of days."""
        required_env.setenv("REPORT_TIME_RANGE_DAYS", days)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    @pytest.mark.parametrize("name", ["REPORT_CONTAINER_NAME", "TELEMETRY_WORKSPACE_ID"])
    def test_blank_required_values(self, required_env: pytest.MonkeyPatch, name: str) -> None:
        required_env.setenv(name, "   ")
        with pytest.raises(ValidationError, match="must not be blank"):
            Settings(_env_file=None)  # type: ignore[call-arg]

    @pytest.mark.parametrize("name", list(_REQUIRED_ENV))
    def test_missing_required_values(self, required_env: pytest.MonkeyPatch, name: str) -> None:
        required_env.delenv(name)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_client_credentials_instead_of_token(self, required_env: pytest.MonkeyPatch) -> None:
        required_env.delenv("TELEMETRY_ACCESS_TOKEN")
        required_env.setenv("TELEMETRY_TENANT_ID", "tenant")
        required_env.setenv("TELEMETRY_CLIENT_ID", "client")
        required_env.setenv("TELEMETRY_CLIENT_SECRET", "secret")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.telemetry_access_token is None
        assert settings.telemetry_client_id == "client"

    def test_incomplete_client_credentials(self, required_env: pytest.MonkeyPatch) -> None:
        required_env.delenv("TELEMETRY_ACCESS_TOKEN")
        required_env.setenv("TELEMETRY_TENANT_ID", "tenant")
        with pytest.raises(ValidationError, match="Telemetry credentials missing"):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_telemetry_url_must_be_https(self, required_env: pytest.MonkeyPatch) -> None:
        required_env.setenv("TELEMETRY_API_URL", "http://api.loganalytics.io")
        with pytest.raises(ValidationError, match="HTTPS"):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_telemetry_url_trailing_slash_is_stripped(self, required_env: pytest.MonkeyPatch) -> None:
        required_env.setenv("TELEMETRY_API_URL", "https://api.loganalytics.azure.us/")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.telemetry_api_url == "https://api.loganalytics.azure.us"

    def test_schedule_interval_minimum(self, required_env: pytest.MonkeyPatch) -> None:
        required_env.setenv("REPORT_SCHEDULE_INTERVAL", "10")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_log_json_from_env(self, required_env: pytest.MonkeyPatch) -> None:
        required_env.setenv("LOG_JSON", "true")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.log_json is True


class TestGetSettings:
    """Tests for get_settings."""

    def test_returns_settings(self, required_env: pytest.MonkeyPatch, tmp_path) -> None:
        required_env.chdir(tmp_path)
        assert get_settings().report_container_name == "reports"

    def test_invalid_configuration_raises_configuration_error(
        self, required_env: pytest.MonkeyPatch, tmp_path
    ) -> None:
        required_env.chdir(tmp_path)
        required_env.delenv("REPORT_CONTAINER_NAME")
        with pytest.raises(ConfigurationError, match="report_container_name"):
            get_settings()
