"""Shared test fixtures for settings and transfer records."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from transfer_report.core.config import Settings
from transfer_report.lib.telemetry.types import TransferRecord


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        telemetry_workspace_id="00000000-0000-0000-0000-000000000001",
        telemetry_access_token="test-token",
        report_time_range_days=1.0,
        report_container_name="test-reports",
    )


def make_transfer(**overrides: Any) -> TransferRecord:
    """Build a TransferRecord with realistic defaults."""
    values: dict[str, Any] = {
        "transfer_id": "3f2b8c1e-0000-4000-8000-000000000001",
        "case_id": "C456",
        "username": "testuser",
        "transfer_direction": "Upload",
        "initiated_time": datetime(2024, 1, 1, 10, 0, tzinfo=UTC),
        "completed_time": datetime(2024, 1, 1, 10, 5, tzinfo=UTC),
        "duration_formatted": "5m 0s",
        "total_files": 10,
        "transferred_files": 10,
        "error_files": 0,
        "total_megabytes_transferred": 252.5,
        "transfer_speed_mbps": 0.842,
    }
    values.update(overrides)
    return TransferRecord(**values)


@pytest.fixture
def transfer_factory() -> Callable[..., TransferRecord]:
    """Factory for TransferRecord instances with overridable fields."""
    return make_transfer
