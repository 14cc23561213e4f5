"""Unit tests for the report CLI commands."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from loguru import logger
from typer.testing import CliRunner

from transfer_report.cli.app import app
from transfer_report.services.report_service import ReportResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def report_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Provide a valid configuration and isolate from any local .env file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TELEMETRY_WORKSPACE_ID", "ws-1")
    monkeypatch.setenv("TELEMETRY_ACCESS_TOKEN", "token")
    monkeypatch.setenv("REPORT_TIME_RANGE_DAYS", "1")
    monkeypatch.setenv("REPORT_CONTAINER_NAME", "reports")


@pytest.fixture(autouse=True)
def restore_logging():
    """Point loguru back at the real stderr once CliRunner has closed its capture."""
    yield
    logger.remove()
    logger.add(sys.stderr)


def _mock_service(**kwargs: object) -> MagicMock:
    service = MagicMock()
    service.run_once = AsyncMock(**kwargs)
    return service


class TestRunCommand:
    """Tests for the run command."""

    def test_publishes_report(self) -> None:
        result_obj = ReportResult(
            record_count=3,
            object_key="2024-01/LCC_Transfer_Report_2024-01-15.csv",
            published=True,
            size_bytes=2048,
            duration_seconds=1.2,
        )
        with patch(
            "transfer_report.services.report_service.build_report_service",
            return_value=_mock_service(return_value=result_obj),
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert "Published 3 transfer(s) to 2024-01/LCC_Transfer_Report_2024-01-15.csv" in result.output

    def test_no_data(self) -> None:
        result_obj = ReportResult(
            record_count=0, object_key=None, published=False, size_bytes=0, duration_seconds=0.1
        )
        with patch(
            "transfer_report.services.report_service.build_report_service",
            return_value=_mock_service(return_value=result_obj),
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert "nothing published" in result.output

    def test_failure_exits_nonzero(self) -> None:
        with patch(
            "transfer_report.services.report_service.build_report_service",
            return_value=_mock_service(side_effect=RuntimeError("upload failed")),
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 1

    def test_invalid_configuration_exits_before_running(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPORT_TIME_RANGE_DAYS", "0")
        with patch("transfer_report.services.report_service.build_report_service") as mock_build:
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
        mock_build.assert_not_called()


class TestPreviewCommand:
    """Tests for the preview command."""

    def test_writes_csv_to_file(self, tmp_path: Path, transfer_factory) -> None:
        telemetry = MagicMock()
        telemetry.collect_transfers = AsyncMock(return_value=[transfer_factory(transfer_id="t-1")])
        output = tmp_path / "preview.csv"

        with patch("transfer_report.services.report_service.build_telemetry_service", return_value=telemetry):
            result = runner.invoke(app, ["preview", "--output", str(output)])

        assert result.exit_code == 0
        assert "Wrote 1 transfer(s)" in result.output
        assert output.read_text(encoding="utf-8").splitlines()[1].startswith("t-1,")

    def test_writes_csv_to_stdout(self, transfer_factory) -> None:
        telemetry = MagicMock()
        telemetry.collect_transfers = AsyncMock(return_value=[transfer_factory(transfer_id="t-9")])

        with patch("transfer_report.services.report_service.build_telemetry_service", return_value=telemetry):
            result = runner.invoke(app, ["preview"])

        assert result.exit_code == 0
        assert "TransferId,CaseId,Username" in result.output
        assert "t-9," in result.output


class TestCheckConfigCommand:
    """Tests for the check-config command."""

    def test_reports_destination(self) -> None:
        result = runner.invoke(app, ["check-config"])

        assert result.exit_code == 0
        assert "Configuration OK" in result.output
        assert "s3://reports/" in result.output
        assert "LCC_Transfer_Report_" in result.output

    def test_missing_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REPORT_CONTAINER_NAME")
        result = runner.invoke(app, ["check-config"])
        assert result.exit_code == 1


class TestScheduleCommand:
    """Tests for the schedule command."""

    def test_runs_loop_with_interval(self) -> None:
        service = _mock_service()
        with (
            patch("transfer_report.services.report_service.build_report_service", return_value=service),
            patch("transfer_report.services.report_service.report_loop", new=AsyncMock()) as mock_loop,
        ):
            result = runner.invoke(app, ["schedule", "--interval", "120", "--now"])

        assert result.exit_code == 0
        mock_loop.assert_awaited_once_with(service, 120, run_immediately=True)

    def test_defaults_to_settings_interval(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPORT_SCHEDULE_INTERVAL", "3600")
        service = _mock_service()
        with (
            patch("transfer_report.services.report_service.build_report_service", return_value=service),
            patch("transfer_report.services.report_service.report_loop", new=AsyncMock()) as mock_loop,
        ):
            result = runner.invoke(app, ["schedule"])

        assert result.exit_code == 0
        mock_loop.assert_awaited_once_with(service, 3600, run_immediately=False)

    @pytest.mark.parametrize("interval", ["-5", "0", "59"])
    def test_rejects_interval_below_minimum(self, interval: str) -> None:
        with (
            patch("transfer_report.services.report_service.build_report_service") as mock_build,
            patch("transfer_report.services.report_service.report_loop", new=AsyncMock()) as mock_loop,
        ):
            result = runner.invoke(app, ["schedule", "--interval", interval])

        assert result.exit_code != 0
        mock_build.assert_not_called()
        mock_loop.assert_not_awaited()
