"""Report CLI commands: single runs, the scheduler loop, and local previews."""

import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path

import typer
from loguru import logger


def run() -> None:
    """Generate the transfer report once and upload it."""
    from transfer_report.core.config import get_settings
    from transfer_report.services.report_service import build_report_service

    service = build_report_service(get_settings())
    try:
        result = asyncio.run(service.run_once())
    except Exception as exc:
        typer.echo(f"Error: Report run failed — {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if not result.published:
        typer.echo("No transfer data found for the configured window — nothing published.")
        return

    typer.echo(f"Published {result.record_count} transfer(s) to {result.object_key}")
    typer.echo(f"Size: {result.size_bytes:,} bytes")
    typer.echo(f"Duration: {result.duration_seconds:.1f}s")


def schedule(
    interval: int | None = typer.Option(
        None, "--interval", min=60, help="Seconds between runs, at least 60 (default from settings)"
    ),
    now: bool = typer.Option(False, "--now", help="Run once immediately before waiting"),
) -> None:
    """Run the transfer report on a fixed interval until interrupted."""
    from transfer_report.core.config import get_settings
    from transfer_report.services.report_service import build_report_service, report_loop

    settings = get_settings()
    if interval is None:
        interval = settings.report_schedule_interval
    service = build_report_service(settings)
    try:
        asyncio.run(report_loop(service, interval, run_immediately=now))
    except KeyboardInterrupt:
        logger.info("Transfer report scheduler stopped")


def preview(
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the CSV here instead of stdout"),
) -> None:
    """Collect and render the transfer report without uploading it."""
    asyncio.run(_preview(output))


async def _preview(output: Path | None) -> None:
    """Async implementation of the preview command."""
    from transfer_report.core.config import get_settings
    from transfer_report.lib.exporter.csv_writer import render_transfer_csv, write_transfer_csv
    from transfer_report.services.report_service import build_telemetry_service

    service = build_telemetry_service(get_settings())
    try:
        transfers = await service.collect_transfers()
    except Exception as exc:
        typer.echo(f"Error: Failed to collect transfers — {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if output is None:
        sys.stdout.write(render_transfer_csv(transfers))
        return

    count = write_transfer_csv(output, transfers)
    typer.echo(f"Wrote {count} transfer(s) to {output}")


def check_config() -> None:
    """Validate settings and show where today's report would be written."""
    from transfer_report.core.config import get_settings
    from transfer_report.lib.publisher.naming import object_path

    settings = get_settings()
    auth = "static token" if settings.telemetry_access_token else "client credentials"
    key = object_path(datetime.now(tz=UTC), settings.report_prefix)

    typer.echo("Configuration OK")
    typer.echo(f"  Workspace:   {settings.telemetry_workspace_id} ({auth})")
    typer.echo(f"  Window:      {settings.report_time_range_days:g} day(s)")
    typer.echo(f"  Destination: s3://{settings.report_container_name}/{key}")
    typer.echo(f"  Interval:    {settings.report_schedule_interval}s")
