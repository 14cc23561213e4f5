"""Typer CLI root application."""

import typer

from transfer_report.core.config import ConfigurationError, get_settings
from transfer_report.core.logging import setup_logging

app = typer.Typer(name="transfer-report", help="Scheduled file-transfer activity reports")


@app.callback()
def _main_callback() -> None:
    """Validate configuration and initialize logging for all CLI commands."""
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    setup_logging(settings.log_level, log_dir=settings.log_dir, json_logs=settings.log_json)


def _register_commands() -> None:
    """Register report commands on the root application."""
    from transfer_report.cli.report_cmd import check_config, preview, run, schedule

    app.command("run")(run)
    app.command("schedule")(schedule)
    app.command("preview")(preview)
    app.command("check-config")(check_config)


_register_commands()
