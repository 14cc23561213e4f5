"""Exporter library — public API for rendering transfer reports."""

from transfer_report.lib.exporter.csv_writer import (
    REPORT_COLUMNS,
    format_cell,
    render_transfer_csv,
    transfer_row,
    write_transfer_csv,
)

__all__ = [
    "REPORT_COLUMNS",
    "format_cell",
    "render_transfer_csv",
    "transfer_row",
    "write_transfer_csv",
]
