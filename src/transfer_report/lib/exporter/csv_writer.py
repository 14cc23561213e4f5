"""CSV report writer for transfer records."""

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from transfer_report.lib.telemetry.types import TransferRecord

REPORT_COLUMNS = [
    "TransferId",
    "CaseId",
    "Username",
    "TransferDirection",
    "StartedTime",
    "CompletedTime",
    "Duration",
    "TotalFiles",
    "TransferredFiles",
    "ErrorFiles",
    "TotalMegaBytesTransferred",
    "AverageTransferSpeedMbps",
    "TransferStatus",
]


def format_cell(value: object) -> str:
    """Render a value with locale-invariant formatting.

    Absent values become empty cells, datetimes use ISO-8601 and numbers use
    their natural ``str`` form (no thousands separators).
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def transfer_row(record: TransferRecord) -> list[str]:
    """Cells for one record, in ``REPORT_COLUMNS`` order."""
    return [
        format_cell(record.transfer_id),
        format_cell(record.case_id),
        format_cell(record.username),
        format_cell(record.transfer_direction),
        format_cell(record.initiated_time),
        format_cell(record.completed_time),
        format_cell(record.duration_formatted),
        format_cell(record.total_files),
        format_cell(record.transferred_files),
        format_cell(record.error_files),
        format_cell(record.total_megabytes_transferred),
        format_cell(record.transfer_speed_mbps),
        format_cell(record.transfer_status.value),
    ]


def render_transfer_csv(records: Iterable[TransferRecord]) -> str:
    """Render transfer records as a CSV document.

    One header line followed by one line per record, in input order. Cells
    containing a delimiter, quote or line break are quoted; all others are
    written as-is.

    Args:
        records: Transfer records to render.

    Returns:
        The CSV document text, ``\\n``-terminated lines.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    for record in records:
        writer.writerow(transfer_row(record))
    return buffer.getvalue()


def write_transfer_csv(output_path: Path, records: Iterable[TransferRecord]) -> int:
    """Write a transfer report to a local CSV file.

    Args:
        output_path: Path to write the CSV file.
        records: Transfer records to render.

    Returns:
        Number of records written.
    """
    rows = list(records)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_transfer_csv(rows), encoding="utf-8")
    return len(rows)
