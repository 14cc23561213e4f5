"""Telemetry data types for transfer reporting.

A ``TransferRecord`` is one joined row of the transfer query: an initiated
event matched with its completed or failed event. Records are immutable and
live only for the duration of a single report run.
"""

import enum
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

_BYTES_PER_MEGABYTE = 1024 * 1024


class TransferStatus(enum.StrEnum):
    """Outcome of a transfer, derived from its file counts."""

    SUCCESS = "Success"
    FAILED = "Failed"
    PARTIAL = "Partial"


def format_duration(duration_seconds: int) -> str:
    """Format whole seconds as ``"{minutes}m {seconds}s"``.

    Minutes are not folded into hours, so two hours renders as ``"120m 0s"``.
    Division truncates toward zero, so a negative duration renders as
    ``"0m -5s"`` rather than ``"-1m 55s"``.
    """
    duration = int(duration_seconds)
    minutes = int(duration / 60)
    seconds = int(math.fmod(duration, 60))
    return f"{minutes}m {seconds}s"


def transfer_speed_mbps(total_bytes: float, duration_seconds: int) -> float:
    """Average throughput in megabytes per second, rounded to 3 places.

    Returns 0.0 when the duration is not positive.
    """
    if duration_seconds <= 0:
        return 0.0
    return round(total_bytes / _BYTES_PER_MEGABYTE / duration_seconds, 3)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        msg = f"Non-finite measurement: {value!r}"
        raise ValueError(msg)
    return number


def _parse_int(value: Any) -> int | None:
    # Measurements arrive as doubles (todouble) even for file counts
    if value is None or value == "":
        return None
    return int(_finite(value))


def _parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return _finite(value)


def _parse_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class TransferRecord:
    """A single file transfer joined from its initiated and terminal events."""

    transfer_id: str
    case_id: str | None = None
    username: str | None = None
    transfer_direction: str | None = None
    initiated_time: datetime | None = None
    completed_time: datetime | None = None
    duration_formatted: str | None = None
    total_files: int | None = None
    transferred_files: int | None = None
    error_files: int | None = None
    total_megabytes_transferred: float | None = None
    transfer_speed_mbps: float | None = None

    @property
    def transfer_status(self) -> TransferStatus:
        """Classify the transfer from its file counts.

        Computed on every access so it always reflects the current counts.
        """
        if not self.error_files:
            return TransferStatus.SUCCESS
        if not self.transferred_files:
            return TransferStatus.FAILED
        return TransferStatus.PARTIAL

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TransferRecord":
        """Build a record from a query result row keyed by projected column name.

        Args:
            row: Mapping of column name to raw cell value.

        Returns:
            The parsed TransferRecord.

        Raises:
            ValueError: If the row has no transfer id or a cell cannot be parsed.
        """
        transfer_id = _parse_str(row.get("TransferId"))
        if transfer_id is None:
            msg = "Query row is missing TransferId"
            raise ValueError(msg)

        initiated_time = _parse_timestamp(row.get("InitiatedTime"))
        completed_time = _parse_timestamp(row.get("CompletedTime"))

        duration_formatted = _parse_str(row.get("DurationFormatted"))
        if duration_formatted is None and initiated_time and completed_time:
            elapsed = int((completed_time - initiated_time).total_seconds())
            duration_formatted = format_duration(elapsed)

        return cls(
            transfer_id=transfer_id,
            case_id=_parse_str(row.get("CaseId")),
            username=_parse_str(row.get("Username")),
            transfer_direction=_parse_str(row.get("TransferDirection")),
            initiated_time=initiated_time,
            completed_time=completed_time,
            duration_formatted=duration_formatted,
            total_files=_parse_int(row.get("TotalFiles")),
            transferred_files=_parse_int(row.get("TransferredFiles")),
            error_files=_parse_int(row.get("ErrorFiles")),
            total_megabytes_transferred=_parse_float(row.get("TotalMegaBytesTransferred")),
            transfer_speed_mbps=_parse_float(row.get("TransferSpeedMbps")),
        )
