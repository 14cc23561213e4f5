"""Object key naming for published transfer reports."""

from datetime import UTC, date, datetime

REPORT_FILE_PREFIX = "LCC_Transfer_Report"


def _utc_date(as_of: date | datetime) -> date:
    if isinstance(as_of, datetime):
        if as_of.tzinfo is not None:
            as_of = as_of.astimezone(UTC)
        return as_of.date()
    return as_of


def object_path(as_of: date | datetime, prefix: str = "") -> str:
    """Build the month-partitioned key for the report dated ``as_of``.

    Aware datetimes are converted to UTC first; naive datetimes and plain
    dates are taken to already be UTC.

    Args:
        as_of: Report date.
        prefix: Optional key prefix within the bucket.

    Returns:
        A key of the form ``{yyyy-MM}/LCC_Transfer_Report_{yyyy-MM-dd}.csv``.
    """
    day = _utc_date(as_of)
    key = f"{day:%Y-%m}/{REPORT_FILE_PREFIX}_{day:%Y-%m-%d}.csv"
    if prefix:
        return f"{prefix.strip('/')}/{key}"
    return key
