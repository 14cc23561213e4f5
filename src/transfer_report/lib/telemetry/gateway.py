"""Log Analytics query client returning typed transfer records.

Uses httpx for async HTTP requests with timeout and error handling. Every
query is scoped to the trailing window ``[now - window_days, now]``.
"""

import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from loguru import logger

from transfer_report.core.config import ConfigurationError
from transfer_report.lib.telemetry.base import (
    BackendQueryError,
    InvalidArgumentError,
    TokenProvider,
    UnknownQueryError,
)
from transfer_report.lib.telemetry.types import TransferRecord


def validate_window_days(window_days: float) -> float:
    """Check that a query window is a finite, strictly positive number of days.

    Raises:
        ConfigurationError: If the window is not usable.
    """
    try:
        days = float(window_days)
    except (TypeError, ValueError) as exc:
        msg = f"Query window must be a number of days, got {window_days!r}"
        raise ConfigurationError(msg) from exc
    if not math.isfinite(days) or days <= 0:
        msg = f"Query window must be a finite number of days greater than 0, got {window_days!r}"
        raise ConfigurationError(msg)
    return days


def build_timespan(window_days: float, now: datetime) -> str:
    """Render ``[now - window_days, now]`` as an ISO-8601 interval."""
    end = now.astimezone(UTC)
    start = end - timedelta(days=window_days)
    return f"{start.isoformat()}/{end.isoformat()}"


def parse_query_response(payload: dict[str, Any]) -> list[TransferRecord]:
    """Convert the primary result table of a query response into records.

    Rows without a transfer id are skipped.

    Raises:
        UnknownQueryError: If the payload is not a tabular query result.
    """
    if payload.get("error"):
        error = payload["error"]
        detail = error.get("message", error) if isinstance(error, dict) else error
        msg = f"Telemetry query returned an error: {detail}"
        raise UnknownQueryError(msg)

    tables = payload.get("tables")
    if not isinstance(tables, list):
        msg = "Telemetry query response has no result tables"
        raise UnknownQueryError(msg)
    if not tables:
        return []

    primary = tables[0]
    columns = [column["name"] for column in primary.get("columns", [])]
    records: list[TransferRecord] = []
    for row in primary.get("rows", []):
        cells = dict(zip(columns, row, strict=False))
        try:
            records.append(TransferRecord.from_row(cells))
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping unusable telemetry row: {}", exc)
    return records


class TelemetryQueryGateway:
    """Runs windowed queries against a Log Analytics workspace.

    Args:
        workspace_id: Workspace the events are stored in.
        token_provider: Source of bearer tokens for the query API.
        api_url: Base URL of the query API.
        timeout: HTTP request timeout in seconds.
        clock: Returns the current time; the query window ends here.

    Raises:
        ConfigurationError: If the workspace id is blank.
    """

    def __init__(
        self,
        workspace_id: str,
        token_provider: TokenProvider,
        *,
        api_url: str = "https://api.loganalytics.io",
        timeout: float = 60.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not workspace_id or not workspace_id.strip():
            msg = "Telemetry workspace id is required"
            raise ConfigurationError(msg)
        self._workspace_id = workspace_id
        self._token_provider = token_provider
        self._query_url = f"{api_url.rstrip('/')}/v1/workspaces/{workspace_id}/query"
        self._timeout = timeout
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    async def execute(self, query_text: str, window_days: float) -> list[TransferRecord]:
        """Run a query over the trailing window and return its rows as records.

        Args:
            query_text: Query text in the backend's language.
            window_days: Size of the trailing window in days.

        Returns:
            Records from the primary result table; empty when nothing matched.

        Raises:
            ConfigurationError: If ``window_days`` is not finite and positive.
            InvalidArgumentError: If ``query_text`` is empty.
            BackendQueryError: If the backend reports a failed request status.
            UnknownQueryError: On any other failure.
        """
        days = validate_window_days(window_days)
        if not query_text or not query_text.strip():
            msg = "Query cannot be empty"
            raise InvalidArgumentError(msg)

        timespan = build_timespan(days, self._clock())
        token = await self._token_provider.get_token()
        headers = {"Authorization": f"Bearer {token}"}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                logger.debug("Querying workspace {} over {}", self._workspace_id, timespan)
                response = await client.post(
                    self._query_url,
                    json={"query": query_text, "timespan": timespan},
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            msg = f"Telemetry query failed with status {status} (window={days} days)"
            logger.error(msg)
            raise BackendQueryError(msg, status_code=status) from exc
        except httpx.HTTPError as exc:
            msg = f"HTTP error querying telemetry (window={days} days): {exc}"
            logger.error(msg)
            raise UnknownQueryError(msg) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            msg = "Invalid JSON response from telemetry query API"
            logger.error(msg)
            raise UnknownQueryError(msg) from exc

        try:
            records = parse_query_response(payload)
        except UnknownQueryError as exc:
            logger.error("{} (window={} days)", exc, days)
            raise
        except Exception as exc:
            msg = f"Failed to parse telemetry query response: {exc}"
            logger.error(msg)
            raise UnknownQueryError(msg) from exc

        logger.info("Telemetry query returned {} row(s) (window={} days)", len(records), days)
        return records
