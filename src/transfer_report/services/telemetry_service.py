"""Telemetry service — collects joined transfer records for a report window.

Access-denied failures are fatal and propagate; any other query failure is
logged and yields an empty result so a transient backend problem does not
abort the report outright.
"""

from collections.abc import Sequence
from typing import Protocol

from loguru import logger

from transfer_report.lib.telemetry.base import BackendQueryError
from transfer_report.lib.telemetry.gateway import validate_window_days
from transfer_report.lib.telemetry.query import TRANSFER_QUERY, TransferQuery
from transfer_report.lib.telemetry.types import TransferRecord


class QueryGateway(Protocol):
    """Runs windowed telemetry queries."""

    async def execute(self, query_text: str, window_days: float) -> Sequence[TransferRecord]: ...


class TelemetryService:
    """Runs the transfer join query through a gateway.

    Args:
        gateway: Query gateway for the telemetry backend.
        window_days: Trailing window size in days.
        query: Structured query definition.

    Raises:
        ConfigurationError: If ``window_days`` is not finite and positive.
    """

    def __init__(
        self,
        gateway: QueryGateway,
        window_days: float,
        query: TransferQuery = TRANSFER_QUERY,
    ) -> None:
        self._gateway = gateway
        self._window_days = validate_window_days(window_days)
        self._query_text = query.to_kql()

    @property
    def window_days(self) -> float:
        return self._window_days

    async def collect_transfers(self) -> list[TransferRecord]:
        """Return transfers initiated and finished inside the window, newest first.

        Raises:
            BackendQueryError: If the backend denied access (HTTP 403).
        """
        try:
            records = await self._gateway.execute(self._query_text, self._window_days)
        except BackendQueryError as exc:
            if exc.is_access_denied:
                logger.error(
                    "Access denied (403) when querying transfers; check the workspace permissions: {}",
                    exc,
                )
                raise
            logger.error("Transfer query failed (status={}); reporting no transfers: {}", exc.status_code, exc)
            return []
        except Exception:
            logger.exception("Unexpected error querying transfers; reporting no transfers")
            return []

        return list(records)
