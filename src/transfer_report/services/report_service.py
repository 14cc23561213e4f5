"""Report service — orchestrates transfer collection, rendering and upload.

A run fetches the window's transfers, renders them as CSV and uploads the
document under a date-partitioned key. A window with no transfers is a
successful run that publishes nothing. Failures are logged and re-raised;
there is no retry and no partial success.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from loguru import logger

from transfer_report.core.config import ConfigurationError, Settings
from transfer_report.lib.exporter.csv_writer import render_transfer_csv
from transfer_report.lib.publisher.naming import object_path
from transfer_report.lib.publisher.storage import ReportPublisher, create_storage_client
from transfer_report.lib.telemetry.auth import ClientCredentialsTokenProvider, StaticTokenProvider
from transfer_report.lib.telemetry.base import TokenProvider
from transfer_report.lib.telemetry.gateway import TelemetryQueryGateway
from transfer_report.lib.telemetry.types import TransferRecord
from transfer_report.services.telemetry_service import TelemetryService


class TransferSource(Protocol):
    """Supplies the transfers for one report run."""

    async def collect_transfers(self) -> list[TransferRecord]: ...


class Publisher(Protocol):
    """Writes a rendered report to object storage."""

    def publish(self, bucket: str, key: str, content: str) -> int: ...


@dataclass
class ReportResult:
    """Outcome of a single report run."""

    record_count: int
    object_key: str | None
    published: bool
    size_bytes: int
    duration_seconds: float


class ReportService:
    """Generates and publishes the transfer report.

    Args:
        telemetry: Source of transfer records.
        publisher: Destination for the rendered report.
        container_name: Bucket the report is written to.
        prefix: Optional key prefix within the bucket.
        clock: Returns the current time; the report is dated from it in UTC.

    Raises:
        ConfigurationError: If the container name is blank.
    """

    def __init__(
        self,
        telemetry: TransferSource,
        publisher: Publisher,
        container_name: str,
        *,
        prefix: str = "",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not container_name or not container_name.strip():
            msg = "Report container name is required"
            raise ConfigurationError(msg)
        self._telemetry = telemetry
        self._publisher = publisher
        self._container_name = container_name
        self._prefix = prefix
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    async def run_once(self) -> ReportResult:
        """Run the report pipeline once.

        Returns:
            ReportResult describing what was published.

        Raises:
            Exception: Any failure from collection, rendering or upload,
                unchanged.
        """
        start = time.monotonic()
        try:
            transfers = await self._telemetry.collect_transfers()

            if not transfers:
                logger.info("No transfer data found for the specified time range")
                return ReportResult(
                    record_count=0,
                    object_key=None,
                    published=False,
                    size_bytes=0,
                    duration_seconds=time.monotonic() - start,
                )

            for transfer in transfers:
                logger.debug("Processing transfer: {}", transfer.transfer_id)

            content = render_transfer_csv(transfers)
            key = object_path(self._clock(), self._prefix)
            size = await asyncio.to_thread(self._publisher.publish, self._container_name, key, content)
        except Exception:
            logger.exception("An error occurred while processing the transfer report")
            raise

        elapsed = time.monotonic() - start
        logger.info(
            "Published {} transfer(s) to s3://{}/{} in {:.0f} ms",
            len(transfers),
            self._container_name,
            key,
            elapsed * 1000,
        )
        return ReportResult(
            record_count=len(transfers),
            object_key=key,
            published=True,
            size_bytes=size,
            duration_seconds=elapsed,
        )


async def report_loop(
    service: ReportService,
    interval: int,
    *,
    run_immediately: bool = False,
) -> None:
    """Background asyncio loop that runs the report on a fixed interval.

    A failed run is logged and the loop waits for the next tick.

    Args:
        service: Report service to run.
        interval: Seconds between runs.
        run_immediately: Run once before the first sleep.
    """
    logger.info("Transfer report loop started (interval={}s)", interval)

    first = True
    while True:
        try:
            if not (first and run_immediately):
                await asyncio.sleep(interval)
            first = False
            logger.info("Transfer report run started at {}", datetime.now(tz=UTC).isoformat())
            await service.run_once()
        except asyncio.CancelledError:
            logger.info("Transfer report loop cancelled")
            break
        except Exception:
            logger.exception("Scheduled transfer report run failed")


def build_token_provider(settings: Settings) -> TokenProvider:
    """Choose the telemetry token provider configured in ``settings``."""
    if settings.telemetry_access_token:
        return StaticTokenProvider(settings.telemetry_access_token)

    # Settings validation guarantees the service principal triple is complete
    assert settings.telemetry_tenant_id is not None
    assert settings.telemetry_client_id is not None
    assert settings.telemetry_client_secret is not None
    return ClientCredentialsTokenProvider(
        settings.telemetry_tenant_id,
        settings.telemetry_client_id,
        settings.telemetry_client_secret,
        authority_url=settings.telemetry_authority_url,
        timeout=settings.telemetry_timeout,
    )


def build_telemetry_service(settings: Settings) -> TelemetryService:
    """Construct the telemetry service and its gateway from settings."""
    gateway = TelemetryQueryGateway(
        settings.telemetry_workspace_id,
        build_token_provider(settings),
        api_url=settings.telemetry_api_url,
        timeout=settings.telemetry_timeout,
    )
    return TelemetryService(gateway, settings.report_time_range_days)


def build_report_service(settings: Settings) -> ReportService:
    """Construct the full report pipeline from settings.

    Raises:
        ConfigurationError: If any component rejects its configuration.
    """
    client = create_storage_client(
        endpoint_url=settings.storage_endpoint_url,
        access_key_id=settings.storage_access_key_id,
        secret_access_key=settings.storage_secret_access_key,
        region_name=settings.storage_region,
    )
    return ReportService(
        build_telemetry_service(settings),
        ReportPublisher(client),
        settings.report_container_name,
        prefix=settings.report_prefix,
    )
