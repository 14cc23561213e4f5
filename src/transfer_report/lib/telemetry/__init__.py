"""Telemetry library — public API for querying transfer activity events.

Provides the transfer record type, the structured transfer query, token
providers, and the Log Analytics query gateway.
"""

from transfer_report.lib.telemetry.auth import ClientCredentialsTokenProvider, StaticTokenProvider
from transfer_report.lib.telemetry.base import (
    BackendQueryError,
    InvalidArgumentError,
    QueryError,
    TokenProvider,
    UnknownQueryError,
)
from transfer_report.lib.telemetry.gateway import TelemetryQueryGateway, validate_window_days
from transfer_report.lib.telemetry.query import TRANSFER_QUERY, TransferQuery
from transfer_report.lib.telemetry.types import TransferRecord, TransferStatus, format_duration, transfer_speed_mbps

__all__ = [
    "TRANSFER_QUERY",
    "BackendQueryError",
    "ClientCredentialsTokenProvider",
    "InvalidArgumentError",
    "QueryError",
    "StaticTokenProvider",
    "TelemetryQueryGateway",
    "TokenProvider",
    "TransferQuery",
    "TransferRecord",
    "TransferStatus",
    "UnknownQueryError",
    "format_duration",
    "transfer_speed_mbps",
    "validate_window_days",
]
