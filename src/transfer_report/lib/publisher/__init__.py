"""Publisher library — public API for report publishing.

Provides object key naming and S3-compatible storage operations for
uploading rendered reports.
"""

from transfer_report.lib.publisher.naming import REPORT_FILE_PREFIX, object_path
from transfer_report.lib.publisher.storage import (
    PublishError,
    ReportPublisher,
    create_storage_client,
    ensure_bucket,
    upload_report,
)

__all__ = [
    "REPORT_FILE_PREFIX",
    "PublishError",
    "ReportPublisher",
    "create_storage_client",
    "ensure_bucket",
    "object_path",
    "upload_report",
]
