"""S3-compatible storage operations for report publishing.

Provides boto3 client creation, idempotent bucket creation, and report upload.
Uploads overwrite any existing object at the same key.
"""

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

_CSV_CONTENT_TYPE = "text/csv; charset=utf-8"

# Regions where create_bucket must not send a LocationConstraint
_DEFAULT_REGIONS = (None, "", "us-east-1", "auto")


class PublishError(Exception):
    """Raised when a report cannot be written to object storage.

    Args:
        message: Human-readable error description.
        bucket: Destination bucket.
        key: Destination object key, if the failure happened during upload.
    """

    def __init__(self, message: str, bucket: str, key: str | None = None) -> None:
        super().__init__(message)
        self.bucket = bucket
        self.key = key


def create_storage_client(
    endpoint_url: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
    region_name: str | None = None,
) -> Any:
    """Create a boto3 S3 client for AWS S3 or an S3-compatible service.

    Checksums are only calculated when required, which S3-compatible
    services such as Cloudflare R2 need with boto3 1.36.0+.

    Args:
        endpoint_url: Custom endpoint; ``None`` targets AWS S3.
        access_key_id: Access key; ``None`` uses the default credential chain.
        secret_access_key: Secret key; ``None`` uses the default credential chain.
        region_name: Region name.

    Returns:
        Configured boto3 S3 client.
    """
    config = Config(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
    )

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name=region_name,
        config=config,
    )


def ensure_bucket(client: Any, bucket: str) -> bool:
    """Create the bucket unless it already exists.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.

    Returns:
        True if the bucket was created, False if it already existed.

    Raises:
        ClientError: If the bucket cannot be checked or created.
    """
    try:
        client.head_bucket(Bucket=bucket)
        logger.debug("Bucket s3://{} exists", bucket)
        return False
    except ClientError as exc:
        if exc.response["Error"]["Code"] not in ("404", "NoSuchBucket", "NotFound"):
            raise

    region = client.meta.region_name
    try:
        if region in _DEFAULT_REGIONS:
            client.create_bucket(Bucket=bucket)
        else:
            client.create_bucket(
                Bucket=bucket,
                CreateBucketConfiguration={"LocationConstraint": region},
            )
    except ClientError as exc:
        if exc.response["Error"]["Code"] != "BucketAlreadyOwnedByYou":
            raise
        logger.debug("Bucket s3://{} already owned by this account", bucket)
        return False
    logger.info("Created bucket s3://{}", bucket)
    return True


def upload_report(client: Any, bucket: str, key: str, content: str) -> int:
    """Write a rendered report to ``bucket/key``, creating the bucket if needed.

    Any existing object at the key is replaced.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        key: Object key.
        content: Report text, encoded as UTF-8.

    Returns:
        Uploaded size in bytes.

    Raises:
        PublishError: If the bucket cannot be created or the upload fails.
    """
    try:
        ensure_bucket(client, bucket)
    except (BotoCoreError, ClientError) as exc:
        logger.error("Failed to ensure bucket s3://{}: {}", bucket, exc)
        msg = f"Could not create or access bucket '{bucket}': {exc}"
        raise PublishError(msg, bucket) from exc

    body = content.encode("utf-8")
    try:
        client.put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=_CSV_CONTENT_TYPE,
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("Failed to upload s3://{}/{}: {}", bucket, key, exc)
        msg = f"Could not upload '{key}' to bucket '{bucket}': {exc}"
        raise PublishError(msg, bucket, key) from exc

    logger.info("Uploaded {} ({} bytes) to s3://{}/{}", key, len(body), bucket, key)
    return len(body)


class ReportPublisher:
    """Publishes rendered reports through a boto3 S3 client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def publish(self, bucket: str, key: str, content: str) -> int:
        """Upload ``content`` to ``bucket/key``; see :func:`upload_report`."""
        return upload_report(self._client, bucket, key, content)
