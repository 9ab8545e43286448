"""
S3 client for vault file downloads.

Fetches uploaded file bodies by storage key for text extraction.
Only keys are downloadable; http(s) URLs belong to seeded placeholder
files and are never fetched.

Dependencies: boto3
System role: File body access for the indexer
"""

import logging

import boto3
from botocore.exceptions import ClientError

from vault_rag.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


def is_storage_key(file_url: str) -> bool:
    """True for bucket keys, False for absolute http(s) URLs."""
    return not file_url.startswith(("http://", "https://"))


class S3FileStore:
    """S3 client for the vault files bucket (download only)."""

    def __init__(self, bucket: str, region: str = "us-east-1", client=None) -> None:
        """
        Initialize S3 client for the vault files bucket.

        Args:
            bucket: S3 bucket name for vault files
            region: AWS region for S3 bucket
            client: Preconfigured boto3 S3 client (tests inject a stub)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    def download(self, key: str, max_bytes: int | None = None) -> bytes:
        """
        Download an object body.

        Args:
            key: Object key, e.g. "{vault_id}/docs/{timestamp}-{name}"
            max_bytes: Refuse objects larger than this

        Returns:
            bytes: Object body

        Raises:
            ExtractionError: When the object is missing, too large, or unreadable
        """
        if not key or not is_storage_key(key):
            raise ExtractionError(f"Not a storage key: {key}", {"key": key})

        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise ExtractionError(f"File not found in storage: {key}", {"key": key}) from e
            raise ExtractionError(f"Failed to download from storage: {e}", {"key": key}) from e

        content_length = response.get("ContentLength")
        if max_bytes is not None and content_length is not None and content_length > max_bytes:
            raise ExtractionError(
                f"File exceeds size limit: {content_length} bytes",
                {"key": key, "content_length": content_length, "max_bytes": max_bytes},
            )

        body = response["Body"].read()
        logger.debug(
            f"{__name__}:download - Downloaded object",
            extra={"key": key, "size": len(body)},
        )
        return body
