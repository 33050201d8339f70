"""
Image file storage backends.

Both backends address files by key (``products/{product_id}/{filename}``).
``LocalStorage`` writes below the configured upload directory, ``S3Storage``
writes to a bucket and reports a public URL for every key.
"""
import logging
from functools import lru_cache
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import get_settings
from app.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)


def image_key(product_id: int, filename: str) -> str:
    return f"products/{product_id}/{filename}"


class LocalStorage:
    """Files on the local filesystem below ``base_dir``."""

    is_remote = False

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir).resolve()

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if self.base_dir not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def save(self, key: str, data: bytes, content_type: str | None = None):
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to store file {key}: {e}") from e

    def delete(self, key: str):
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete file {key}: {e}") from e

    def read(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read file {key}: {e}") from e

    def public_url(self, key: str) -> str | None:
        return None


class S3Storage:
    """Objects in an S3 (or S3-compatible) bucket."""

    is_remote = True

    def __init__(self, bucket: str, region: str = "us-east-1", endpoint_url: str | None = None, client=None):
        if not bucket:
            raise ValueError("S3 storage requires a bucket name (AWS_S3_BUCKET_NAME)")
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    def save(self, key: str, data: bytes, content_type: str | None = None):
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to upload {key} to S3: {e}") from e
        logger.info(f"Uploaded s3://{self.bucket}/{key} ({len(data)} bytes)")

    def delete(self, key: str):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to delete {key} from S3: {e}") from e

    def read(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to read {key} from S3: {e}") from e

    def public_url(self, key: str) -> str | None:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


def local_storage() -> LocalStorage:
    return LocalStorage(get_settings().upload_path)


@lru_cache()
def _s3_storage() -> S3Storage:
    settings = get_settings()
    return S3Storage(
        bucket=settings.aws_s3_bucket_name,
        region=settings.aws_region,
        endpoint_url=settings.aws_s3_endpoint_url,
    )


def get_s3_storage() -> S3Storage:
    """S3 backend regardless of the configured default; used by the S3 migration."""
    if not get_settings().aws_s3_bucket_name:
        raise ValidationError("S3 storage is not configured (AWS_S3_BUCKET_NAME)")
    return _s3_storage()


def optional_s3_storage() -> S3Storage | None:
    """S3 backend when a bucket is configured, else None."""
    if not get_settings().aws_s3_bucket_name:
        return None
    return _s3_storage()


def get_storage():
    """Configured storage backend (``storage_backend`` = local | s3)."""
    if get_settings().storage_backend.lower() == "s3":
        return _s3_storage()
    return local_storage()
