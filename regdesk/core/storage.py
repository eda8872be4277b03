# regdesk/core/storage.py
"""
Asset store for generated badge images.

Objects are addressed by a relative key (e.g. ``qrcodes/<ticket>.png``). Writes
overwrite; content for a key is deterministic, so last-writer-wins is harmless.
"""

import logging
from functools import lru_cache
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from regdesk.core.config import settings

logger = logging.getLogger(__name__)


class AssetNotFound(Exception):
    """The requested asset has not been written (yet)."""


class AssetStorageError(Exception):
    """The underlying store failed. Usually transient."""


class LocalAssetStore:
    """Stores assets on the local filesystem below ``root``."""

    def __init__(self, root):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Asset key escapes the storage root: {key}")
        return path

    def save(self, key: str, data: bytes, content_type: str = "image/png") -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as exc:
            raise AssetStorageError(f"Could not write asset {key}: {exc}") from exc
        return key

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def read(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise AssetNotFound(key)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise AssetStorageError(f"Could not read asset {key}: {exc}") from exc


def get_s3_client():
    """
    Initializes and returns an S3 client.
    Uses the configured endpoint_url when set (MinIO in local development).
    """
    kwargs = {
        "aws_access_key_id": settings.AWS_ACCESS_KEY_ID,
        "aws_secret_access_key": settings.AWS_SECRET_ACCESS_KEY,
        "region_name": settings.AWS_S3_REGION,
    }
    if settings.AWS_S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.AWS_S3_ENDPOINT_URL
    return boto3.client("s3", **kwargs)


class S3AssetStore:
    """Stores assets in an S3 (or S3-compatible) bucket."""

    def __init__(self, bucket: str, client=None):
        self.bucket = bucket
        self.client = client or get_s3_client()

    def save(self, key: str, data: bytes, content_type: str = "image/png") -> str:
        try:
            self.client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as exc:
            raise AssetStorageError(f"Could not upload asset {key}: {exc}") from exc
        return key

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise AssetStorageError(f"Could not check asset {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise AssetStorageError(f"Could not check asset {key}: {exc}") from exc

    def read(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                raise AssetNotFound(key) from exc
            raise AssetStorageError(f"Could not read asset {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise AssetStorageError(f"Could not read asset {key}: {exc}") from exc


@lru_cache()
def get_asset_store():
    """Return the configured asset store. Used as a FastAPI dependency and by workers."""
    if settings.ASSET_STORAGE_BACKEND == "s3":
        if not settings.AWS_S3_BUCKET_NAME:
            raise RuntimeError("AWS_S3_BUCKET_NAME must be set for the s3 asset backend")
        logger.info(f"Using S3 asset store (bucket={settings.AWS_S3_BUCKET_NAME})")
        return S3AssetStore(settings.AWS_S3_BUCKET_NAME)
    logger.info(f"Using local asset store at {settings.ASSET_STORAGE_DIR}")
    return LocalAssetStore(settings.ASSET_STORAGE_DIR)
