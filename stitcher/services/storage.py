"""
Storage Service
Puts final videos and uploaded images into object storage - S3-compatible
buckets (Cloudflare R2) or the local filesystem.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from stitcher.core.config import Settings, settings as default_settings
from stitcher.core.exceptions import StorageError

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "video/mp4": "mp4",
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def object_key(content_type: str) -> str:
    """Fresh key under videos/ or images/ for the content type."""
    ext = EXTENSIONS.get(content_type.lower())
    if ext is None:
        ext = (content_type.split("/")[-1] or "bin").replace("jpeg", "jpg")
    folder = "videos" if content_type.startswith("video/") else "images"
    return f"{folder}/{uuid.uuid4()}.{ext}"


class StorageService:
    """Service for object storage uploads."""

    def __init__(self, config: Optional[Settings] = None, s3_client=None):
        self.config = config or default_settings
        self.use_local = self.config.USE_LOCAL_STORAGE
        self._s3 = s3_client

        if self.use_local:
            self.base_path = Path(self.config.LOCAL_STORAGE_PATH)
            logger.info(f"[Storage] Using local storage: {self.base_path}")
        elif not self.config.object_store_configured:
            logger.warning("[Storage] S3 settings incomplete; uploads will fail until configured")
        else:
            logger.info(f"[Storage] Using S3: {self.config.S3_BUCKET}")

    @property
    def s3(self):
        """Lazy boto3 client."""
        if self._s3 is None:
            import boto3
            from botocore.config import Config
            self._s3 = boto3.client(
                "s3",
                endpoint_url=self.config.S3_ENDPOINT,
                aws_access_key_id=self.config.S3_ACCESS_KEY,
                aws_secret_access_key=self.config.S3_SECRET_KEY,
                region_name=self.config.S3_REGION,
                config=Config(
                    signature_version="s3v4",
                    connect_timeout=10,
                    read_timeout=self.config.UPLOAD_TIMEOUT,
                    retries={"max_attempts": 1},
                ),
            )
        return self._s3

    def put(self, data: bytes, content_type: str, key: Optional[str] = None) -> str:
        """
        Store bytes and return their public URL.

        Args:
            data: Object bytes
            content_type: MIME type
            key: Object key; generated from the content type when omitted

        Raises:
            StorageError: If storage is unconfigured or the upload fails
        """
        key = key or object_key(content_type)
        if self.use_local:
            return self._put_local(data, key)
        return self._put_s3(data, key, content_type)

    def _put_local(self, data: bytes, key: str) -> str:
        file_path = self.base_path / key
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Failed to store {key} locally: {e}") from e
        return f"file://{file_path.absolute()}"

    def _put_s3(self, data: bytes, key: str, content_type: str) -> str:
        if not self.config.object_store_configured:
            raise StorageError(
                "Object storage is not configured (S3_ENDPOINT, S3_BUCKET, S3_ACCESS_KEY, "
                "S3_SECRET_KEY, S3_PUBLIC_URL)"
            )

        from botocore.exceptions import BotoCoreError, ClientError
        try:
            self.s3.put_object(
                Bucket=self.config.S3_BUCKET,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to upload {key}: {e}", details={"key": key}) from e

        logger.info(f"[Storage] Uploaded {key} ({len(data)} bytes)")
        return f"{self.config.S3_PUBLIC_URL.rstrip('/')}/{key}"


__all__ = ["StorageService", "object_key"]
