"""
Blob storage for template attachments, files and images.
Objects live in Cloudflare R2 buckets and are served from a public domain.
"""

import logging
import uuid
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from ..config import (
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_SECRET_ACCESS_KEY,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CONTROL = "3600"


class StorageError(Exception):
    """Raised when an upload fails or an object has no public address"""


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


def generate_storage_path(owner_id: str, filename: str) -> str:
    """
    Generate a unique object path namespaced by owner.

    Format: {owner_id}/{uuid4}.{ext}
    """
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    unique_name = f"{uuid.uuid4()}.{ext}" if ext else str(uuid.uuid4())
    return f"{owner_id}/{unique_name}"


def path_from_public_url(url: str, owner_id: str) -> str:
    """Rebuild an owner-scoped object path from the last segment of a public URL"""
    file_name = url.rstrip("/").split("/")[-1]
    return f"{owner_id}/{file_name}"


class R2BlobStore:
    """Upload, remove and address objects in one R2 bucket"""

    def __init__(self, bucket: str, client=None, public_base_url: str = ""):
        self.bucket = bucket
        self._client = client
        # Public domain bound to this bucket; keys are served from its root
        self.public_base_url = (public_base_url or "").rstrip("/")

    @property
    def client(self):
        """Lazy load the R2 client"""
        if self._client is None:
            self._client = get_r2_client()
        return self._client

    def _exists(self, path: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=path)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        cache_control: str = DEFAULT_CACHE_CONTROL,
        upsert: bool = False,
    ) -> str:
        """
        Upload bytes to the bucket.

        Args:
            path: Object key
            data: File bytes
            content_type: MIME type stored with the object
            cache_control: max-age in seconds for the Cache-Control header
            upsert: Overwrite an existing object at the same path

        Returns:
            The object path

        Raises:
            StorageError: If the object exists (and upsert is False) or R2 rejects the upload
        """
        try:
            if not upsert and self._exists(path):
                raise StorageError(f"Object already exists: {self.bucket}/{path}")

            extra_args = {"CacheControl": f"max-age={cache_control}"}
            if content_type:
                extra_args["ContentType"] = content_type

            self.client.put_object(Bucket=self.bucket, Key=path, Body=data, **extra_args)
        except ClientError as e:
            logger.error(f"❌ Error uploading {path} to R2 bucket {self.bucket}: {e}")
            raise StorageError(f"Upload failed for {path}: {e}") from e

        logger.info(f"✅ Uploaded {len(data)} bytes to {self.bucket}/{path}")
        return path

    def remove(self, paths: list[str]) -> None:
        """Delete objects; raises ClientError so callers decide whether to continue"""
        if not paths:
            return
        self.client.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": path} for path in paths], "Quiet": True},
        )
        logger.info(f"🗑️ Removed {len(paths)} object(s) from {self.bucket}")

    def get_public_url(self, path: str) -> str:
        if not self.public_base_url:
            raise StorageError(f"No public URL configured for bucket {self.bucket}")
        return f"{self.public_base_url}/{path}"
