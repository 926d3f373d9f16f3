"""
Document storage on Cloudflare R2 (S3 API).
Handles upload validation, key generation, upload/delete and signed URLs.
Database rows store the object key; URLs are presigned on read.
"""

import logging
import re
import time
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import (
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
)

logger = logging.getLogger(__name__)

# Document validation constants
MAX_DOCUMENT_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
ALLOWED_DOCUMENT_MIME_TYPES = [
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
]

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600


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


def validate_document_file(size_bytes: int, mime_type: Optional[str]) -> Optional[str]:
    """
    Validate a compliance document before upload.

    Returns:
        An error message, or None when the file is acceptable
    """
    if not mime_type or mime_type not in ALLOWED_DOCUMENT_MIME_TYPES:
        return "Invalid file type. Only PDF, JPG, and PNG are allowed."

    if not size_bytes:
        return "File is empty."

    if size_bytes > MAX_DOCUMENT_SIZE_BYTES:
        return "File too large. Maximum size is 10MB."

    return None


def sanitize_filename(filename: str) -> str:
    """Replace everything outside [A-Za-z0-9.-] with '_'"""
    return re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "document")


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def build_document_key(
    folder: str, user_id: str, document_type: str, filename: str, timestamp_ms: Optional[int] = None
) -> str:
    """
    Key for a compliance document.

    Format: {folder}/{user_id}/{document_type}-{timestamp_ms}-{sanitized filename}
    """
    ts = timestamp_ms if timestamp_ms is not None else _timestamp_ms()
    return f"{folder}/{user_id}/{document_type}-{ts}-{sanitize_filename(filename)}"


def build_service_document_key(
    user_id: str,
    service_slug: str,
    requirement_type: str,
    filename: str,
    timestamp_ms: Optional[int] = None,
) -> str:
    """
    Key for a service qualification document.

    Format: workers/{user_id}/service-documents/{service}/{requirement}/{timestamp_ms}-{sanitized filename}
    """
    ts = timestamp_ms if timestamp_ms is not None else _timestamp_ms()
    requirement_slug = re.sub(r"\s+", "-", requirement_type.lower())
    return (
        f"workers/{user_id}/service-documents/{service_slug}/{requirement_slug}/"
        f"{ts}-{sanitize_filename(filename)}"
    )


class R2DocumentStorage:
    """Private-bucket document store"""

    def __init__(self, bucket: str = R2_BUCKET_NAME):
        self.bucket = bucket
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = get_r2_client()
        return self._client

    def upload(self, content: bytes, key: str, content_type: str) -> str:
        """Upload bytes under key; raises on storage errors"""
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType=content_type,
        )
        logger.info(f"📤 Uploaded document to R2: {key} ({len(content)} bytes)")
        return key

    def delete(self, key: str) -> bool:
        """Delete an object; failures are logged and reported as False"""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"🗑️ Deleted document from R2: {key}")
            return True
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Failed to delete R2 object {key}: {e}")
            return False

    def presigned_url(self, key: Optional[str], expiration: int = PRESIGNED_URL_EXPIRATION) -> Optional[str]:
        """Signed GET URL for a stored key; None when the key is empty or signing fails"""
        if not key:
            return None
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key, "ResponseContentDisposition": "inline"},
                ExpiresIn=expiration,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
            return None


_storage: Optional[R2DocumentStorage] = None


def get_storage() -> R2DocumentStorage:
    """FastAPI dependency returning the shared document store"""
    global _storage
    if _storage is None:
        _storage = R2DocumentStorage()
    return _storage
