"""
Object storage for uploaded documents (S3 or MinIO).

Entities only ever store the returned key; URLs are minted on read with
``get_presigned_url`` and expire after STORAGE_URL_EXPIRY seconds.
"""
import asyncio
import os
import re
import secrets
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from unirecords.core.config import settings
from unirecords.core.exceptions import StorageError
from unirecords.core.logging_config import logger


CONTENT_TYPES: Dict[str, str] = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".txt": "text/plain",
}


@dataclass
class UploadedFile:
    """An upload already read into memory and validated at the boundary"""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


def sanitize_filename(filename: str) -> str:
    """Lower-case, strip the extension and collapse anything unsafe to '-'"""
    stem = os.path.splitext(os.path.basename(filename))[0].lower()
    stem = re.sub(r"[^a-z0-9]+", "-", stem).strip("-")
    return stem or "file"


def generate_storage_key(folder: str, filename: str) -> str:
    """{folder}/{name}-{epoch_ms}-{random}{ext}"""
    ext = os.path.splitext(filename)[1].lower()
    return f"{folder}/{sanitize_filename(filename)}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{ext}"


class StorageService:
    """S3/MinIO client wrapper; blocking boto3 calls run in the default executor"""

    def __init__(self, bucket_name: Optional[str] = None):
        self._client = None
        self._bucket_name = bucket_name or settings.S3_BUCKET_NAME

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def _get_client(self):
        """Lazy initialization of the S3/MinIO client"""
        if self._client is None:
            kwargs = {"region_name": settings.AWS_REGION}
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            if settings.S3_ENDPOINT_URL:
                # MinIO needs path-style addressing
                kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
                kwargs["config"] = Config(signature_version="s3v4", s3={"addressing_style": "path"})
            self._client = boto3.client("s3", **kwargs)
        return self._client

    async def _run(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: func(*args, **kwargs))

    async def upload_file(self, upload: UploadedFile, folder: str) -> str:
        """Store one file and return its key"""
        key = generate_storage_key(folder, upload.filename)
        ext = os.path.splitext(upload.filename)[1].lower()
        content_type = CONTENT_TYPES.get(ext, upload.content_type)
        client = self._get_client()
        try:
            await self._run(
                client.put_object,
                Bucket=self._bucket_name,
                Key=key,
                Body=upload.content,
                ContentType=content_type,
                Metadata={"original-name": sanitize_filename(upload.filename)},
            )
        except ClientError as e:
            logger.error(f"[S3-Upload] ✗ Failed to upload {upload.filename}: {e}")
            raise StorageError(f"Failed to upload '{upload.filename}'", key=key)

        logger.info(f"[S3-Upload] ✓ Uploaded: {key} ({upload.size} bytes)")
        return key

    async def upload_files(self, uploads: Sequence[UploadedFile], folder: str) -> List[str]:
        """Upload independent files concurrently, keys in input order"""
        return list(await asyncio.gather(*(self.upload_file(u, folder) for u in uploads)))

    async def delete_file(self, key: str) -> bool:
        """Delete a stored file; failures are logged, not raised"""
        try:
            await self._run(self._get_client().delete_object, Bucket=self._bucket_name, Key=key)
            logger.info(f"Deleted file from S3: {key}")
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {e}")
            return False

    def get_presigned_url(self, key: str, expiration: Optional[int] = None) -> str:
        """Time-limited GET URL; signing is local, no network round trip"""
        try:
            return self._get_client().generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket_name, "Key": key},
                ExpiresIn=expiration or settings.STORAGE_URL_EXPIRY,
            )
        except ClientError as e:
            logger.error(f"Failed to generate presigned URL: {e}")
            raise StorageError("Could not generate a download link", key=key)

    def get_presigned_urls(self, keys: Optional[Sequence[str]]) -> List[str]:
        return [self.get_presigned_url(key) for key in keys or []]

    async def ping(self) -> bool:
        """Health probe: the bucket is reachable with the configured credentials"""
        await self._run(self._get_client().head_bucket, Bucket=self._bucket_name)
        return True


storage_service = StorageService()


def get_storage_service() -> StorageService:
    return storage_service
