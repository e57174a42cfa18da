"""
Adapter: MinIO Storage Service

Concrete implementation of the IStorageService contract
using MinIO (S3-compatible API).
"""

import hashlib
import io
import logging
import time
from datetime import timedelta

import urllib3
from minio import Minio
from minio.error import S3Error

from src.core.errors import StorageWriteFailed
from src.core.interfaces.storage_service import IStorageService, StorageRef

logger = logging.getLogger(__name__)


class MinIOStorageService(IStorageService):
    """
    Write-once artifact storage on MinIO (or any S3-compatible endpoint).

    Keys are never overwritten; URLs are presigned GETs.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        max_attempts: int = 3,
        backoff_seconds: float = 0.2,
        timeout_seconds: float = 30.0,
        client: Minio | None = None,
    ):
        self._bucket = bucket
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff_seconds
        self._bucket_checked = False
        self._client = client or Minio(
            endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            http_client=urllib3.PoolManager(
                timeout=urllib3.Timeout(connect=5.0, read=timeout_seconds),
                retries=urllib3.Retry(total=2, backoff_factor=0.2),
            ),
        )

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        if not self._client.bucket_exists(bucket_name=self._bucket):
            self._client.make_bucket(bucket_name=self._bucket)
            logger.info(f"Created bucket {self._bucket}")
        self._bucket_checked = True

    def _exists(self, key: str) -> bool:
        try:
            self._client.stat_object(bucket_name=self._bucket, object_name=key)
            return True
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject", "ResourceNotFound"):
                return False
            raise

    def upload(self, data: bytes, key: str, content_type: str = "application/pdf") -> StorageRef:
        last_error = ""
        for attempt in range(1, self._max_attempts + 1):
            try:
                self._ensure_bucket()
                if self._exists(key):
                    raise StorageWriteFailed(key, "key already exists")
                self._client.put_object(
                    bucket_name=self._bucket,
                    object_name=key,
                    data=io.BytesIO(data),
                    length=len(data),
                    content_type=content_type,
                )
                break
            except (S3Error, urllib3.exceptions.HTTPError) as e:
                last_error = str(e)
                logger.warning(f"MinIO upload attempt {attempt}/{self._max_attempts} failed for {key}: {e}")
                if attempt < self._max_attempts:
                    time.sleep(self._backoff * 2 ** (attempt - 1))
        else:
            raise StorageWriteFailed(key, last_error)

        logger.info(f"Uploaded {key} to bucket {self._bucket} ({len(data)} bytes)")
        return StorageRef(
            bucket=self._bucket,
            key=key,
            size_bytes=len(data),
            sha256=hashlib.sha256(data).hexdigest(),
            content_type=content_type,
        )

    def download(self, key: str) -> bytes:
        response = self._client.get_object(bucket_name=self._bucket, object_name=key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def get_url(self, key: str, expires_seconds: int = 3600) -> str:
        return self._client.presigned_get_object(
            bucket_name=self._bucket, object_name=key, expires=timedelta(seconds=expires_seconds)
        )
