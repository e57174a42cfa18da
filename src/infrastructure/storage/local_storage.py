"""
Adapter: Local Filesystem Storage

Write-once artifact storage under a root directory. Data goes to a
temporary file first and is hard-linked into place, so a key is either
absent or complete, and an existing key is never replaced.
"""

import hashlib
import logging
import os
import tempfile
import time
from pathlib import Path

from src.core.errors import StorageWriteFailed
from src.core.interfaces.storage_service import IStorageService, StorageRef

logger = logging.getLogger(__name__)


class LocalStorageService(IStorageService):
    """Storage on the local filesystem (development, single host deployments)."""

    def __init__(
        self,
        root: str | Path,
        public_base_url: str = "",
        max_attempts: int = 3,
        backoff_seconds: float = 0.05,
    ):
        self._root = Path(root).resolve()
        self._public_base_url = public_base_url.rstrip("/")
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff_seconds

    @property
    def bucket(self) -> str:
        return self._root.name

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root not in path.parents:
            raise StorageWriteFailed(key, "key escapes storage root")
        return path

    def upload(self, data: bytes, key: str, content_type: str = "application/pdf") -> StorageRef:
        path = self._path(key)
        last_error = ""
        for attempt in range(1, self._max_attempts + 1):
            try:
                self._write_once(path, data)
                break
            except FileExistsError:
                raise StorageWriteFailed(key, "key already exists") from None
            except OSError as e:
                last_error = str(e)
                logger.warning(f"Write attempt {attempt}/{self._max_attempts} failed for {key}: {e}")
                if attempt < self._max_attempts:
                    time.sleep(self._backoff * 2 ** (attempt - 1))
        else:
            raise StorageWriteFailed(key, last_error)

        logger.info(f"Stored {key} ({len(data)} bytes)")
        return StorageRef(
            bucket=self.bucket,
            key=key,
            size_bytes=len(data),
            sha256=hashlib.sha256(data).hexdigest(),
            content_type=content_type,
        )

    @staticmethod
    def _write_once(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".tmp_", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            # link() fails if the target exists: write-once
            os.link(tmp_name, path)
        finally:
            os.unlink(tmp_name)

    def download(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def get_url(self, key: str, expires_seconds: int = 3600) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{key}"
        return self._path(key).as_uri()
