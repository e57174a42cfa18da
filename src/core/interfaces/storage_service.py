"""
Contract: Storage Service

Write-once persistence of generated artifacts (PDF documents)
in object storage (MinIO/S3) or on the local filesystem.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StorageRef:
    """Reference to a stored file."""
    bucket: str
    key: str
    size_bytes: int
    sha256: str
    content_type: str


class IStorageService(ABC):
    """
    Port: Storage Service

    Persists binary artifacts. Implementations may be MinIO, S3,
    the local filesystem, etc.
    """

    @abstractmethod
    def upload(self, data: bytes, key: str, content_type: str = "application/pdf") -> StorageRef:
        """
        Writes a file under a new key.

        Returns only once the write is durable. A key is written at most
        once; writing an existing key fails.

        Args:
            data: Content in bytes.
            key: Path/key in the storage.
            content_type: MIME type.

        Returns:
            StorageRef with location and hash.

        Raises:
            StorageWriteFailed: the sink rejected or timed out.
        """
        ...

    @abstractmethod
    def download(self, key: str) -> bytes:
        """
        Reads a file from the storage.

        Args:
            key: Path/key in the storage.

        Returns:
            Content in bytes.
        """
        ...

    @abstractmethod
    def get_url(self, key: str, expires_seconds: int = 3600) -> str:
        """
        Builds a URL to retrieve the file.

        Args:
            key: Path/key in the storage.
            expires_seconds: Expiration, for backends that sign URLs.

        Returns:
            Retrievable URL.
        """
        ...
