"""
Contract: Request Repository

Durable storage of Request aggregates, with optimistic versioning.
"""

from abc import ABC, abstractmethod

from src.core.entities.request import Request, RequestStatus


class IRequestRepository(ABC):
    """
    Port: Request Repository

    `update` must refuse to overwrite a record whose version differs
    from the one the caller loaded (raises ConcurrentModification).
    """

    @abstractmethod
    def add(self, request: Request) -> Request:
        ...

    @abstractmethod
    def get(self, request_id: str) -> Request | None:
        ...

    @abstractmethod
    def get_by_reference(self, reference: str) -> Request | None:
        ...

    @abstractmethod
    def update(self, request: Request) -> Request:
        """Persists a modified request and returns it with its new version."""
        ...

    @abstractmethod
    def list(
        self,
        status: RequestStatus | None = None,
        document_type_id: str | None = None,
        citizen_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, list[Request]]:
        """Returns (total matching, page of requests newest first)."""
        ...

    @abstractmethod
    def count_by_status(self, citizen_id: str | None = None) -> dict[RequestStatus, int]:
        ...

    @abstractmethod
    def payment_totals(self, citizen_id: str | None = None) -> dict[str, int]:
        """Sum of amounts per payment status value."""
        ...
