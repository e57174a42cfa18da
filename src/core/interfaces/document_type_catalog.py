"""
Contract: Document Type Catalog

Read access to the externally administered document-type catalog.
"""

from abc import ABC, abstractmethod

from src.core.entities.document_type import DocumentType


class IDocumentTypeCatalog(ABC):
    """Port: Document Type Catalog (read-only)."""

    @abstractmethod
    def get(self, document_type_id: str) -> DocumentType | None:
        """Returns the entry, active or not, or None if unknown."""
        ...
