"""
Entity: Document Type

Read-only projection of a catalog entry (name, category, price,
required fields). The catalog itself is administered elsewhere.
"""

from dataclasses import dataclass, field
from enum import Enum


class DocumentCategory(str, Enum):
    ACTE = "Acte"
    CERTIFICAT = "Certificat"
    ATTESTATION = "Attestation"
    AUTRE = "Autre"


class DocumentTypeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass
class DocumentType:
    """Catalog entry for an issuable document."""
    id: str
    name: str
    category: DocumentCategory = DocumentCategory.ACTE
    price: int = 0
    description: str = ""
    processing_time_days: int = 7
    required_fields: list[str] = field(default_factory=list)
    status: DocumentTypeStatus = DocumentTypeStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == DocumentTypeStatus.ACTIVE
