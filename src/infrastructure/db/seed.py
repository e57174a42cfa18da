"""
Starter catalog entries, loaded on startup when the catalog is empty.
"""

import logging

from src.core.entities.document_type import DocumentCategory, DocumentType
from src.infrastructure.db.catalog import SqlDocumentTypeCatalog

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_TYPES = [
    DocumentType(
        id="birth-extract",
        name="Extrait d'acte de naissance",
        category=DocumentCategory.ACTE,
        price=5000,
        description="Extrait du registre des actes de l'état civil (naissance)",
        processing_time_days=3,
        required_fields=["childLastName", "childFirstName", "childGender", "childBirthDate"],
    ),
    DocumentType(
        id="death-certificate",
        name="Acte de décès",
        category=DocumentCategory.ACTE,
        price=5000,
        description="Copie intégrale d'acte de décès",
        processing_time_days=5,
        required_fields=["deceasedLastName", "deceasedFirstName", "deceasedGender", "deathDate"],
    ),
    DocumentType(
        id="marriage-certificate",
        name="Acte de mariage",
        category=DocumentCategory.ACTE,
        price=7500,
        description="Copie intégrale d'acte de mariage",
        processing_time_days=7,
        required_fields=["husbandFullName", "wifeFullName", "marriageDate"],
    ),
]


def seed_document_types(catalog: SqlDocumentTypeCatalog) -> int:
    """Inserts the starter entries if the catalog has none. Returns the count inserted."""
    if catalog.list_active():
        return 0
    for document_type in DEFAULT_DOCUMENT_TYPES:
        catalog.upsert(document_type)
    logger.info(f"Seeded {len(DEFAULT_DOCUMENT_TYPES)} document types")
    return len(DEFAULT_DOCUMENT_TYPES)
