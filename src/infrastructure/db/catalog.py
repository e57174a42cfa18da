"""
Adapter: SQL Document Type Catalog

Read-only view over the `document_types` table. The catalog is
administered elsewhere; `upsert` exists for seeding and tests.
"""

import logging

from src.core.entities.document_type import DocumentType
from src.core.interfaces.document_type_catalog import IDocumentTypeCatalog
from src.infrastructure.db.database import Database, get_database
from src.infrastructure.db.models import DocumentTypeRecord

logger = logging.getLogger(__name__)


class SqlDocumentTypeCatalog(IDocumentTypeCatalog):

    def __init__(self, db: Database | None = None):
        self._db = db or get_database()

    def get(self, document_type_id: str) -> DocumentType | None:
        with self._db.session() as s:
            record = s.get(DocumentTypeRecord, document_type_id)
            return record.to_entity() if record else None

    def list_active(self) -> list[DocumentType]:
        with self._db.session() as s:
            records = s.query(DocumentTypeRecord).filter_by(status="active").order_by(DocumentTypeRecord.name).all()
            return [r.to_entity() for r in records]

    def upsert(self, document_type: DocumentType) -> DocumentType:
        with self._db.session() as s:
            record = s.get(DocumentTypeRecord, document_type.id)
            if record is None:
                record = DocumentTypeRecord(id=document_type.id)
                s.add(record)
            record.name = document_type.name
            record.description = document_type.description
            record.category = document_type.category.value
            record.required_fields = list(document_type.required_fields)
            record.price = document_type.price
            record.processing_time_days = document_type.processing_time_days
            record.status = document_type.status.value
            logger.info(f"Catalog entry {document_type.id} ({document_type.name}) saved")
        return document_type
