"""
Database Models — SQLAlchemy.

Tables:
  - requests: one record per document request (optimistically versioned)
  - document_types: read-only projection of the document-type catalog
  - reference_counters: per-year sequence used to allocate references
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, DateTime, Text, JSON, Index,
)
from sqlalchemy.orm import DeclarativeBase

from src.core.entities.document_type import DocumentCategory, DocumentType, DocumentTypeStatus
from src.core.entities.request import (
    AddressInfo,
    DeliveryMethod,
    GeneratedDocument,
    Note,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Request,
    RequestStatus,
    Tracking,
    TransitionEvent,
)


class Base(DeclarativeBase):
    pass


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; everything is stored in UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _from_iso(value: str | None) -> datetime | None:
    return _aware(datetime.fromisoformat(value)) if value else None


class RequestRecord(Base):
    """Stores every document request."""
    __tablename__ = "requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    reference = Column(String(32), unique=True, nullable=False, index=True)
    version = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, index=True)
    document_type_id = Column(String(64), nullable=False)
    citizen_id = Column(String(64), nullable=True)
    commune = Column(String(120), nullable=True)
    delivery_method = Column(String(20), nullable=False)
    address_info = Column(JSON, nullable=True)
    price = Column(Integer, nullable=False)

    # Payment
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    payment_amount = Column(Integer, nullable=False)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.CARD.value)
    payment_transaction_id = Column(String(120), nullable=True)
    payment_intent_id = Column(String(64), nullable=True)
    payment_confirmed_at = Column(DateTime(timezone=True), nullable=True)

    subject_data = Column(JSON, default=dict)
    generated_document = Column(JSON, nullable=True)

    # Tracking
    submitted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    processed_by = Column(String(64), nullable=True)
    decided_by = Column(String(64), nullable=True)

    notes = Column(JSON, default=list)
    events = Column(JSON, default=list)

    __table_args__ = (
        Index("ix_requests_document_type_status", "document_type_id", "status"),
        Index("ix_requests_citizen_status", "citizen_id", "status"),
    )
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Request {self.reference} [{self.status}] v{self.version}>"

    @classmethod
    def from_entity(cls, request: Request) -> "RequestRecord":
        record = cls(id=request.id, reference=request.reference)
        record.apply(request)
        return record

    def apply(self, request: Request) -> None:
        """Copies every mutable field of the entity onto the record."""
        self.status = request.status.value
        self.document_type_id = request.document_type_id
        self.citizen_id = request.citizen_id
        self.commune = request.commune
        self.delivery_method = request.delivery_method.value
        self.address_info = (
            {"address": request.address_info.address, "phone_number": request.address_info.phone_number}
            if request.address_info else None
        )
        self.price = request.price

        payment = request.payment
        self.payment_status = payment.status.value
        self.payment_amount = payment.amount
        self.payment_method = payment.method.value
        self.payment_transaction_id = payment.transaction_id
        self.payment_intent_id = payment.intent_id
        self.payment_confirmed_at = payment.confirmed_at

        self.subject_data = dict(request.subject_data or {})
        doc = request.generated_document
        self.generated_document = (
            {
                "url": doc.url,
                "file_name": doc.file_name,
                "generated_at": _iso(doc.generated_at),
                "generated_by": doc.generated_by,
            }
            if doc else None
        )

        tracking = request.tracking
        self.submitted_at = tracking.submitted_at
        self.processed_at = tracking.processed_at
        self.completed_at = tracking.completed_at
        self.rejected_at = tracking.rejected_at
        self.rejection_reason = tracking.rejection_reason
        self.processed_by = tracking.processed_by
        self.decided_by = tracking.decided_by

        self.notes = [
            {"content": n.content, "author": n.author, "created_at": _iso(n.created_at)}
            for n in request.notes
        ]
        self.events = [
            {
                "from_status": e.from_status.value,
                "to_status": e.to_status.value,
                "actor": e.actor,
                "occurred_at": _iso(e.occurred_at),
                "reason": e.reason,
            }
            for e in request.events
        ]

    def to_entity(self) -> Request:
        doc = self.generated_document
        address = self.address_info
        return Request(
            id=self.id,
            reference=self.reference,
            document_type_id=self.document_type_id,
            delivery_method=DeliveryMethod(self.delivery_method),
            price=self.price,
            payment=Payment(
                amount=self.payment_amount,
                status=PaymentStatus(self.payment_status),
                method=PaymentMethod(self.payment_method),
                transaction_id=self.payment_transaction_id,
                intent_id=self.payment_intent_id,
                confirmed_at=_aware(self.payment_confirmed_at),
            ),
            subject_data=dict(self.subject_data or {}),
            status=RequestStatus(self.status),
            citizen_id=self.citizen_id,
            commune=self.commune,
            address_info=AddressInfo(**address) if address else None,
            generated_document=(
                GeneratedDocument(
                    url=doc["url"],
                    file_name=doc["file_name"],
                    generated_at=_from_iso(doc["generated_at"]),
                    generated_by=doc["generated_by"],
                )
                if doc else None
            ),
            tracking=Tracking(
                submitted_at=_aware(self.submitted_at),
                processed_at=_aware(self.processed_at),
                completed_at=_aware(self.completed_at),
                rejected_at=_aware(self.rejected_at),
                rejection_reason=self.rejection_reason,
                processed_by=self.processed_by,
                decided_by=self.decided_by,
            ),
            notes=[
                Note(content=n["content"], author=n["author"], created_at=_from_iso(n["created_at"]))
                for n in (self.notes or [])
            ],
            events=[
                TransitionEvent(
                    from_status=RequestStatus(e["from_status"]),
                    to_status=RequestStatus(e["to_status"]),
                    actor=e["actor"],
                    occurred_at=_from_iso(e["occurred_at"]),
                    reason=e.get("reason"),
                )
                for e in (self.events or [])
            ],
            version=self.version,
        )


class DocumentTypeRecord(Base):
    """Catalog projection; administered outside this service."""
    __tablename__ = "document_types"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), unique=True, nullable=False)
    description = Column(Text, default="")
    category = Column(String(20), nullable=False, default=DocumentCategory.ACTE.value)
    required_fields = Column(JSON, default=list)
    price = Column(Integer, nullable=False, default=0)
    processing_time_days = Column(Integer, nullable=False, default=7)
    status = Column(String(20), nullable=False, default=DocumentTypeStatus.ACTIVE.value)

    def __repr__(self):
        return f"<DocumentType {self.name} [{self.status}] price={self.price}>"

    def to_entity(self) -> DocumentType:
        return DocumentType(
            id=self.id,
            name=self.name,
            description=self.description or "",
            category=DocumentCategory(self.category),
            required_fields=list(self.required_fields or []),
            price=self.price,
            processing_time_days=self.processing_time_days,
            status=DocumentTypeStatus(self.status),
        )


class ReferenceCounter(Base):
    """Last sequence number handed out per calendar year."""
    __tablename__ = "reference_counters"

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<ReferenceCounter {self.year}={self.last_value}>"
