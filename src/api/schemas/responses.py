"""
Pydantic schemas — Response models for the API.
"""

from datetime import datetime

from pydantic import BaseModel

from src.core.entities.request import GeneratedDocument, Request
from src.core.services.payment_gate import PaymentHandle


class PaymentResponse(BaseModel):
    status: str
    amount: int
    method: str
    transaction_id: str | None = None
    intent_id: str | None = None
    confirmed_at: datetime | None = None


class TrackingResponse(BaseModel):
    submitted_at: datetime
    processed_at: datetime | None = None
    completed_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    processed_by: str | None = None
    decided_by: str | None = None


class NoteResponse(BaseModel):
    content: str
    author: str
    created_at: datetime


class TransitionEventResponse(BaseModel):
    from_status: str
    to_status: str
    actor: str
    occurred_at: datetime
    reason: str | None = None


class GeneratedDocumentResponse(BaseModel):
    url: str
    file_name: str
    generated_at: datetime
    generated_by: str

    @classmethod
    def from_entity(cls, doc: GeneratedDocument) -> "GeneratedDocumentResponse":
        return cls(
            url=doc.url,
            file_name=doc.file_name,
            generated_at=doc.generated_at,
            generated_by=doc.generated_by,
        )


class RequestResponse(BaseModel):
    id: str
    reference: str
    status: str
    document_type_id: str
    delivery_method: str
    price: int
    citizen_id: str | None = None
    commune: str | None = None
    address: str | None = None
    phone_number: str | None = None
    subject_data: dict = {}
    payment: PaymentResponse
    tracking: TrackingResponse
    generated_document: GeneratedDocumentResponse | None = None
    notes: list[NoteResponse] = []
    events: list[TransitionEventResponse] = []
    version: int = 0

    @classmethod
    def from_entity(cls, r: Request) -> "RequestResponse":
        t = r.tracking
        return cls(
            id=r.id,
            reference=r.reference,
            status=r.status.value,
            document_type_id=r.document_type_id,
            delivery_method=r.delivery_method.value,
            price=r.price,
            citizen_id=r.citizen_id,
            commune=r.commune,
            address=r.address_info.address if r.address_info else None,
            phone_number=r.address_info.phone_number if r.address_info else None,
            subject_data=r.subject_data,
            payment=PaymentResponse(
                status=r.payment.status.value,
                amount=r.payment.amount,
                method=r.payment.method.value,
                transaction_id=r.payment.transaction_id,
                intent_id=r.payment.intent_id,
                confirmed_at=r.payment.confirmed_at,
            ),
            tracking=TrackingResponse(
                submitted_at=t.submitted_at,
                processed_at=t.processed_at,
                completed_at=t.completed_at,
                rejected_at=t.rejected_at,
                rejection_reason=t.rejection_reason,
                processed_by=t.processed_by,
                decided_by=t.decided_by,
            ),
            generated_document=(
                GeneratedDocumentResponse.from_entity(r.generated_document)
                if r.generated_document else None
            ),
            notes=[NoteResponse(content=n.content, author=n.author, created_at=n.created_at) for n in r.notes],
            events=[
                TransitionEventResponse(
                    from_status=e.from_status.value,
                    to_status=e.to_status.value,
                    actor=e.actor,
                    occurred_at=e.occurred_at,
                    reason=e.reason,
                )
                for e in r.events
            ],
            version=r.version,
        )


class RequestListResponse(BaseModel):
    total: int
    requests: list[RequestResponse]


class PaymentHandleResponse(BaseModel):
    request_id: str
    intent_id: str
    amount: int
    currency: str
    method: str

    @classmethod
    def from_handle(cls, handle: PaymentHandle) -> "PaymentHandleResponse":
        return cls(
            request_id=handle.request_id,
            intent_id=handle.intent_id,
            amount=handle.amount,
            currency=handle.currency,
            method=handle.method.value,
        )


class StatisticsResponse(BaseModel):
    total: int
    by_status: dict[str, int]
    payments: dict[str, int]
