"""
Entity: Request

A citizen's application for a civil-status document.
Pure model — no framework or database dependency.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.REJECTED)


class DeliveryMethod(str, Enum):
    DOWNLOAD = "download"
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    CARD = "card"
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"


class PaymentOutcome(str, Enum):
    """Outcome reported by the external payment processor."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Payment:
    amount: int
    status: PaymentStatus = PaymentStatus.PENDING
    method: PaymentMethod = PaymentMethod.CARD
    transaction_id: str | None = None
    intent_id: str | None = None
    confirmed_at: datetime | None = None


@dataclass
class AddressInfo:
    address: str = ""
    phone_number: str = ""


@dataclass
class Tracking:
    """Audit timestamps, one per transition actually taken."""
    submitted_at: datetime = field(default_factory=utcnow)
    processed_at: datetime | None = None
    completed_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    processed_by: str | None = None
    decided_by: str | None = None


@dataclass(frozen=True)
class Note:
    content: str
    author: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class TransitionEvent:
    """Immutable record of one successful status transition."""
    from_status: RequestStatus
    to_status: RequestStatus
    actor: str
    occurred_at: datetime
    reason: str | None = None


@dataclass
class GeneratedDocument:
    """Provenance descriptor of the last generated artifact."""
    url: str
    file_name: str
    generated_at: datetime
    generated_by: str


@dataclass
class Request:
    """Domain entity: document request."""
    id: str
    reference: str
    document_type_id: str
    delivery_method: DeliveryMethod
    price: int
    payment: Payment
    subject_data: dict = field(default_factory=dict)
    status: RequestStatus = RequestStatus.PENDING
    citizen_id: str | None = None
    commune: str | None = None
    address_info: AddressInfo | None = None
    generated_document: GeneratedDocument | None = None
    tracking: Tracking = field(default_factory=Tracking)
    notes: list[Note] = field(default_factory=list)
    events: list[TransitionEvent] = field(default_factory=list)
    version: int = 0
