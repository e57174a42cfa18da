"""
Use Case: Request Service — orchestration of the request pipeline.

Commands:
    create → start_review → (initialize/confirm payment) → approve | reject
    → generate_document

Every read-modify-write on a request runs under that request's lock and
is persisted with a version check; on a concurrent write the request is
reloaded and the guards are evaluated again.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, TypeVar

from src.core.entities.request import (
    AddressInfo,
    DeliveryMethod,
    GeneratedDocument,
    Note,
    Payment,
    PaymentMethod,
    Request,
    RequestStatus,
    Tracking,
    utcnow,
)
from src.core.errors import (
    ConcurrentModification,
    DocumentTypeUnavailable,
    MissingRequiredField,
    RequestNotCompleted,
    RequestNotFound,
    UnprintableField,
    ValidationError,
)
from src.core.interfaces.document_renderer import IDocumentRenderer
from src.core.interfaces.document_type_catalog import IDocumentTypeCatalog
from src.core.interfaces.reference_allocator import IReferenceAllocator
from src.core.interfaces.request_repository import IRequestRepository
from src.core.services.lifecycle import RequestLifecycle
from src.core.services.payment_gate import PaymentGate, PaymentHandle
from src.core.services.pricing import PricingResolver, coerce_delivery_method
from src.core.services.template_resolver import TemplateResolver
from src.core.use_cases.keyed_locks import KeyedLocks

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CreateRequestCommand:
    """Input of CreateRequest."""
    document_type_id: str
    delivery_method: str | DeliveryMethod
    subject_data: dict = field(default_factory=dict)
    address_info: AddressInfo | None = None
    citizen_id: str | None = None
    commune: str | None = None
    payment_method: str | None = None
    client_total: int | None = None    # total shown to the citizen, checked against the server price


@dataclass
class RequestStatistics:
    total: int
    by_status: dict[str, int]
    payments: dict[str, int]


def _blank(value) -> bool:
    return value is None or not str(value).strip()


class RequestService:
    """
    Use Case facade over the request pipeline.

    Dependency Injection: all collaborators come through the constructor.
    """

    def __init__(
        self,
        repository: IRequestRepository,
        catalog: IDocumentTypeCatalog,
        allocator: IReferenceAllocator,
        renderer: IDocumentRenderer,
        templates: TemplateResolver,
        pricing: PricingResolver | None = None,
        payment_gate: PaymentGate | None = None,
        lifecycle: RequestLifecycle | None = None,
        clock: Callable[[], datetime] = utcnow,
        mutation_max_attempts: int = 3,
        locks: KeyedLocks | None = None,
    ):
        self._repo = repository
        self._catalog = catalog
        self._allocator = allocator
        self._renderer = renderer
        self._templates = templates
        self._pricing = pricing or PricingResolver()
        self._payments = payment_gate or PaymentGate(clock=clock)
        self._lifecycle = lifecycle or RequestLifecycle(self._payments, clock=clock)
        self._clock = clock
        self._max_attempts = max(1, mutation_max_attempts)
        self._locks = locks or KeyedLocks()

    # ─── Queries ────────────────────────────────────────────

    def get_request(self, request_id: str) -> Request:
        request = self._repo.get(request_id)
        if request is None:
            raise RequestNotFound(request_id)
        return request

    def get_by_reference(self, reference: str) -> Request:
        request = self._repo.get_by_reference(reference)
        if request is None:
            raise RequestNotFound(reference)
        return request

    def list_requests(
        self,
        status: RequestStatus | str | None = None,
        document_type_id: str | None = None,
        citizen_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, list[Request]]:
        if status is not None:
            try:
                status = RequestStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status: {status!r}", status=status) from None
        return self._repo.list(
            status=status,
            document_type_id=document_type_id,
            citizen_id=citizen_id,
            limit=max(1, min(limit, 200)),
            offset=max(0, offset),
        )

    def statistics(self, citizen_id: str | None = None) -> RequestStatistics:
        counts = self._repo.count_by_status(citizen_id=citizen_id)
        return RequestStatistics(
            total=sum(counts.values()),
            by_status={s.value: n for s, n in counts.items()},
            payments=self._repo.payment_totals(citizen_id=citizen_id),
        )

    # ─── Commands ───────────────────────────────────────────

    def create_request(self, command: CreateRequestCommand) -> Request:
        """
        Validates, prices and stores a new pending request.

        All validation happens before the reference is allocated.
        """
        delivery = coerce_delivery_method(command.delivery_method)

        document_type = self._catalog.get(command.document_type_id)
        if document_type is None:
            raise DocumentTypeUnavailable(command.document_type_id)
        price = self._pricing.price(document_type, delivery)
        self._pricing.verify_client_total(price, command.client_total)

        self._check_contact(delivery, command.address_info)
        subject_data = dict(command.subject_data or {})
        self._check_required_fields(document_type.name, document_type.required_fields, subject_data)

        try:
            payment_method = PaymentMethod(command.payment_method or PaymentMethod.CARD)
        except ValueError:
            raise ValidationError(
                f"Unknown payment method: {command.payment_method!r}", method=command.payment_method
            ) from None

        now = self._clock()
        reference = self._allocator.allocate(now.year)
        request = Request(
            id=str(uuid.uuid4()),
            reference=reference,
            document_type_id=document_type.id,
            delivery_method=delivery,
            price=price,
            payment=Payment(amount=price, method=payment_method),
            subject_data=subject_data,
            citizen_id=command.citizen_id,
            commune=command.commune,
            address_info=command.address_info,
            tracking=Tracking(submitted_at=now),
        )
        self._repo.add(request)
        logger.info(f"Created request {reference} ({document_type.name}, {delivery.value}, {price})")
        return request

    def start_review(self, request_id: str, staff_id: str) -> Request:
        request, _ = self._mutate(request_id, lambda r: self._lifecycle.start_review(r, staff_id))
        return request

    def approve(self, request_id: str, staff_id: str) -> Request:
        request, _ = self._mutate(request_id, lambda r: self._lifecycle.approve(r, staff_id))
        return request

    def reject(self, request_id: str, staff_id: str, reason: str) -> Request:
        request, _ = self._mutate(request_id, lambda r: self._lifecycle.reject(r, staff_id, reason))
        return request

    def initialize_payment(self, request_id: str, method: str | None = None) -> PaymentHandle:
        _, handle = self._mutate(request_id, lambda r: self._payments.initialize(r, method))
        return handle

    def confirm_payment(self, request_id: str, external_reference: str, outcome) -> Request:
        with self._locks.hold(request_id):
            for attempt in range(1, self._max_attempts + 1):
                request = self.get_request(request_id)
                if not self._payments.confirm(request, external_reference, outcome):
                    return request  # idempotent repeat, nothing to persist
                try:
                    return self._repo.update(request)
                except ConcurrentModification:
                    self._log_retry(request_id, attempt)
                    if attempt == self._max_attempts:
                        raise
        raise ConcurrentModification(request_id)

    def add_note(self, request_id: str, author: str, content: str) -> Request:
        if _blank(content):
            raise ValidationError("Note content is required", field="content")
        if _blank(author):
            raise ValidationError("Note author is required", field="author")

        def append(request: Request):
            request.notes.append(Note(content=content.strip(), author=author, created_at=self._clock()))

        request, _ = self._mutate(request_id, append)
        return request

    def generate_document(self, request_id: str, staff_id: str) -> GeneratedDocument:
        """
        Renders the document of a completed request and attaches its descriptor.

        Calling it again produces a new artifact and replaces the
        descriptor; the status is never changed.
        """
        with self._locks.hold(request_id):
            request = self.get_request(request_id)
            if request.status != RequestStatus.COMPLETED:
                raise RequestNotCompleted(request.status)

            document_type = self._catalog.get(request.document_type_id)
            if document_type is None:
                raise DocumentTypeUnavailable(request.document_type_id)
            template = self._templates.resolve_template(document_type.name)

            rendered = self._renderer.render(request, template, document_type.required_fields, staff_id)
            descriptor = GeneratedDocument(
                url=rendered.url,
                file_name=rendered.file_name,
                generated_at=rendered.generated_at,
                generated_by=staff_id,
            )

            def attach(r: Request):
                if r.status != RequestStatus.COMPLETED:
                    raise RequestNotCompleted(r.status)
                r.generated_document = descriptor

            self._persist_with_retry(request_id, attach)
            logger.info(f"Document {descriptor.file_name} attached to {request.reference}")
            return descriptor

    # ─── internals ──────────────────────────────────────────

    def _mutate(self, request_id: str, change: Callable[[Request], T]) -> tuple[Request, T]:
        with self._locks.hold(request_id):
            return self._persist_with_retry(request_id, change)

    def _persist_with_retry(self, request_id: str, change: Callable[[Request], T]) -> tuple[Request, T]:
        for attempt in range(1, self._max_attempts + 1):
            request = self.get_request(request_id)
            result = change(request)
            try:
                return self._repo.update(request), result
            except ConcurrentModification:
                self._log_retry(request_id, attempt)
                if attempt == self._max_attempts:
                    raise
        raise ConcurrentModification(request_id)

    def _log_retry(self, request_id: str, attempt: int) -> None:
        logger.warning(f"Concurrent write on {request_id} (attempt {attempt}/{self._max_attempts}), reloading")

    @staticmethod
    def _check_contact(delivery: DeliveryMethod, address: AddressInfo | None) -> None:
        if delivery == DeliveryMethod.DELIVERY:
            if address is None or _blank(address.address):
                raise ValidationError("An address is required for delivery", field="address")
            if _blank(address.phone_number):
                raise ValidationError("A phone number is required for delivery", field="phone_number")
        elif delivery == DeliveryMethod.PICKUP:
            if address is None or _blank(address.phone_number):
                raise ValidationError("A phone number is required for pickup", field="phone_number")

    def _check_required_fields(self, type_name: str, required: list[str], subject_data: dict) -> None:
        missing = {f for f in required if _blank(subject_data.get(f))}
        template = self._templates.find_template(type_name)
        if template is not None:
            missing.update(template.missing_fields(subject_data))
        if missing:
            first = sorted(missing)[0]
            error = MissingRequiredField(first)
            error.details["missing"] = sorted(missing)
            raise error
        if template is not None:
            unprintable = template.unprintable_fields(subject_data)
            if unprintable:
                name = sorted(unprintable)[0]
                raise UnprintableField(name, unprintable[name])
