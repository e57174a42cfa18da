"""
Routes: /requests — request lifecycle, payment and document generation.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse

from src.api.schemas.requests import (
    ConfirmPaymentBody,
    CreateRequestBody,
    InitializePaymentBody,
    NoteBody,
    RejectBody,
    StaffActionBody,
)
from src.api.schemas.responses import (
    GeneratedDocumentResponse,
    PaymentHandleResponse,
    RequestListResponse,
    RequestResponse,
    StatisticsResponse,
)
from src.config.settings import Settings, get_settings
from src.core.entities.request import AddressInfo
from src.core.interfaces.document_renderer import IssuingAuthority
from src.core.interfaces.storage_service import IStorageService
from src.core.services.payment_gate import PaymentGate
from src.core.services.pricing import PricingResolver
from src.core.services.template_resolver import TemplateResolver
from src.core.use_cases.request_service import CreateRequestCommand, RequestService
from src.infrastructure.db.catalog import SqlDocumentTypeCatalog
from src.infrastructure.db.database import Database, get_database
from src.infrastructure.db.reference_allocator import SqlReferenceAllocator
from src.infrastructure.db.repository import SqlRequestRepository
from src.infrastructure.rendering.pdf_renderer import PdfDocumentRenderer
from src.infrastructure.rendering.registry import default_templates

router = APIRouter()

# Lazy singleton
_service = None


def build_storage(settings: Settings) -> IStorageService:
    """Factory — storage backend selected by settings."""
    if settings.storage_backend == "minio":
        from src.infrastructure.storage.minio_storage import MinIOStorageService
        return MinIOStorageService(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            bucket=settings.minio_bucket,
            secure=settings.minio_secure,
            max_attempts=settings.storage_max_attempts,
        )
    from src.infrastructure.storage.local_storage import LocalStorageService
    return LocalStorageService(
        root=settings.storage_root,
        public_base_url=settings.public_base_url,
        max_attempts=settings.storage_max_attempts,
    )


def build_request_service(
    settings: Settings,
    db: Database | None = None,
    storage: IStorageService | None = None,
    **overrides,
) -> RequestService:
    """Factory — build the service with concrete adapters."""
    db = db or get_database()
    clock = overrides.pop("clock", None)
    extra = {"clock": clock} if clock else {}
    renderer = PdfDocumentRenderer(
        storage=storage or build_storage(settings),
        authority=IssuingAuthority(
            country=settings.country_name,
            district=settings.district_name,
            commune=settings.commune_name,
            centre=settings.issuing_centre,
            officer_name=settings.officer_name,
            officer_title=settings.officer_title,
        ),
        url_expiry_seconds=settings.storage_url_expiry_seconds,
        **extra,
    )
    return RequestService(
        repository=SqlRequestRepository(db),
        catalog=SqlDocumentTypeCatalog(db),
        allocator=SqlReferenceAllocator(
            db,
            max_attempts=settings.allocator_max_attempts,
            backoff_seconds=settings.allocator_backoff_seconds,
            backoff_max_seconds=settings.allocator_backoff_max_seconds,
            **extra,
        ),
        renderer=renderer,
        templates=TemplateResolver(default_templates()),
        pricing=PricingResolver(settings.delivery_surcharge),
        payment_gate=PaymentGate(currency=settings.currency, **extra),
        mutation_max_attempts=settings.mutation_max_attempts,
        **extra,
        **overrides,
    )


def get_request_service() -> RequestService:
    global _service
    if _service is None:
        _service = build_request_service(get_settings())
    return _service


# ── Queries ──

@router.get("/requests", response_model=RequestListResponse)
def list_requests(
    status: str | None = None,
    document_type_id: str | None = None,
    citizen_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
    service: RequestService = Depends(get_request_service),
):
    total, requests = service.list_requests(
        status=status,
        document_type_id=document_type_id,
        citizen_id=citizen_id,
        limit=limit,
        offset=offset,
    )
    return RequestListResponse(total=total, requests=[RequestResponse.from_entity(r) for r in requests])


@router.get("/requests/statistics", response_model=StatisticsResponse)
def request_statistics(citizen_id: str | None = None, service: RequestService = Depends(get_request_service)):
    stats = service.statistics(citizen_id=citizen_id)
    return StatisticsResponse(total=stats.total, by_status=stats.by_status, payments=stats.payments)


@router.get("/requests/by-reference/{reference}", response_model=RequestResponse)
def get_request_by_reference(reference: str, service: RequestService = Depends(get_request_service)):
    return RequestResponse.from_entity(service.get_by_reference(reference))


@router.get("/requests/{request_id}", response_model=RequestResponse)
def get_request(request_id: str, service: RequestService = Depends(get_request_service)):
    return RequestResponse.from_entity(service.get_request(request_id))


@router.get("/requests/{request_id}/document")
def download_document(request_id: str, service: RequestService = Depends(get_request_service)):
    """Redirects to the generated document."""
    request = service.get_request(request_id)
    if not request.generated_document or not request.generated_document.url:
        return JSONResponse(status_code=404, content={"detail": "Document not generated yet"})
    return RedirectResponse(request.generated_document.url, status_code=307)


# ── Commands ──

@router.post("/requests", response_model=RequestResponse, status_code=201)
def create_request(body: CreateRequestBody, service: RequestService = Depends(get_request_service)):
    address = None
    if body.address or body.phone_number:
        address = AddressInfo(address=body.address or "", phone_number=body.phone_number or "")
    request = service.create_request(
        CreateRequestCommand(
            document_type_id=body.document_type_id,
            delivery_method=body.delivery_method,
            subject_data=body.subject_data,
            address_info=address,
            citizen_id=body.citizen_id,
            commune=body.commune,
            payment_method=body.payment_method,
            client_total=body.total,
        )
    )
    return RequestResponse.from_entity(request)


@router.post("/requests/{request_id}/start-review", response_model=RequestResponse)
def start_review(request_id: str, body: StaffActionBody, service: RequestService = Depends(get_request_service)):
    return RequestResponse.from_entity(service.start_review(request_id, body.staff_id))


@router.post("/requests/{request_id}/approve", response_model=RequestResponse)
def approve(request_id: str, body: StaffActionBody, service: RequestService = Depends(get_request_service)):
    return RequestResponse.from_entity(service.approve(request_id, body.staff_id))


@router.post("/requests/{request_id}/reject", response_model=RequestResponse)
def reject(request_id: str, body: RejectBody, service: RequestService = Depends(get_request_service)):
    return RequestResponse.from_entity(service.reject(request_id, body.staff_id, body.reason))


@router.post("/requests/{request_id}/payment", response_model=PaymentHandleResponse)
def initialize_payment(
    request_id: str,
    body: InitializePaymentBody | None = None,
    service: RequestService = Depends(get_request_service),
):
    handle = service.initialize_payment(request_id, method=body.method if body else None)
    return PaymentHandleResponse.from_handle(handle)


@router.post("/requests/{request_id}/payment-status", response_model=RequestResponse)
def confirm_payment(
    request_id: str,
    body: ConfirmPaymentBody,
    service: RequestService = Depends(get_request_service),
):
    return RequestResponse.from_entity(
        service.confirm_payment(request_id, body.external_reference, body.status)
    )


@router.post("/requests/{request_id}/notes", response_model=RequestResponse)
def add_note(request_id: str, body: NoteBody, service: RequestService = Depends(get_request_service)):
    return RequestResponse.from_entity(service.add_note(request_id, body.author, body.content))


@router.post("/requests/{request_id}/generate-document", response_model=GeneratedDocumentResponse)
def generate_document(
    request_id: str,
    body: StaffActionBody,
    service: RequestService = Depends(get_request_service),
):
    return GeneratedDocumentResponse.from_entity(service.generate_document(request_id, body.staff_id))
