"""
Pytest configuration and shared fixtures.

Testing Standards:
- Unit tests go in tests/unit/, end-to-end scenarios in tests/integration/
- Each test gets its own SQLite file and storage directory under tmp_path
- Time is frozen with FixedClock (2025-03-14 10:15 UTC) unless a test moves it
"""

from datetime import timedelta

import pytest

from src.core.entities.document_type import DocumentType
from src.core.entities.request import AddressInfo
from src.core.interfaces.document_renderer import IssuingAuthority
from src.core.services.payment_gate import PaymentGate
from src.core.services.pricing import PricingResolver
from src.core.services.template_resolver import TemplateResolver
from src.core.use_cases.request_service import CreateRequestCommand, RequestService
from src.infrastructure.db.catalog import SqlDocumentTypeCatalog
from src.infrastructure.db.database import Database
from src.infrastructure.db.reference_allocator import SqlReferenceAllocator
from src.infrastructure.db.repository import SqlRequestRepository
from src.infrastructure.db.seed import seed_document_types
from src.infrastructure.rendering.pdf_renderer import PdfDocumentRenderer
from src.infrastructure.rendering.registry import default_templates
from src.infrastructure.storage.local_storage import LocalStorageService
from tests.helpers.fixed_clock import FixedClock
from tests.helpers.subjects import BIRTH_SUBJECT


@pytest.fixture
def clock() -> FixedClock:
    """Frozen clock, advancing one millisecond per reading."""
    return FixedClock(step=timedelta(milliseconds=1))


@pytest.fixture
def db(tmp_path):
    """Isolated SQLite database file with all tables created."""
    database = Database(url=f"sqlite:///{tmp_path / 'test.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def catalog(db) -> SqlDocumentTypeCatalog:
    catalog = SqlDocumentTypeCatalog(db)
    seed_document_types(catalog)
    return catalog


@pytest.fixture
def storage(tmp_path) -> LocalStorageService:
    return LocalStorageService(root=tmp_path / "storage", public_base_url="http://files.test")


@pytest.fixture
def authority() -> IssuingAuthority:
    return IssuingAuthority(
        country="REPUBLIQUE DE COTE D'IVOIRE",
        district="DISTRICT D'ABIDJAN",
        commune="ABOBO",
        centre="Centre Principal",
        officer_name="OUATTARA SOULEYMANE",
        officer_title="Officier d'Etat - Civil Délégué",
    )


@pytest.fixture
def service(db, catalog, storage, authority, clock) -> RequestService:
    """RequestService wired to the SQL adapters, local storage and the frozen clock."""
    return RequestService(
        repository=SqlRequestRepository(db),
        catalog=catalog,
        allocator=SqlReferenceAllocator(db, clock=clock),
        renderer=PdfDocumentRenderer(storage=storage, authority=authority, clock=clock),
        templates=TemplateResolver(default_templates()),
        pricing=PricingResolver(delivery_surcharge=2000),
        payment_gate=PaymentGate(currency="XOF", clock=clock),
        clock=clock,
    )


@pytest.fixture
def birth_command():
    """Factory for a valid birth-extract creation command."""

    def make(delivery_method="download", **overrides) -> CreateRequestCommand:
        values = dict(
            document_type_id="birth-extract",
            delivery_method=delivery_method,
            subject_data=dict(BIRTH_SUBJECT),
            citizen_id="citizen-1",
            commune="Abobo",
        )
        if delivery_method == "delivery":
            values["address_info"] = AddressInfo(address="Abobo Baoulé, lot 12", phone_number="0700000000")
        elif delivery_method == "pickup":
            values["address_info"] = AddressInfo(phone_number="0700000000")
        values.update(overrides)
        return CreateRequestCommand(**values)

    return make


@pytest.fixture
def birth_type() -> DocumentType:
    return DocumentType(id="birth-extract", name="Extrait d'acte de naissance", price=5000)
