"""
End-to-end request scenarios against SQLite and local storage.

A: birth extract issued and downloaded.
B: approval attempted before payment.
C: rejection, then approval attempted on the closed request.
"""

import io
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from pypdf import PdfReader

from src.core.entities.request import PaymentStatus, RequestStatus
from src.core.errors import InvalidTransition, PaymentNotCompleted
from src.core.use_cases.request_service import CreateRequestCommand
from tests.helpers.subjects import BIRTH_SUBJECT


class TestScenarioBirthExtract:
    """Scenario A: Awa Koné, female, download."""

    def test_full_flow(self, service, storage) -> None:
        request = service.create_request(
            CreateRequestCommand(
                document_type_id="birth-extract",
                delivery_method="download",
                subject_data=dict(BIRTH_SUBJECT),
                citizen_id="citizen-1",
                client_total=5000,
            )
        )
        assert request.reference == "REQ-2025-001"

        service.start_review(request.id, "staff-1")
        assert service.get_request(request.id).status is RequestStatus.PROCESSING

        service.initialize_payment(request.id, "mobile_money")
        service.confirm_payment(request.id, "om-778899", "succeeded")
        assert service.get_request(request.id).payment.status is PaymentStatus.PAID

        service.approve(request.id, "staff-1")
        document = service.generate_document(request.id, "staff-1")

        final = service.get_by_reference("REQ-2025-001")
        assert final.status is RequestStatus.COMPLETED
        assert final.generated_document == document
        assert document.url
        assert [(e.from_status.value, e.to_status.value) for e in final.events] == [
            ("pending", "processing"),
            ("processing", "completed"),
        ]
        assert final.tracking.processed_at <= final.tracking.completed_at

        data = storage.download(f"documents/REQ-2025-001/{document.file_name}")
        text = "\n".join(p.extract_text() for p in PdfReader(io.BytesIO(data)).pages)
        assert "REQ-2025-001" in text
        assert "née Koné Awa" in text
        assert "fille de Koné Ibrahim" in text


class TestScenarioApproveBeforePayment:
    """Scenario B."""

    def test_stays_processing(self, service, birth_command) -> None:
        request = service.create_request(birth_command())
        service.start_review(request.id, "staff-1")

        with pytest.raises(PaymentNotCompleted):
            service.approve(request.id, "staff-1")

        stored = service.get_request(request.id)
        assert stored.status is RequestStatus.PROCESSING
        assert stored.tracking.completed_at is None
        assert len(stored.events) == 1


class TestScenarioRejection:
    """Scenario C."""

    def test_rejected_is_final(self, service, birth_command) -> None:
        request = service.create_request(birth_command())
        service.start_review(request.id, "staff-1")
        service.reject(request.id, "staff-1", "documents incomplets")

        stored = service.get_request(request.id)
        assert stored.status is RequestStatus.REJECTED
        assert stored.tracking.rejection_reason == "documents incomplets"

        with pytest.raises(InvalidTransition):
            service.approve(request.id, "staff-1")
        assert service.get_request(request.id).status is RequestStatus.REJECTED


class TestConcurrency:

    def test_concurrent_creations_get_distinct_references(self, service, birth_command) -> None:
        with ThreadPoolExecutor(max_workers=6) as pool:
            requests = list(pool.map(lambda _: service.create_request(birth_command()), range(12)))
        refs = {r.reference for r in requests}
        assert len(refs) == 12
        assert all(ref.startswith("REQ-2025-") for ref in refs)

    def test_concurrent_approvals_single_winner(self, service, birth_command) -> None:
        """Two staff approve at once: one succeeds, the other sees a closed request."""
        request = service.create_request(birth_command())
        service.start_review(request.id, "staff-1")
        service.confirm_payment(request.id, "txn-1", "succeeded")

        barrier = threading.Barrier(2)
        outcomes = []

        def approve(staff_id):
            barrier.wait()
            try:
                service.approve(request.id, staff_id)
                outcomes.append("ok")
            except InvalidTransition:
                outcomes.append("invalid")

        threads = [threading.Thread(target=approve, args=(s,)) for s in ("staff-1", "staff-2")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["invalid", "ok"]
        stored = service.get_request(request.id)
        assert stored.status is RequestStatus.COMPLETED
        assert len(stored.events) == 2
