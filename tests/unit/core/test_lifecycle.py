"""Unit tests for the request lifecycle state machine."""

import pytest

from src.core.entities.request import (
    DeliveryMethod,
    Payment,
    PaymentStatus,
    Request,
    RequestStatus,
)
from src.core.errors import InvalidTransition, PaymentNotCompleted, ValidationError
from src.core.services.lifecycle import RequestLifecycle, allowed_actions
from src.core.services.payment_gate import PaymentGate


def make_request(status=RequestStatus.PENDING, payment_status=PaymentStatus.PENDING) -> Request:
    return Request(
        id="r-1",
        reference="REQ-2025-001",
        document_type_id="birth-extract",
        delivery_method=DeliveryMethod.DOWNLOAD,
        price=5000,
        payment=Payment(amount=5000, status=payment_status),
        status=status,
    )


@pytest.fixture
def lifecycle(clock) -> RequestLifecycle:
    return RequestLifecycle(PaymentGate(clock=clock), clock=clock)


class TestStartReview:

    def test_pending_to_processing(self, lifecycle) -> None:
        request = make_request()
        event = lifecycle.start_review(request, "staff-1")

        assert request.status is RequestStatus.PROCESSING
        assert request.tracking.processed_at is not None
        assert request.tracking.processed_by == "staff-1"
        assert event.from_status is RequestStatus.PENDING
        assert event.to_status is RequestStatus.PROCESSING
        assert request.events == [event]

    def test_not_allowed_twice(self, lifecycle) -> None:
        request = make_request()
        lifecycle.start_review(request, "staff-1")
        with pytest.raises(InvalidTransition):
            lifecycle.start_review(request, "staff-1")
        assert len(request.events) == 1


class TestApprove:

    def test_requires_paid(self, lifecycle) -> None:
        """Approving an unpaid request leaves it in processing."""
        request = make_request(RequestStatus.PROCESSING)
        with pytest.raises(PaymentNotCompleted):
            lifecycle.approve(request, "staff-1")
        assert request.status is RequestStatus.PROCESSING
        assert request.tracking.completed_at is None
        assert request.events == []

    def test_failed_payment_blocks_approval(self, lifecycle) -> None:
        request = make_request(RequestStatus.PROCESSING, PaymentStatus.FAILED)
        with pytest.raises(PaymentNotCompleted):
            lifecycle.approve(request, "staff-1")

    def test_paid_processing_completes(self, lifecycle) -> None:
        request = make_request(RequestStatus.PROCESSING, PaymentStatus.PAID)
        lifecycle.approve(request, "staff-2")
        assert request.status is RequestStatus.COMPLETED
        assert request.tracking.completed_at is not None
        assert request.tracking.decided_by == "staff-2"

    def test_status_checked_before_payment(self, lifecycle) -> None:
        """A pending unpaid request fails on the transition, not the payment."""
        with pytest.raises(InvalidTransition):
            lifecycle.approve(make_request(), "staff-1")


class TestReject:

    def test_processing_to_rejected(self, lifecycle) -> None:
        request = make_request(RequestStatus.PROCESSING)
        event = lifecycle.reject(request, "staff-1", "documents incomplets")
        assert request.status is RequestStatus.REJECTED
        assert request.tracking.rejection_reason == "documents incomplets"
        assert event.reason == "documents incomplets"

    def test_reason_required(self, lifecycle) -> None:
        request = make_request(RequestStatus.PROCESSING)
        with pytest.raises(ValidationError):
            lifecycle.reject(request, "staff-1", "   ")
        assert request.status is RequestStatus.PROCESSING

    def test_pending_cannot_be_rejected(self, lifecycle) -> None:
        with pytest.raises(InvalidTransition):
            lifecycle.reject(make_request(), "staff-1", "incomplet")


class TestTerminalStates:

    @pytest.mark.parametrize("status", [RequestStatus.COMPLETED, RequestStatus.REJECTED])
    @pytest.mark.parametrize("action", ["start_review", "approve"])
    def test_no_transition_out(self, lifecycle, status, action) -> None:
        request = make_request(status, PaymentStatus.PAID)
        with pytest.raises(InvalidTransition):
            getattr(lifecycle, action)(request, "staff-1")
        assert request.status is status

    @pytest.mark.parametrize("status", [RequestStatus.COMPLETED, RequestStatus.REJECTED])
    def test_no_reject_out(self, lifecycle, status) -> None:
        request = make_request(status, PaymentStatus.PAID)
        with pytest.raises(InvalidTransition):
            lifecycle.reject(request, "staff-1", "trop tard")

    def test_allowed_actions(self) -> None:
        assert allowed_actions(RequestStatus.PENDING) == ["start_review"]
        assert sorted(allowed_actions(RequestStatus.PROCESSING)) == ["approve", "reject"]
        assert allowed_actions(RequestStatus.COMPLETED) == []
