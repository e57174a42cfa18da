"""
Request Lifecycle — state machine.

    pending ──start_review──▶ processing ──approve──▶ completed
                                   │
                                   └──────reject────▶ rejected

completed and rejected are terminal. approve is additionally guarded
by the payment gate. Every successful transition stamps exactly one
audit timestamp and appends one TransitionEvent.
"""

import logging
from datetime import datetime
from typing import Callable

from src.core.entities.request import Request, RequestStatus, TransitionEvent, utcnow
from src.core.errors import InvalidTransition, PaymentNotCompleted, ValidationError
from src.core.services.payment_gate import PaymentGate

logger = logging.getLogger(__name__)

START_REVIEW = "start_review"
APPROVE = "approve"
REJECT = "reject"

TRANSITIONS: dict[tuple[RequestStatus, str], RequestStatus] = {
    (RequestStatus.PENDING, START_REVIEW): RequestStatus.PROCESSING,
    (RequestStatus.PROCESSING, APPROVE): RequestStatus.COMPLETED,
    (RequestStatus.PROCESSING, REJECT): RequestStatus.REJECTED,
}


def allowed_actions(status: RequestStatus) -> list[str]:
    return [action for (source, action) in TRANSITIONS if source == status]


class RequestLifecycle:
    """Guarded transitions over a Request."""

    def __init__(self, payment_gate: PaymentGate | None = None, clock: Callable[[], datetime] = utcnow):
        self._payments = payment_gate or PaymentGate()
        self._clock = clock

    def start_review(self, request: Request, staff_id: str) -> TransitionEvent:
        target = self._target(request, START_REVIEW)
        now = self._clock()
        request.tracking.processed_at = now
        request.tracking.processed_by = staff_id
        return self._commit(request, target, staff_id, now)

    def approve(self, request: Request, staff_id: str) -> TransitionEvent:
        target = self._target(request, APPROVE)
        if not self._payments.is_settled(request):
            raise PaymentNotCompleted(request.payment.status)
        now = self._clock()
        request.tracking.completed_at = now
        request.tracking.decided_by = staff_id
        return self._commit(request, target, staff_id, now)

    def reject(self, request: Request, staff_id: str, reason: str) -> TransitionEvent:
        target = self._target(request, REJECT)
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required", field="rejection_reason")
        now = self._clock()
        request.tracking.rejected_at = now
        request.tracking.rejection_reason = reason.strip()
        request.tracking.decided_by = staff_id
        return self._commit(request, target, staff_id, now, reason=reason.strip())

    # ─── internals ──────────────────────────────────────────

    @staticmethod
    def _target(request: Request, action: str) -> RequestStatus:
        target = TRANSITIONS.get((request.status, action))
        if target is None:
            raise InvalidTransition(request.status, action)
        return target

    @staticmethod
    def _commit(
        request: Request,
        target: RequestStatus,
        actor: str,
        at: datetime,
        reason: str | None = None,
    ) -> TransitionEvent:
        event = TransitionEvent(
            from_status=request.status,
            to_status=target,
            actor=actor,
            occurred_at=at,
            reason=reason,
        )
        request.status = target
        request.events.append(event)
        logger.info(f"{request.reference}: {event.from_status.value} -> {target.value} by {actor}")
        return event
