"""
Payment Gate.

Holds and validates the payment sub-state of a request, independently
of the request lifecycle. It never changes `request.status`; the
lifecycle only reads `is_settled` as the approval guard.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from src.core.entities.request import (
    Payment,
    PaymentMethod,
    PaymentOutcome,
    PaymentStatus,
    Request,
    utcnow,
)
from src.core.errors import AlreadyPaid, InvalidTransition, PaymentConflict, ValidationError

logger = logging.getLogger(__name__)

_OUTCOME_TO_STATUS = {
    PaymentOutcome.SUCCEEDED: PaymentStatus.PAID,
    PaymentOutcome.FAILED: PaymentStatus.FAILED,
}


@dataclass(frozen=True)
class PaymentHandle:
    """Opaque handle an external processor confirms against."""
    request_id: str
    intent_id: str
    amount: int
    currency: str
    method: PaymentMethod


def coerce_outcome(value) -> PaymentOutcome:
    if isinstance(value, PaymentOutcome):
        return value
    try:
        return PaymentOutcome(str(value).strip().lower())
    except (ValueError, AttributeError):
        raise ValidationError(f"Unknown payment outcome: {value!r}", outcome=value) from None


class PaymentGate:
    """Tracks payment state and decides whether completion is permitted."""

    def __init__(self, currency: str = "XOF", clock: Callable[[], datetime] = utcnow):
        self._currency = currency
        self._clock = clock

    @staticmethod
    def is_settled(request: Request) -> bool:
        return request.payment.status == PaymentStatus.PAID

    def initialize(self, request: Request, method: PaymentMethod | str | None = None) -> PaymentHandle:
        """
        Opens a pending payment for the request price.

        Raises:
            AlreadyPaid: a completed payment already exists.
            InvalidTransition: the request is already closed.
        """
        if request.payment.status == PaymentStatus.PAID:
            raise AlreadyPaid(request.id)
        if request.status.is_terminal:
            raise InvalidTransition(request.status, "initialize payment for")

        if method is None:
            pay_method = request.payment.method
        else:
            try:
                pay_method = PaymentMethod(method)
            except ValueError:
                raise ValidationError(f"Unknown payment method: {method!r}", method=method) from None

        intent_id = uuid.uuid4().hex
        request.payment = Payment(
            amount=request.price,
            status=PaymentStatus.PENDING,
            method=pay_method,
            intent_id=intent_id,
        )
        logger.info(f"Payment initialized for {request.reference}: {request.price} {self._currency}")
        return PaymentHandle(
            request_id=request.id,
            intent_id=intent_id,
            amount=request.price,
            currency=self._currency,
            method=pay_method,
        )

    def confirm(self, request: Request, external_reference: str, outcome) -> bool:
        """
        Records the processor's outcome.

        A repeat of the recorded (reference, outcome) pair is a no-op. A
        failed payment may be settled by a new transaction; the same
        transaction never changes its outcome, and a paid payment accepts
        no other transaction.

        Returns:
            True if the payment changed, False for an idempotent repeat.

        Raises:
            PaymentConflict: outcome contradicts the recorded payment.
            ValidationError: unknown outcome or empty external reference.
        """
        result = coerce_outcome(outcome)
        if not external_reference or not str(external_reference).strip():
            raise ValidationError("External payment reference is required")

        reference = str(external_reference).strip()
        target = _OUTCOME_TO_STATUS[result]
        payment = request.payment
        current = payment.status

        if current != PaymentStatus.PENDING:
            same_transaction = reference == payment.transaction_id
            if same_transaction and current == target:
                logger.debug(f"Payment for {request.reference} already {current.value}, no-op")
                return False
            if same_transaction or current == PaymentStatus.PAID:
                logger.warning(
                    f"Payment conflict on {request.reference}: {reference} reported {result.value}, "
                    f"recorded {payment.transaction_id} {current.value}"
                )
                raise PaymentConflict(current, result, external_reference=reference)

        payment.status = target
        payment.transaction_id = reference
        payment.confirmed_at = self._clock()
        logger.info(f"Payment for {request.reference} confirmed as {target.value}")
        return True
