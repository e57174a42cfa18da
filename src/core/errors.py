"""
Domain errors.

Every error raised by the core carries a category so callers can tell
"retry is useless" (validation, guard, not found) from "retry may help"
(resource). Invariant violations signal a bug upstream and are reported,
never defaulted.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    GUARD = "guard"
    NOT_FOUND = "not_found"
    RESOURCE = "resource"
    INVARIANT = "invariant"


class CivilDocError(Exception):
    """Base class for all errors raised by the request pipeline."""

    category: ErrorCategory = ErrorCategory.INVARIANT
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def retryable(self) -> bool:
        return self.category is ErrorCategory.RESOURCE

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "retryable": self.retryable,
            "details": {k: _jsonable(v) for k, v in self.details.items()},
        }


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


# ─── Validation ─────────────────────────────────────────────

class ValidationError(CivilDocError):
    category = ErrorCategory.VALIDATION
    code = "VALIDATION_ERROR"


class InvalidDeliveryMethod(ValidationError):
    code = "INVALID_DELIVERY_METHOD"

    def __init__(self, value):
        super().__init__(f"Invalid delivery method: {value!r}", value=value)


class DocumentTypeUnavailable(ValidationError):
    code = "DOCUMENT_TYPE_UNAVAILABLE"

    def __init__(self, document_type_id: str, reason: str = "not found"):
        super().__init__(
            f"Document type {document_type_id} is unavailable ({reason})",
            document_type_id=document_type_id,
            reason=reason,
        )


class UnsupportedDocumentType(ValidationError):
    code = "UNSUPPORTED_DOCUMENT_TYPE"

    def __init__(self, family, name: str):
        super().__init__(
            f"No renderer for document type {name!r} (family: {getattr(family, 'value', family)})",
            family=family,
            name=name,
        )
        self.family = family
        self.name = name


class PriceMismatch(ValidationError):
    code = "PRICE_MISMATCH"

    def __init__(self, expected: int, supplied: int):
        super().__init__(
            f"Supplied total {supplied} does not match computed price {expected}",
            expected=expected,
            supplied=supplied,
        )


class UnprintableField(ValidationError):
    code = "UNPRINTABLE_FIELD"

    def __init__(self, field_name: str, characters: str):
        super().__init__(
            f"Field {field_name} contains characters the document font cannot print: {characters}",
            field=field_name,
            characters=characters,
        )
        self.field_name = field_name


class MissingRequiredField(ValidationError):
    code = "MISSING_REQUIRED_FIELD"

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}", field=field_name)
        self.field_name = field_name


# ─── Guards ─────────────────────────────────────────────────

class GuardError(CivilDocError):
    category = ErrorCategory.GUARD
    code = "GUARD_FAILED"


class InvalidTransition(GuardError):
    code = "INVALID_TRANSITION"

    def __init__(self, current_status, action: str):
        status = getattr(current_status, "value", current_status)
        super().__init__(
            f"Cannot {action} a request in status {status!r}",
            current_status=status,
            action=action,
        )
        self.current_status = current_status
        self.action = action


class PaymentNotCompleted(GuardError):
    code = "PAYMENT_NOT_COMPLETED"

    def __init__(self, payment_status):
        status = getattr(payment_status, "value", payment_status)
        super().__init__(
            f"Payment must be paid before approval (current: {status!r})",
            payment_status=status,
        )


class AlreadyPaid(GuardError):
    code = "ALREADY_PAID"

    def __init__(self, request_id: str):
        super().__init__(f"Request {request_id} is already paid", request_id=request_id)


class PaymentConflict(GuardError):
    code = "PAYMENT_CONFLICT"

    def __init__(self, current_status, outcome, external_reference=None):
        details = {"current_status": current_status, "outcome": outcome}
        if external_reference is not None:
            details["external_reference"] = external_reference
        super().__init__(
            f"Payment outcome {getattr(outcome, 'value', outcome)!r} conflicts with "
            f"recorded status {getattr(current_status, 'value', current_status)!r}",
            **details,
        )


class RequestNotCompleted(GuardError):
    code = "REQUEST_NOT_COMPLETED"

    def __init__(self, current_status):
        status = getattr(current_status, "value", current_status)
        super().__init__(
            f"Documents can only be generated for completed requests (current: {status!r})",
            current_status=status,
        )


# ─── Not found ──────────────────────────────────────────────

class RequestNotFound(CivilDocError):
    category = ErrorCategory.NOT_FOUND
    code = "REQUEST_NOT_FOUND"

    def __init__(self, key: str):
        super().__init__(f"Request not found: {key}", key=key)


# ─── Resource ───────────────────────────────────────────────

class ResourceError(CivilDocError):
    category = ErrorCategory.RESOURCE
    code = "RESOURCE_ERROR"


class ReferenceAllocationFailed(ResourceError):
    code = "REFERENCE_ALLOCATION_FAILED"

    def __init__(self, year: int, attempts: int):
        super().__init__(
            f"Could not allocate a reference for {year} after {attempts} attempts",
            year=year,
            attempts=attempts,
        )


class StorageWriteFailed(ResourceError):
    code = "STORAGE_WRITE_FAILED"

    def __init__(self, key: str, reason: str):
        super().__init__(f"Storage write failed for {key}: {reason}", key=key, reason=reason)


class ConcurrentModification(ResourceError):
    code = "CONCURRENT_MODIFICATION"

    def __init__(self, request_id: str):
        super().__init__(
            f"Request {request_id} was modified concurrently", request_id=request_id
        )


# ─── Invariants ─────────────────────────────────────────────

class InvariantViolation(CivilDocError):
    category = ErrorCategory.INVARIANT
    code = "INVARIANT_VIOLATION"


class RenderingInvariantViolation(InvariantViolation):
    """A required field reached the renderer empty; upstream validation did not run."""

    code = "MISSING_REQUIRED_FIELD_AT_RENDER"

    def __init__(self, field_name: str, reference: str = ""):
        super().__init__(
            f"Required field {field_name!r} missing at render time (request {reference})",
            field=field_name,
            reference=reference,
        )
        self.field_name = field_name
