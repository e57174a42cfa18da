"""
Pricing Resolver.

Pure arithmetic over a catalog entry and a delivery method:
    total = base price + (surcharge if delivery else 0)
"""

from src.core.entities.document_type import DocumentType
from src.core.entities.request import DeliveryMethod
from src.core.errors import DocumentTypeUnavailable, InvalidDeliveryMethod, PriceMismatch

DEFAULT_DELIVERY_SURCHARGE = 2000


def coerce_delivery_method(value) -> DeliveryMethod:
    """Maps a raw value onto the closed set of delivery methods."""
    if isinstance(value, DeliveryMethod):
        return value
    try:
        return DeliveryMethod(str(value).strip().lower())
    except (ValueError, AttributeError):
        raise InvalidDeliveryMethod(value) from None


class PricingResolver:
    """Computes the amount due for a request."""

    def __init__(self, delivery_surcharge: int = DEFAULT_DELIVERY_SURCHARGE):
        if delivery_surcharge < 0:
            raise ValueError("delivery_surcharge must be >= 0")
        self._surcharge = delivery_surcharge

    def surcharge_for(self, delivery_method) -> int:
        method = coerce_delivery_method(delivery_method)
        return self._surcharge if method == DeliveryMethod.DELIVERY else 0

    def price(self, document_type: DocumentType, delivery_method) -> int:
        """
        Args:
            document_type: Catalog entry; must be active.
            delivery_method: One of download, pickup, delivery.

        Raises:
            InvalidDeliveryMethod: method outside the closed set.
            DocumentTypeUnavailable: entry not active.
        """
        surcharge = self.surcharge_for(delivery_method)
        if not document_type.is_active:
            raise DocumentTypeUnavailable(document_type.id, reason="inactive")
        return int(document_type.price) + surcharge

    @staticmethod
    def verify_client_total(expected: int, supplied: int | None) -> None:
        """The server total is authoritative; a differing client total is rejected."""
        if supplied is not None and int(supplied) != expected:
            raise PriceMismatch(expected=expected, supplied=int(supplied))
