"""
Contract: Reference Allocator

Issues unique, human-readable, year-scoped request references
of the form REQ-<year>-<seq>.
"""

import re
from abc import ABC, abstractmethod

from src.core.errors import ValidationError

REFERENCE_PREFIX = "REQ"
_REFERENCE_RE = re.compile(r"^REQ-(\d{4})-(\d{3,})$")


def format_reference(year: int, seq: int) -> str:
    """REQ-2025-001, ..., REQ-2025-999, REQ-2025-1000."""
    return f"{REFERENCE_PREFIX}-{year}-{seq:03d}"


def parse_reference(reference: str) -> tuple[int, int]:
    match = _REFERENCE_RE.match(reference or "")
    if not match:
        raise ValidationError(f"Malformed reference: {reference!r}", reference=reference)
    return int(match.group(1)), int(match.group(2))


class IReferenceAllocator(ABC):
    """
    Port: Reference Allocator

    Allocation is a single atomic "read max for year, add one, persist"
    performed under a serialization guarantee shared by every service
    instance. Gaps are allowed, duplicates are not.
    """

    @abstractmethod
    def allocate(self, year: int | None = None) -> str:
        """
        Allocates the next reference for a calendar year.

        Args:
            year: Calendar year (defaults to the current UTC year).

        Returns:
            The formatted reference.

        Raises:
            ReferenceAllocationFailed: retries exhausted.
        """
        ...
