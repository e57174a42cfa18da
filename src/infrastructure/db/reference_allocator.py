"""
Adapter: SQL Reference Allocator

Year-scoped counter row incremented in its own transaction:

    UPDATE reference_counters SET last_value = last_value + 1 WHERE year = :y
    SELECT last_value ...                      -- same transaction
    COMMIT

The UPDATE takes the row lock, so concurrent allocators (threads or
service instances) serialize on it. The first allocation of a year
INSERTs the row; losing that race is a unique-constraint violation and
is retried, as is lock contention.
"""

import logging
import time
from datetime import datetime
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError

from src.core.entities.request import utcnow
from src.core.errors import ReferenceAllocationFailed, ValidationError
from src.core.interfaces.reference_allocator import (
    REFERENCE_PREFIX,
    IReferenceAllocator,
    format_reference,
    parse_reference,
)
from src.infrastructure.db.database import Database, get_database
from src.infrastructure.db.models import ReferenceCounter, RequestRecord

logger = logging.getLogger(__name__)


class SqlReferenceAllocator(IReferenceAllocator):
    """Transactional per-year counter with bounded retry."""

    def __init__(
        self,
        db: Database | None = None,
        max_attempts: int = 8,
        backoff_seconds: float = 0.01,
        backoff_max_seconds: float = 0.5,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = db or get_database()
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff_seconds
        self._backoff_max = backoff_max_seconds
        self._clock = clock

    def allocate(self, year: int | None = None) -> str:
        year = year or self._clock().year
        for attempt in range(1, self._max_attempts + 1):
            try:
                seq = self._next_value(year)
            except (IntegrityError, OperationalError) as e:
                logger.warning(
                    f"Reference allocation conflict for {year} "
                    f"(attempt {attempt}/{self._max_attempts}): {e.__class__.__name__}"
                )
                if attempt < self._max_attempts:
                    time.sleep(min(self._backoff * 2 ** (attempt - 1), self._backoff_max))
                continue
            reference = format_reference(year, seq)
            logger.info(f"Allocated reference {reference}")
            return reference

        raise ReferenceAllocationFailed(year, self._max_attempts)

    def _next_value(self, year: int) -> int:
        # The value is returned only after the session commits.
        with self._db.session() as s:
            result = s.execute(
                update(ReferenceCounter)
                .where(ReferenceCounter.year == year)
                .values(last_value=ReferenceCounter.last_value + 1)
            )
            if result.rowcount:
                return s.execute(
                    select(ReferenceCounter.last_value).where(ReferenceCounter.year == year)
                ).scalar_one()

            first = self._highest_existing(s, year) + 1
            s.add(ReferenceCounter(year=year, last_value=first))
            s.flush()
            return first

    @staticmethod
    def _highest_existing(session, year: int) -> int:
        """Highest sequence already used in `requests` (counter table created late)."""
        refs = session.execute(
            select(RequestRecord.reference).where(
                RequestRecord.reference.like(f"{REFERENCE_PREFIX}-{year}-%")
            )
        ).scalars()
        highest = 0
        for ref in refs:
            try:
                highest = max(highest, parse_reference(ref)[1])
            except ValidationError:
                continue
        return highest
