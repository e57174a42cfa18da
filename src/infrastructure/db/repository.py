"""
Request Repository — CRUD + listing/statistics.

Handles:
  - Storing new requests
  - Versioned updates (optimistic concurrency via version_id_col)
  - Listing/filtering requests
  - Aggregated statistics
"""

import logging

from sqlalchemy import desc, func, select
from sqlalchemy.orm.exc import StaleDataError

from src.core.entities.request import Request, RequestStatus
from src.core.errors import ConcurrentModification, RequestNotFound
from src.core.interfaces.request_repository import IRequestRepository
from src.infrastructure.db.database import Database, get_database
from src.infrastructure.db.models import RequestRecord

logger = logging.getLogger(__name__)


class SqlRequestRepository(IRequestRepository):
    """Repository for document requests."""

    def __init__(self, db: Database | None = None):
        self._db = db or get_database()

    def add(self, request: Request) -> Request:
        """Save a new request."""
        with self._db.session() as s:
            record = RequestRecord.from_entity(request)
            s.add(record)
            s.flush()
            request.version = record.version
            logger.info(f"Saved request {request.reference} [{request.status.value}]")
        return request

    def get(self, request_id: str) -> Request | None:
        with self._db.session() as s:
            record = s.get(RequestRecord, request_id)
            return record.to_entity() if record else None

    def get_by_reference(self, reference: str) -> Request | None:
        with self._db.session() as s:
            record = s.execute(
                select(RequestRecord).filter_by(reference=reference)
            ).scalar_one_or_none()
            return record.to_entity() if record else None

    def update(self, request: Request) -> Request:
        """
        Persist a modified request.

        The UPDATE is conditioned on the version the caller loaded;
        if someone else wrote in between, nothing is written.
        """
        try:
            with self._db.session() as s:
                record = s.get(RequestRecord, request.id)
                if record is None:
                    raise RequestNotFound(request.id)
                if record.version != request.version:
                    raise ConcurrentModification(request.id)
                record.apply(request)
                s.flush()
                request.version = record.version
        except StaleDataError:
            raise ConcurrentModification(request.id) from None
        logger.debug(f"Updated request {request.reference} -> v{request.version}")
        return request

    def list(
        self,
        status: RequestStatus | None = None,
        document_type_id: str | None = None,
        citizen_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, list[Request]]:
        """List requests with optional filtering, newest first."""
        with self._db.session() as s:
            query = s.query(RequestRecord)
            if status:
                query = query.filter_by(status=RequestStatus(status).value)
            if document_type_id:
                query = query.filter_by(document_type_id=document_type_id)
            if citizen_id:
                query = query.filter_by(citizen_id=citizen_id)
            total = query.count()
            records = (
                query.order_by(desc(RequestRecord.submitted_at), desc(RequestRecord.reference))
                .offset(offset)
                .limit(limit)
                .all()
            )
            return total, [r.to_entity() for r in records]

    def count_by_status(self, citizen_id: str | None = None) -> dict[RequestStatus, int]:
        with self._db.session() as s:
            query = s.query(RequestRecord.status, func.count(RequestRecord.id))
            if citizen_id:
                query = query.filter(RequestRecord.citizen_id == citizen_id)
            rows = dict(query.group_by(RequestRecord.status).all())
            return {status: int(rows.get(status.value, 0)) for status in RequestStatus}

    def payment_totals(self, citizen_id: str | None = None) -> dict[str, int]:
        with self._db.session() as s:
            query = s.query(RequestRecord.payment_status, func.sum(RequestRecord.payment_amount))
            if citizen_id:
                query = query.filter(RequestRecord.citizen_id == citizen_id)
            rows = dict(query.group_by(RequestRecord.payment_status).all())
            return {k: int(v or 0) for k, v in rows.items()}
