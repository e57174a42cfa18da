"""
Adapter: PDF Document Renderer

compose (template) → draw (reportlab) → upload (storage) → descriptor.

Each invocation writes a new, timestamped file; nothing is overwritten
in storage and the request status is never touched here.
"""

import logging
import time
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable

from src.core.entities.request import Request, utcnow
from src.core.interfaces.document_renderer import (
    IDocumentRenderer,
    IDocumentTemplate,
    IssuingAuthority,
    RenderContext,
    RenderedDocument,
)
from src.core.interfaces.storage_service import IStorageService
from src.infrastructure.rendering.pdf_canvas import draw_pdf

logger = logging.getLogger(__name__)


def artifact_file_name(family: str, reference: str, at: datetime) -> str:
    """birth_REQ-2025-001_20250314T101500123456Z_1a2b3c.pdf"""
    return f"{family}_{reference}_{at.strftime('%Y%m%dT%H%M%S%fZ')}_{uuid.uuid4().hex[:6]}.pdf"


class PdfDocumentRenderer(IDocumentRenderer):
    """Renders registry documents as single-page PDFs."""

    def __init__(
        self,
        storage: IStorageService,
        authority: IssuingAuthority,
        clock: Callable[[], datetime] = utcnow,
        url_expiry_seconds: int = 3600,
    ):
        self._storage = storage
        self._authority = authority
        self._clock = clock
        self._url_expiry = url_expiry_seconds

    def build_context(self, request: Request, required_fields: list[str], issued_at: datetime) -> RenderContext:
        authority = self._authority
        if request.commune:
            authority = replace(authority, commune=request.commune)
        return RenderContext(
            reference=request.reference,
            subject_data=dict(request.subject_data or {}),
            required_fields=list(required_fields or []),
            authority=authority,
            issued_on=issued_at.date(),
        )

    def render(
        self,
        request: Request,
        template: IDocumentTemplate,
        required_fields: list[str],
        generated_by: str,
    ) -> RenderedDocument:
        t0 = time.perf_counter()
        generated_at = self._clock()
        context = self.build_context(request, required_fields, generated_at)

        # ── 1. Composition ──────────────────────────────────
        layout = template.compose(context)

        # ── 2. Drawing ──────────────────────────────────────
        pdf_bytes = draw_pdf(layout, title=f"{template.family.value} {request.reference}", author=generated_by)

        # ── 3. Storage (returns once durable) ───────────────
        file_name = artifact_file_name(template.family.value, request.reference, generated_at)
        key = f"documents/{request.reference}/{file_name}"
        ref = self._storage.upload(pdf_bytes, key, content_type="application/pdf")
        url = self._storage.get_url(key, expires_seconds=self._url_expiry)

        latency_ms = round((time.perf_counter() - t0) * 1000, 2)
        logger.info(f"Rendered {file_name} ({ref.size_bytes} bytes) for {request.reference} in {latency_ms}ms")

        return RenderedDocument(
            url=url,
            file_name=file_name,
            generated_at=generated_at,
            generated_by=generated_by,
            storage_ref=ref,
            layout=layout,
        )
