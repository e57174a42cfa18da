"""
FastAPI Application — Civil Document Requests.

Architecture:
  - PostgreSQL (prod) / SQLite (dev) for requests, catalog and counters
  - reportlab for registry documents, local disk or MinIO for artifacts
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes.requests import router as requests_router
from src.config.settings import get_settings
from src.core.errors import CivilDocError, ErrorCategory
from src.infrastructure.db.catalog import SqlDocumentTypeCatalog
from src.infrastructure.db.database import init_db
from src.infrastructure.db.seed import seed_document_types

settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.GUARD: 409,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.RESOURCE: 503,
    ErrorCategory.INVARIANT: 500,
}

app = FastAPI(
    title="Civil Document Requests",
    description="Civil-registry document requests: pricing, payment, review and PDF issuance.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Startup ──
@app.on_event("startup")
async def startup():
    """Initialize DB and the starter catalog."""
    db = init_db()
    seed_document_types(SqlDocumentTypeCatalog(db))
    logger.info("Civil document service started")


# ── Errors ──
@app.exception_handler(CivilDocError)
async def civil_doc_error_handler(request: Request, exc: CivilDocError):
    status_code = STATUS_BY_CATEGORY.get(exc.category, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc}")
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


app.include_router(requests_router, prefix="/api/v1", tags=["Requests"])


@app.get("/health")
async def health():
    return {"status": "ok", "env": settings.env}
