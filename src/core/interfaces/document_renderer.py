"""
Contract: Document Renderer

Composes a single-page, fixed-layout legal document from a request's
subject data, writes it to durable storage and returns a provenance
descriptor. Composition and drawing are separate: a template produces
a PageLayout (pure data), a renderer draws and stores it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from src.core.entities.request import Request
from src.core.interfaces.storage_service import StorageRef


class RenderingFamily(str, Enum):
    """Closed set of layout families. UNSUPPORTED is the explicit no-match."""
    BIRTH = "birth"
    DEATH = "death"
    MARRIAGE = "marriage"
    UNSUPPORTED = "unsupported"


# ─── Layout primitives (top-left origin, points) ───────────

@dataclass(frozen=True)
class TextItem:
    x: float
    y: float
    text: str
    font: str = "Helvetica"
    size: float = 11
    align: str = "left"       # "left", "center", "right"
    width: float = 0.0        # box width used by center/right alignment
    color: str = "#000000"


@dataclass(frozen=True)
class LineItem:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "#000000"
    width: float = 1.0


@dataclass(frozen=True)
class CircleItem:
    x: float
    y: float
    radius: float
    color: str = "#000000"
    fill: bool = False


@dataclass(frozen=True)
class RectItem:
    x: float
    y: float
    width: float
    height: float
    color: str = "#000000"


@dataclass
class PageLayout:
    """Everything drawn on the page, in drawing order."""
    width: float
    height: float
    items: list = field(default_factory=list)

    @property
    def texts(self) -> list[TextItem]:
        return [i for i in self.items if isinstance(i, TextItem)]

    def plain_text(self) -> str:
        return "\n".join(t.text for t in self.texts)


# ─── Render inputs / outputs ───────────────────────────────

@dataclass
class IssuingAuthority:
    """Jurisdiction and officiant texts printed in header and footer."""
    country: str
    district: str
    commune: str
    centre: str
    officer_name: str
    officer_title: str


@dataclass
class RenderContext:
    reference: str
    subject_data: dict
    required_fields: list[str]
    authority: IssuingAuthority
    issued_on: date


@dataclass
class RenderedDocument:
    url: str
    file_name: str
    generated_at: datetime
    generated_by: str
    storage_ref: StorageRef
    layout: PageLayout


class IDocumentTemplate(ABC):
    """
    Port: Document Template

    One implementation per rendering family. `compose` must be
    deterministic: identical context → identical layout.
    """

    family: RenderingFamily
    # Fields the layout cannot be printed without, whatever the catalog says.
    REQUIRED_FIELDS: frozenset[str] = frozenset()

    def missing_fields(self, subject_data: dict, extra_required=()) -> list[str]:
        """Required fields absent or blank in the subject data."""
        data = subject_data or {}
        required = set(self.REQUIRED_FIELDS) | set(extra_required)
        return sorted(f for f in required if not str(data.get(f) or "").strip())

    def unprintable_fields(self, subject_data: dict) -> dict[str, str]:
        """Field name → characters the layout font has no glyph for."""
        return {}

    @abstractmethod
    def compose(self, context: RenderContext) -> PageLayout:
        """
        Builds the page layout.

        Raises:
            RenderingInvariantViolation: a required field is missing.
        """
        ...


class IDocumentRenderer(ABC):
    """Port: Document Renderer"""

    @abstractmethod
    def render(
        self,
        request: Request,
        template: IDocumentTemplate,
        required_fields: list[str],
        generated_by: str,
    ) -> RenderedDocument:
        """
        Renders the request with the given template and stores the artifact.

        Returns after the write is confirmed.

        Raises:
            RenderingInvariantViolation: a required field is missing.
            StorageWriteFailed: the sink rejected or timed out.
        """
        ...
