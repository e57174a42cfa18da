"""
Draws a PageLayout onto a PDF page with reportlab.

Layouts use a top-left origin; reportlab uses bottom-left, so every
y coordinate is flipped against the page height. Text y is the top
of the line box, as in the composition.
"""

from io import BytesIO

from reportlab.lib.colors import HexColor
from reportlab.pdfgen import canvas

from src.core.interfaces.document_renderer import (
    CircleItem,
    LineItem,
    PageLayout,
    RectItem,
    TextItem,
)


def draw_pdf(layout: PageLayout, title: str = "", author: str = "") -> bytes:
    """Renders the layout as a single-page PDF and returns its bytes."""
    buf = BytesIO()
    # invariant=1: no creation date / random ids in the output
    c = canvas.Canvas(buf, pagesize=(layout.width, layout.height), invariant=1)
    if title:
        c.setTitle(title)
    if author:
        c.setAuthor(author)

    height = layout.height
    for item in layout.items:
        if isinstance(item, TextItem):
            _draw_text(c, item, height)
        elif isinstance(item, LineItem):
            c.setStrokeColor(HexColor(item.color))
            c.setLineWidth(item.width)
            c.line(item.x1, height - item.y1, item.x2, height - item.y2)
        elif isinstance(item, CircleItem):
            color = HexColor(item.color)
            c.setStrokeColor(color)
            c.setFillColor(color)
            c.circle(item.x, height - item.y, item.radius, stroke=1, fill=1 if item.fill else 0)
        elif isinstance(item, RectItem):
            c.setStrokeColor(HexColor(item.color))
            c.rect(item.x, height - item.y - item.height, item.width, item.height, stroke=1, fill=0)
        else:
            raise TypeError(f"Unknown layout item: {type(item).__name__}")

    c.showPage()
    c.save()
    return buf.getvalue()


def _draw_text(c: canvas.Canvas, item: TextItem, page_height: float) -> None:
    c.setFillColor(HexColor(item.color))
    c.setFont(item.font, item.size)
    baseline = page_height - item.y - item.size
    if item.align == "center":
        c.drawCentredString(item.x + item.width / 2, baseline, item.text)
    elif item.align == "right":
        c.drawRightString(item.x + item.width, baseline, item.text)
    else:
        c.drawString(item.x, baseline, item.text)
