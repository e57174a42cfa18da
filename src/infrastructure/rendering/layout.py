"""
Layout composition helpers.

Fixed-coordinate page building on an A4 sheet, top-left origin, in
points. Templates place items explicitly; the only derived positions
are column lines advanced by a fixed vertical pitch, wrapped at the
right margin.
"""

from reportlab.pdfbase.pdfmetrics import stringWidth

from src.core.interfaces.document_renderer import (
    CircleItem,
    LineItem,
    PageLayout,
    RectItem,
    TextItem,
)

A4_WIDTH = 595.28
A4_HEIGHT = 841.89

MARGIN_X = 50
LEFT_COLUMN_X = 50
RIGHT_COLUMN_X = 300
LINE_PITCH = 15

BLACK = "#000000"
BLUE = "#1e40af"

REGULAR = "Helvetica"
BOLD = "Helvetica-Bold"


# Standard Type 1 fonts are drawn with WinAnsiEncoding.
FONT_ENCODING = "cp1252"


def unprintable_chars(text: str) -> str:
    """Characters of `text` the standard fonts cannot draw, in order, deduplicated."""
    bad = []
    for ch in text:
        try:
            ch.encode(FONT_ENCODING)
        except UnicodeEncodeError:
            if ch not in bad:
                bad.append(ch)
    return "".join(bad)


def text_width(text: str, font: str = REGULAR, size: float = 11) -> float:
    return stringWidth(text, font, size)


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """
    Greedy word wrap against the font's metrics.

    A single word wider than `max_width` is broken between characters.
    """
    if text_width(text, font, size) <= max_width:
        return [text]

    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if text_width(candidate, font, size) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ""
        while len(word) > 1 and text_width(word, font, size) > max_width:
            cut = len(word) - 1
            while cut > 1 and text_width(word[:cut], font, size) > max_width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


class LayoutBuilder:
    """Accumulates drawing primitives in order."""

    def __init__(self, width: float = A4_WIDTH, height: float = A4_HEIGHT):
        self._layout = PageLayout(width=width, height=height)

    @property
    def width(self) -> float:
        return self._layout.width

    @property
    def height(self) -> float:
        return self._layout.height

    def text(self, x, y, text, font=REGULAR, size=11, align="left", width=0.0, color=BLACK):
        self._layout.items.append(
            TextItem(x=x, y=y, text=text, font=font, size=size, align=align, width=width, color=color)
        )
        return self

    def centered(self, y, text, font=REGULAR, size=12, color=BLACK):
        """Text centered on the full page width."""
        return self.text(0, y, text, font=font, size=size, align="center", width=self.width, color=color)

    def line(self, x1, y1, x2, y2, color=BLACK, width=1.0):
        self._layout.items.append(LineItem(x1=x1, y1=y1, x2=x2, y2=y2, color=color, width=width))
        return self

    def rule(self, y, color=BLACK):
        """Horizontal rule between the page margins."""
        return self.line(MARGIN_X, y, self.width - MARGIN_X, y, color=color)

    def circle(self, x, y, radius, color=BLACK, fill=False):
        self._layout.items.append(CircleItem(x=x, y=y, radius=radius, color=color, fill=fill))
        return self

    def rect(self, x, y, width, height, color=BLACK):
        self._layout.items.append(RectItem(x=x, y=y, width=width, height=height, color=color))
        return self

    def column(self, x, start_y, lines, font=REGULAR, size=11, pitch=LINE_PITCH) -> float:
        """
        Writes lines top to bottom, one pitch apart.

        A line wider than the space left before the right margin continues
        on the next pitch line.

        Returns:
            The y coordinate following the last line.
        """
        max_width = self.width - MARGIN_X - x
        y = start_y
        for line in lines:
            for part in wrap_text(line, font, size, max_width):
                self.text(x, y, part, font=font, size=size)
                y += pitch
        return y

    def build(self) -> PageLayout:
        return self._layout
