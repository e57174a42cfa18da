"""
Base template for civil-registry extracts.

Shared header (jurisdiction, title, emblem) and footer (certification,
issuance, officiant, signature placeholder). Subclasses compose the
two-column body.

Field values go through FieldResolver: every optional placeholder has
an enumerated default, required ones raise instead of being guessed.
"""

import logging
from enum import Enum
from typing import Mapping

from src.core.errors import RenderingInvariantViolation
from src.core.interfaces.document_renderer import (
    IDocumentTemplate,
    PageLayout,
    RenderContext,
)
from src.infrastructure.rendering.formatting import long_date, parse_date, short_date, time_in_words
from src.infrastructure.rendering.layout import (
    BLUE,
    BOLD,
    LEFT_COLUMN_X,
    REGULAR,
    LayoutBuilder,
    unprintable_chars,
)

logger = logging.getLogger(__name__)

NONE_TEXT = "Néant"
UNSPECIFIED = "non précisé"
UNSPECIFIED_F = "non précisée"


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"


# The only subject-data switch allowed in a layout.
GENDER_PHRASES: dict[Gender, dict[str, str]] = {
    Gender.MALE: {
        "born": "né",
        "was_born": "est né",
        "child_of": "fils de",
        "deceased": "est décédé",
    },
    Gender.FEMALE: {
        "born": "née",
        "was_born": "est née",
        "child_of": "fille de",
        "deceased": "est décédée",
    },
}


def _as_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


class FieldResolver:
    """Total resolution of template placeholders against subject data."""

    def __init__(
        self,
        data: Mapping,
        required: set[str],
        defaults: Mapping[str, str],
        reference: str = "",
    ):
        self._data = data or {}
        self._required = required
        self._defaults = defaults
        self._reference = reference

    def _missing(self, name: str) -> RenderingInvariantViolation:
        logger.error(f"Invariant violation: {name!r} missing at render time for {self._reference}")
        return RenderingInvariantViolation(name, self._reference)

    def resolve(self, name: str) -> str:
        text = _as_text(self._data.get(name))
        if text:
            return text
        if name in self._required:
            raise self._missing(name)
        return self._defaults[name]

    def resolve_date(self, name: str) -> str:
        raw = self._data.get(name)
        parsed = parse_date(raw)
        if parsed is not None:
            return long_date(parsed)
        # unparseable dates are printed as entered
        return self.resolve(name)

    def resolve_time(self, name: str) -> str:
        words = time_in_words(_as_text(self._data.get(name)))
        if words is not None:
            return words
        return self.resolve(name)

    def gender(self, name: str) -> Gender:
        raw = _as_text(self._data.get(name)).upper()[:1]
        if raw not in ("M", "F"):
            raise self._missing(name)
        return Gender(raw)


class CivilRegistryTemplate(IDocumentTemplate):
    """Header/footer shared by every registry extract."""

    TITLE: str = "EXTRAIT"
    SUBTITLE: str = "Du registre des actes de l'Etat Civil"
    GENDER_FIELD: str = ""
    FIELD_DEFAULTS: Mapping[str, str] = {}

    def missing_fields(self, subject_data: Mapping, extra_required=()) -> list[str]:
        """Blank required fields, plus the gender field when it is not M/F."""
        missing = set(super().missing_fields(subject_data, extra_required))
        if self.GENDER_FIELD:
            gender = _as_text((subject_data or {}).get(self.GENDER_FIELD)).upper()[:1]
            if gender not in ("M", "F"):
                missing.add(self.GENDER_FIELD)
        return sorted(missing)

    def unprintable_fields(self, subject_data: Mapping) -> dict[str, str]:
        found = {}
        for name, value in (subject_data or {}).items():
            bad = unprintable_chars(_as_text(value))
            if bad:
                found[name] = bad
        return found

    def defaults(self, context: RenderContext) -> dict[str, str]:
        """Placeholder defaults; the registry year falls back to the issuance year."""
        return {
            "registryYear": str(context.issued_on.year),
            "registryNumber": "01",
            **self.FIELD_DEFAULTS,
        }

    def fields(self, context: RenderContext) -> FieldResolver:
        return FieldResolver(
            context.subject_data,
            required=set(self.REQUIRED_FIELDS) | set(context.required_fields),
            defaults=self.defaults(context),
            reference=context.reference,
        )

    def compose(self, context: RenderContext) -> PageLayout:
        fields = self.fields(context)
        page = LayoutBuilder()
        self._header(page, context, fields)
        body_end = self._body(page, context, fields)
        self._footer(page, context, body_end)
        return page.build()

    def _body(self, page: LayoutBuilder, context: RenderContext, fields: FieldResolver) -> float:
        raise NotImplementedError

    # ─── header ─────────────────────────────────────────────

    def _header(self, page: LayoutBuilder, context: RenderContext, fields: FieldResolver):
        authority = context.authority
        page.text(50, 50, authority.district, size=12, align="center", width=150)
        page.line(50, 70, 200, 70)
        page.text(50, 80, f"COMMUNE D'{authority.commune.upper()}", size=12, align="center", width=150)
        page.text(345, 50, authority.country, size=12, align="right", width=200)

        page.centered(100, self.TITLE, font=BOLD, size=16)
        page.centered(120, self.SUBTITLE, size=12)
        page.centered(140, f"Pour l'année {fields.resolve('registryYear')}", size=12)

        # emblem
        center_x = page.width / 2
        page.circle(center_x, 180, 30, color=BLUE)
        page.circle(center_x, 180, 8, color=BLUE, fill=True)

        page.centered(220, "ETAT CIVIL", font=BOLD, size=14)
        page.rule(240)
        page.centered(250, authority.centre, size=12)
        page.rule(280)

    def registry_line(self, context: RenderContext, fields: FieldResolver) -> str:
        return (
            f"N° {fields.resolve('registryNumber')} DU "
            f"{short_date(context.issued_on)} DU REGISTRE"
        )

    def name_block(self, page: LayoutBuilder, y: float, heading: str, last_name: str, first_names: str):
        """Left column: registry heading and primary name block."""
        page.text(LEFT_COLUMN_X, y, heading, font=BOLD, size=12)
        page.text(LEFT_COLUMN_X, y + 20, last_name.upper(), font=BOLD, size=14)
        page.text(LEFT_COLUMN_X, y + 40, f"{first_names}./", font=BOLD, size=12)

    # ─── footer ─────────────────────────────────────────────

    def _footer(self, page: LayoutBuilder, context: RenderContext, y: float):
        authority = context.authority
        page.text(50, y, "Certifié le présent extrait conforme aux indications portées au registre", size=11)

        issued = f"Délivré à {authority.commune.upper()}, le {short_date(context.issued_on)}"
        page.text(345, y + 25, issued, size=11)
        page.text(345, y + 45, "L'Officier de l'Etat civil,", size=11)

        # signature placeholder
        page.line(345, y + 80, 500, y + 80)
        page.text(345, y + 85, "(Signature)", size=9, align="center", width=155)

        # seal
        seal_x, seal_y = 110, y + 90
        page.circle(seal_x, seal_y, 40, color=BLUE)
        seal_lines = [
            authority.country,
            authority.district,
            f"COMMUNE D'{authority.commune.upper()}",
        ]
        for i, line in enumerate(seal_lines):
            page.text(seal_x - 40, seal_y - 15 + i * 10, line, size=5, align="center", width=80, color=BLUE)

        # officiant box
        box_y = y + 110
        page.rect(345, box_y, 200, 60, color=BLUE)
        page.text(350, box_y + 5, authority.officer_name, font=BOLD, size=10)
        page.text(350, box_y + 22, authority.officer_title, font=REGULAR, size=8)
        page.text(350, box_y + 37, f"COMMUNE D'{authority.commune.upper()}", font=REGULAR, size=8)

        page.text(page.width - 200, page.height - 30, context.reference, size=8, align="right", width=150)
