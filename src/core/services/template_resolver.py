"""
Template Resolver.

Maps a human-entered or catalog document-type name onto exactly one
rendering family, then onto the template implementing it. The set of
families is closed: names that match nothing resolve to UNSUPPORTED.
"""

import logging
import re
import unicodedata
from typing import Mapping

from src.core.errors import UnsupportedDocumentType
from src.core.interfaces.document_renderer import IDocumentTemplate, RenderingFamily

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[^a-z0-9]+")

# Checked in order; the first family with a matching token wins.
FAMILY_KEYWORDS: tuple[tuple[RenderingFamily, frozenset[str]], ...] = (
    (RenderingFamily.BIRTH, frozenset({"birth", "born", "naissance", "nativity"})),
    (RenderingFamily.DEATH, frozenset({"death", "deces", "deceased", "obituary"})),
    (RenderingFamily.MARRIAGE, frozenset({"marriage", "mariage", "wedding"})),
)


def normalize_name(name: str) -> str:
    """'Extrait d’Acte de  Naissance' -> 'extrait_d_acte_de_naissance'"""
    decomposed = unicodedata.normalize("NFKD", name or "")
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _SEPARATORS.sub("_", stripped.lower()).strip("_")


class TemplateResolver:
    """Finite dispatch from document-type names to templates."""

    def __init__(self, templates: Mapping[RenderingFamily, IDocumentTemplate]):
        self._templates = dict(templates)

    @staticmethod
    def resolve(name: str) -> RenderingFamily:
        tokens = set(normalize_name(name).split("_"))
        for family, keywords in FAMILY_KEYWORDS:
            if tokens & keywords:
                return family
        return RenderingFamily.UNSUPPORTED

    def find_template(self, name: str) -> IDocumentTemplate | None:
        """Like resolve_template, but None instead of raising."""
        family = self.resolve(name)
        if family is RenderingFamily.UNSUPPORTED:
            return None
        return self._templates.get(family)

    def resolve_template(self, name: str) -> IDocumentTemplate:
        """
        Raises:
            UnsupportedDocumentType: unmatched name, or a recognized
                family that has no implemented template.
        """
        family = self.resolve(name)
        template = self._templates.get(family)
        if family is RenderingFamily.UNSUPPORTED or template is None:
            logger.warning(f"No template for document type {name!r} (family={family.value})")
            raise UnsupportedDocumentType(family, name)
        return template

    @property
    def implemented_families(self) -> list[RenderingFamily]:
        return [f for f in RenderingFamily if f in self._templates]
