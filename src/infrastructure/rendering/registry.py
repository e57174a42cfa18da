"""
Implemented rendering families.

MARRIAGE is recognized by the resolver but has no layout yet, so it
resolves to UnsupportedDocumentType.
"""

from src.core.interfaces.document_renderer import IDocumentTemplate, RenderingFamily
from src.infrastructure.rendering.templates.birth_extract import BirthExtractTemplate
from src.infrastructure.rendering.templates.death_certificate import DeathCertificateTemplate


def default_templates() -> dict[RenderingFamily, IDocumentTemplate]:
    return {
        RenderingFamily.BIRTH: BirthExtractTemplate(),
        RenderingFamily.DEATH: DeathCertificateTemplate(),
    }
