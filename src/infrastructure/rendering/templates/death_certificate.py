"""
Template: Death Certificate

Same two-column registry layout as the birth extract, with the
declarative sentences of a death record.
"""

from src.core.interfaces.document_renderer import RenderContext, RenderingFamily
from src.infrastructure.rendering.layout import LEFT_COLUMN_X, RIGHT_COLUMN_X, LayoutBuilder
from src.infrastructure.rendering.templates.base import (
    GENDER_PHRASES,
    UNSPECIFIED,
    UNSPECIFIED_F,
    CivilRegistryTemplate,
    FieldResolver,
)

BODY_Y = 300


class DeathCertificateTemplate(CivilRegistryTemplate):

    family = RenderingFamily.DEATH
    TITLE = "ACTE DE DECES"

    REQUIRED_FIELDS = frozenset({"deceasedLastName", "deceasedFirstName", "deceasedGender", "deathDate"})
    GENDER_FIELD = "deceasedGender"

    FIELD_DEFAULTS = {
        "deathTime": "une heure non précisée",
        "deathPlace": "lieu non précisé",
        "deathCause": UNSPECIFIED_F,
        "birthDate": "date non précisée",
        "birthPlace": "lieu non précisé",
        "fatherFullName": UNSPECIFIED,
        "motherFullName": UNSPECIFIED_F,
        "profession": UNSPECIFIED_F,
        "address": UNSPECIFIED,
        "declarantName": UNSPECIFIED,
    }

    def _body(self, page: LayoutBuilder, context: RenderContext, fields: FieldResolver) -> float:
        phrases = GENDER_PHRASES[fields.gender("deceasedGender")]
        last_name = fields.resolve("deceasedLastName")
        first_names = fields.resolve("deceasedFirstName")

        page.text(LEFT_COLUMN_X, BODY_Y, self.registry_line(context, fields), size=11)
        self.name_block(page, BODY_Y + 20, "DECES DE", last_name, first_names)

        sentences = [
            f"Le {fields.resolve_date('deathDate')} ./.",
            f"à {fields.resolve_time('deathTime')} ./.",
            f"{phrases['deceased']} {last_name} {first_names} ./.",
            f"à {fields.resolve('deathPlace')} ./.",
            f"cause : {fields.resolve('deathCause')} ./.",
            f"{phrases['born']} le {fields.resolve_date('birthDate')} ./.",
            f"à {fields.resolve('birthPlace')} ./.",
            f"{phrases['child_of']} {fields.resolve('fatherFullName')} ./.",
            f"et de {fields.resolve('motherFullName')} ./.",
            f"profession {fields.resolve('profession')} ./.",
            f"domicile {fields.resolve('address')} ./.",
            f"sur la déclaration de {fields.resolve('declarantName')} ./.",
        ]
        y = page.column(RIGHT_COLUMN_X, BODY_Y, sentences, size=11)

        page.rule(y + 10)
        page.rule(y + 15)
        return y + 35
