"""
Template: Birth Extract

"Extrait du registre des actes de l'état civil" for a birth.
Left column: registry number and the child's name block.
Right column: the declarative birth sentences.
"""

from src.core.interfaces.document_renderer import RenderContext, RenderingFamily
from src.infrastructure.rendering.layout import (
    BOLD,
    LEFT_COLUMN_X,
    LINE_PITCH,
    RIGHT_COLUMN_X,
    LayoutBuilder,
)
from src.infrastructure.rendering.templates.base import (
    GENDER_PHRASES,
    NONE_TEXT,
    UNSPECIFIED,
    UNSPECIFIED_F,
    CivilRegistryTemplate,
    FieldResolver,
)

BODY_Y = 300


class BirthExtractTemplate(CivilRegistryTemplate):

    family = RenderingFamily.BIRTH

    REQUIRED_FIELDS = frozenset({"childLastName", "childFirstName", "childGender"})
    GENDER_FIELD = "childGender"

    FIELD_DEFAULTS = {
        "childBirthDate": "date non précisée",
        "childBirthTime": "une heure non précisée",
        "childBirthPlace": "lieu non précisé",
        "childMaternity": UNSPECIFIED_F,
        "fatherFullName": UNSPECIFIED,
        "fatherNationality": UNSPECIFIED_F,
        "fatherProfession": UNSPECIFIED_F,
        "fatherAddress": UNSPECIFIED,
        "motherFullName": UNSPECIFIED_F,
        "motherNationality": UNSPECIFIED_F,
        "motherProfession": UNSPECIFIED_F,
        "motherAddress": UNSPECIFIED,
        "marriageDate": NONE_TEXT,
        "marriagePlace": NONE_TEXT,
        "spouseName": NONE_TEXT,
        "divorceDate": NONE_TEXT,
        "deathDate": NONE_TEXT,
        "deathPlace": NONE_TEXT,
    }

    def _body(self, page: LayoutBuilder, context: RenderContext, fields: FieldResolver) -> float:
        phrases = GENDER_PHRASES[fields.gender("childGender")]
        last_name = fields.resolve("childLastName")
        first_names = fields.resolve("childFirstName")

        # ── left column ──
        page.text(LEFT_COLUMN_X, BODY_Y, self.registry_line(context, fields), size=11)
        self.name_block(page, BODY_Y + 20, "NAISSANCE DE", last_name, first_names)

        # ── right column ──
        sentences = [
            f"Le {fields.resolve_date('childBirthDate')} ./.",
            f"à {fields.resolve_time('childBirthTime')} ./.",
            f"{phrases['was_born']} {last_name} {first_names} ./.",
            f"à {fields.resolve('childBirthPlace')} ./.",
            f"maternité {fields.resolve('childMaternity')} ./.",
            f"{phrases['child_of']} {fields.resolve('fatherFullName')} "
            f"(Nat: {fields.resolve('fatherNationality')}) ./.",
            f"profession {fields.resolve('fatherProfession')} ./.",
            f"domicilié {fields.resolve('fatherAddress')} ./.",
            f"et de {fields.resolve('motherFullName')} "
            f"(Nat: {fields.resolve('motherNationality')}) ./.",
            f"profession {fields.resolve('motherProfession')} ./.",
            f"domiciliée {fields.resolve('motherAddress')} ./.",
        ]
        y = page.column(RIGHT_COLUMN_X, BODY_Y, sentences, size=11, pitch=LINE_PITCH)

        # ── mentions ──
        page.rule(y + 10)
        page.rule(y + 15)
        mentions_y = y + 30
        page.centered(mentions_y, "MENTIONS (éventuellement)", font=BOLD, size=12)
        mentions = [
            f"Marié le {fields.resolve_date('marriageDate')} à {fields.resolve('marriagePlace')}",
            f"avec {fields.resolve('spouseName')}",
            f"Mariage dissous par décision de divorce en date du {fields.resolve_date('divorceDate')}",
            f"Décédé le {fields.resolve_date('deathDate')} à {fields.resolve('deathPlace')}",
        ]
        end = page.column(LEFT_COLUMN_X, mentions_y + 20, mentions, size=11, pitch=LINE_PITCH)
        page.rule(end + 10)
        return end + 30
