"""Unit tests for the registry templates (composition only, no PDF)."""

from dataclasses import replace
from datetime import date

import pytest

from src.core.errors import RenderingInvariantViolation
from src.core.interfaces.document_renderer import RenderContext, TextItem
from src.infrastructure.rendering.layout import MARGIN_X, RIGHT_COLUMN_X, text_width, wrap_text
from src.infrastructure.rendering.templates.base import FieldResolver, Gender
from src.infrastructure.rendering.templates.birth_extract import BirthExtractTemplate
from src.infrastructure.rendering.templates.death_certificate import DeathCertificateTemplate
from tests.helpers.subjects import BIRTH_SUBJECT, DEATH_SUBJECT


def make_context(authority, subject, required=()) -> RenderContext:
    return RenderContext(
        reference="REQ-2025-001",
        subject_data=dict(subject),
        required_fields=list(required),
        authority=authority,
        issued_on=date(2025, 3, 14),
    )


class TestFieldResolver:

    @pytest.fixture
    def fields(self) -> FieldResolver:
        return FieldResolver(
            {"name": "Awa", "blank": "  ", "gender": "f", "born": "2025-03-01", "at": "11:58"},
            required={"name", "blank"},
            defaults={"place": "lieu non précisé", "odd": "Néant"},
            reference="REQ-2025-001",
        )

    def test_present_value(self, fields) -> None:
        assert fields.resolve("name") == "Awa"

    def test_default_for_optional(self, fields) -> None:
        assert fields.resolve("place") == "lieu non précisé"

    def test_blank_required_raises(self, fields) -> None:
        with pytest.raises(RenderingInvariantViolation) as exc:
            fields.resolve("blank")
        assert exc.value.field_name == "blank"

    def test_date_and_time_in_words(self, fields) -> None:
        assert fields.resolve_date("born") == "1er mars 2025"
        assert fields.resolve_time("at") == "onze heures cinquante-huit minutes"

    def test_missing_date_falls_back_to_default(self, fields) -> None:
        assert fields.resolve_date("odd") == "Néant"

    def test_gender(self, fields) -> None:
        assert fields.gender("gender") is Gender.FEMALE

    def test_invalid_gender_raises(self, fields) -> None:
        with pytest.raises(RenderingInvariantViolation):
            fields.gender("name")


class TestBirthExtract:

    @pytest.fixture
    def template(self) -> BirthExtractTemplate:
        return BirthExtractTemplate()

    def test_female_wording(self, template, authority) -> None:
        text = template.compose(make_context(authority, BIRTH_SUBJECT)).plain_text()
        assert "née Koné Awa" in text
        assert "fille de Koné Ibrahim" in text
        assert "onze heures cinquante-huit minutes" in text
        assert "10 janvier 2025" in text

    def test_male_wording(self, template, authority) -> None:
        subject = {**BIRTH_SUBJECT, "childFirstName": "Moussa", "childGender": "M"}
        text = template.compose(make_context(authority, subject)).plain_text()
        assert "est né Koné Moussa" in text
        assert "fils de" in text
        assert "est née" not in text

    def test_defaults_fill_optional_fields(self, template, authority) -> None:
        subject = {"childLastName": "Koné", "childFirstName": "Awa", "childGender": "F"}
        text = template.compose(make_context(authority, subject)).plain_text()
        assert "maternité non précisée ./." in text
        assert "Pour l'année 2025" in text

    def test_header_and_footer(self, template, authority) -> None:
        layout = template.compose(make_context(authority, BIRTH_SUBJECT))
        text = layout.plain_text()
        assert "EXTRAIT" in text
        assert "COMMUNE D'ABOBO" in text
        assert "OUATTARA SOULEYMANE" in text
        assert "Délivré à ABOBO, le 14/03/2025" in text
        assert layout.texts[-1].text == "REQ-2025-001"

    def test_missing_required_raises(self, template, authority) -> None:
        subject = {**BIRTH_SUBJECT, "childLastName": ""}
        with pytest.raises(RenderingInvariantViolation):
            template.compose(make_context(authority, subject))

    def test_catalog_required_fields_enforced(self, template, authority) -> None:
        subject = {k: v for k, v in BIRTH_SUBJECT.items() if k != "childBirthPlace"}
        with pytest.raises(RenderingInvariantViolation) as exc:
            template.compose(make_context(authority, subject, required=["childBirthPlace"]))
        assert exc.value.field_name == "childBirthPlace"

    def test_deterministic(self, template, authority) -> None:
        """Same input, same items at the same coordinates."""
        first = template.compose(make_context(authority, BIRTH_SUBJECT))
        second = template.compose(make_context(authority, BIRTH_SUBJECT))
        assert first == second

    def test_static_positions_independent_of_data(self, template, authority) -> None:
        other = {**BIRTH_SUBJECT, "childLastName": "Bamba", "childBirthPlace": "Yopougon"}
        a = template.compose(make_context(authority, BIRTH_SUBJECT)).texts
        b = template.compose(make_context(authority, other)).texts
        assert [(t.x, t.y) for t in a] == [(t.x, t.y) for t in b]

    def test_commune_override(self, template, authority) -> None:
        context = make_context(replace(authority, commune="Yopougon"), BIRTH_SUBJECT)
        assert "COMMUNE D'YOPOUGON" in template.compose(context).plain_text()

    def test_missing_fields_checks_gender(self, template) -> None:
        assert template.missing_fields({**BIRTH_SUBJECT, "childGender": "X"}) == ["childGender"]
        assert template.missing_fields(BIRTH_SUBJECT) == []
        assert template.missing_fields({}) == ["childFirstName", "childGender", "childLastName"]

    def test_unprintable_fields(self, template) -> None:
        subject = {**BIRTH_SUBJECT, "childFirstName": "Nguyễn Ŋgolo", "childBirthPlace": "Sébé"}
        assert template.unprintable_fields(subject) == {"childFirstName": "ễŊ"}
        assert template.unprintable_fields(BIRTH_SUBJECT) == {}

    def test_items_within_page(self, template, authority) -> None:
        layout = template.compose(make_context(authority, BIRTH_SUBJECT))
        for item in layout.texts:
            assert isinstance(item, TextItem)
            assert 0 <= item.y <= layout.height

    def test_long_parent_lines_wrap_inside_margin(self, template, authority) -> None:
        subject = {
            **BIRTH_SUBJECT,
            "fatherFullName": "Kouadio Konan Jean-Baptiste Emmanuel",
            "fatherNationality": "Ivoirienne",
            "fatherAddress": "Yopougon Niangon Sud, cité SICOGI, ilot 27 lot 1452",
        }
        layout = template.compose(make_context(authority, subject))
        body = [t for t in layout.texts if t.x == RIGHT_COLUMN_X]

        for item in body:
            assert item.x + text_width(item.text, item.font, item.size) <= layout.width - MARGIN_X
        joined = " ".join(t.text for t in body)
        assert "fille de Kouadio Konan Jean-Baptiste Emmanuel (Nat: Ivoirienne) ./." in joined
        assert "ilot 27 lot 1452 ./." in joined

        ys = [t.y for t in body]
        assert ys == sorted(ys) and len(set(ys)) == len(ys)

    def test_wrapping_pushes_mentions_down(self, template, authority) -> None:
        def mentions_y(subject):
            layout = template.compose(make_context(authority, subject))
            return next(t.y for t in layout.texts if t.text.startswith("MENTIONS"))

        long_address = {**BIRTH_SUBJECT, "fatherAddress": "Yopougon Niangon Sud, cité SICOGI, ilot 27 lot 1452"}
        assert mentions_y(long_address) > mentions_y(BIRTH_SUBJECT)


class TestWrapText:

    def test_short_line_untouched(self) -> None:
        assert wrap_text("à Abobo ./.", "Helvetica", 11, 245) == ["à Abobo ./."]

    def test_breaks_between_words(self) -> None:
        lines = wrap_text("domicilié Yopougon Niangon Sud, cité SICOGI, ilot 27 lot 1452 ./.", "Helvetica", 11, 245)
        assert len(lines) == 2
        assert " ".join(lines) == "domicilié Yopougon Niangon Sud, cité SICOGI, ilot 27 lot 1452 ./."
        assert all(text_width(line, "Helvetica", 11) <= 245 for line in lines)

    def test_overlong_word_is_split(self) -> None:
        word = "Ouattara" * 10
        lines = wrap_text(word, "Helvetica", 11, 100)
        assert "".join(lines) == word
        assert all(text_width(line, "Helvetica", 11) <= 100 for line in lines)


class TestDeathCertificate:

    def test_wording(self, authority) -> None:
        text = DeathCertificateTemplate().compose(make_context(authority, DEATH_SUBJECT)).plain_text()
        assert "ACTE DE DECES" in text
        assert "est décédé Yao Kouassi" in text
        assert "Le 2 décembre 2024 ./." in text
        assert "six heures trente minutes" in text

    def test_female_wording(self, authority) -> None:
        subject = {**DEATH_SUBJECT, "deceasedFirstName": "Adjoua", "deceasedGender": "F"}
        text = DeathCertificateTemplate().compose(make_context(authority, subject)).plain_text()
        assert "est décédée Yao Adjoua" in text
        assert "fille de" in text

    def test_death_date_required(self, authority) -> None:
        subject = {k: v for k, v in DEATH_SUBJECT.items() if k != "deathDate"}
        with pytest.raises(RenderingInvariantViolation):
            DeathCertificateTemplate().compose(make_context(authority, subject))
