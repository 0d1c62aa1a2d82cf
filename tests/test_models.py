"""Tests for Pydantic data models."""

import pytest
from pydantic import ValidationError

from resume_pipeline.models.library import LibraryEntry
from resume_pipeline.models.match import RankedMatch
from resume_pipeline.models.profile import KeyTheme, SuccessProfile
from resume_pipeline.models.structure import ResumeSection, ResumeStructure, SectionKind


class TestSuccessProfile:
    def test_camel_case_input(self):
        profile = SuccessProfile.model_validate({
            "mustHave": ["Python"],
            "niceToHave": ["Go"],
            "keyThemes": [{"theme": "Backend", "tags": ["python"]}],
            "terminology": [{"theirTerm": "SRE", "yourTerm": "DevOps"}],
        })
        assert profile.must_have == ["Python"]
        assert profile.key_themes[0].tags == ["python"]
        assert profile.terminology[0].your_term == "DevOps"

    def test_must_have_required(self):
        with pytest.raises(ValidationError):
            SuccessProfile.model_validate({"keyThemes": []})

    def test_theme_needs_a_tag(self):
        with pytest.raises(ValidationError, match="at least one tag"):
            KeyTheme(theme="Backend", tags=["", "  "])

    def test_theme_tags_stripped(self):
        assert KeyTheme(theme="Backend", tags=[" python ", ""]).tags == ["python"]


class TestLibraryEntry:
    def test_untagged_entry_not_matchable(self):
        assert not LibraryEntry(id="e1", type="award", title="Winner").is_matchable
        assert LibraryEntry(id="e2", type="award", title="Winner", tags=["x"]).is_matchable


class TestRankedMatch:
    def test_dumps_camel_case(self):
        match = RankedMatch(item_id="a1", text="t", company="Acme", title="Eng", score=90)
        dumped = match.model_dump(by_alias=True)
        assert dumped["itemId"] == "a1"
        assert dumped["isLibraryEntry"] is False

    def test_score_bounded(self):
        with pytest.raises(ValidationError):
            RankedMatch(item_id="a1", text="t", company="Acme", title="Eng", score=101)


class TestResumeStructure:
    @pytest.mark.parametrize(
        ("type_", "kind"),
        [
            ("experience", SectionKind.EXPERIENCE),
            ("Skills", SectionKind.SKILL),
            (" summary ", SectionKind.SUMMARY),
            ("project", SectionKind.LIBRARY),
            ("certification", SectionKind.LIBRARY),
        ],
    )
    def test_section_kind(self, type_, kind):
        assert ResumeSection(type=type_, label="x").kind is kind

    def test_default_contact_fields(self):
        structure = ResumeStructure.model_validate({"sections": []})
        assert structure.contact_fields[0] == "email"
        assert structure.include_role_summaries is False
