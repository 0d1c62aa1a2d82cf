"""Resume structure preferences: section plan and contact fields."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SectionKind(str, Enum):
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    SKILL = "skill"
    EDUCATION = "education"
    LIBRARY = "library"  # any library-entry category ("project", "award", ...)


_KIND_ALIASES = {
    "summary": SectionKind.SUMMARY,
    "experience": SectionKind.EXPERIENCE,
    "skill": SectionKind.SKILL,
    "skills": SectionKind.SKILL,
    "education": SectionKind.EDUCATION,
}

DEFAULT_CONTACT_FIELDS = ["email", "phone", "location", "linkedin", "portfolio", "github"]


class ResumeSection(BaseModel):
    type: str
    label: str

    @property
    def kind(self) -> SectionKind:
        return _KIND_ALIASES.get(self.type.strip().lower(), SectionKind.LIBRARY)


class ResumeStructure(BaseModel):
    contact_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CONTACT_FIELDS), alias="contactFields"
    )
    sections: list[ResumeSection]
    include_role_summaries: bool = Field(default=False, alias="includeRoleSummaries")

    model_config = {"populate_by_name": True}


class StructureResolution(BaseModel):
    structure: ResumeStructure
    confirmed: bool  # False until the user saves a structure of their own
