"""Data models for the resume pipeline."""

from resume_pipeline.models.context import RequestContext
from resume_pipeline.models.library import (
    Accomplishment,
    ContactDetails,
    Education,
    LibraryEntry,
    Role,
    Skill,
)
from resume_pipeline.models.match import Gap, MatchResult, MatchSummary, RankedMatch
from resume_pipeline.models.profile import KeyTheme, SuccessProfile
from resume_pipeline.models.resume import (
    EducationEntry,
    ExperienceEntry,
    GeneratedResume,
    ResumeData,
)
from resume_pipeline.models.structure import (
    ResumeSection,
    ResumeStructure,
    SectionKind,
    StructureResolution,
)

__all__ = [
    "Accomplishment",
    "ContactDetails",
    "Education",
    "EducationEntry",
    "ExperienceEntry",
    "Gap",
    "GeneratedResume",
    "KeyTheme",
    "LibraryEntry",
    "MatchResult",
    "MatchSummary",
    "RankedMatch",
    "RequestContext",
    "ResumeData",
    "ResumeSection",
    "ResumeStructure",
    "Role",
    "SectionKind",
    "Skill",
    "StructureResolution",
    "SuccessProfile",
]
