"""Resolve which sections, in which order, a generated resume contains."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.errors import ValidationError
from resume_pipeline.models.structure import (
    DEFAULT_CONTACT_FIELDS,
    ResumeSection,
    ResumeStructure,
    StructureResolution,
)

DEFAULT_SECTIONS = [
    ("summary", "Summary"),
    ("experience", "Professional Experience"),
    ("skill", "Skills"),
    ("education", "Education"),
]


def default_structure() -> ResumeStructure:
    return ResumeStructure(
        contact_fields=list(DEFAULT_CONTACT_FIELDS),
        sections=[ResumeSection(type=t, label=label) for t, label in DEFAULT_SECTIONS],
        include_role_summaries=False,
    )


class ResumeStructureResolver:
    def resolve(self, saved: ResumeStructure | dict | None) -> StructureResolution:
        """Return the saved structure verbatim, or the unconfirmed default plan.

        Library-entry sections (e.g. ``{"type": "project", "label": "Projects"}``)
        are kept as-is; they are matched against library entries at synthesis.
        """
        if saved is None:
            return StructureResolution(structure=default_structure(), confirmed=False)
        if isinstance(saved, dict):
            try:
                saved = ResumeStructure.model_validate(saved)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, "structure") from e
        return StructureResolution(structure=saved, confirmed=True)
