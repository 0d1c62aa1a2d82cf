"""Synthesize the canonical resume markup from matches and library records.

The output is the restricted Markdown dialect that ``parsers.markup_parser``
reads back:

    # Name
    email | phone | location | linkedin | portfolio | github
    ## Section label
    **Company** | Location
    Title, MM/YYYY - MM/YYYY
    _role summary_
    - bullet

Only fields present in the input are written; nothing is invented.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.errors import ValidationError
from resume_pipeline.models.library import ContactDetails, Education, Skill
from resume_pipeline.models.match import RankedMatch
from resume_pipeline.models.structure import ResumeSection, ResumeStructure, SectionKind

logger = logging.getLogger(__name__)

DEFAULT_SKILL_CATEGORY = "Other"
PRESENT = "Present"

# contact field name -> ContactDetails attribute, in output order
_CONTACT_ATTRS = [
    ("email", "email"),
    ("phone", "phone"),
    ("location", "location"),
    ("linkedin", "linkedin_url"),
    ("portfolio", "portfolio_url"),
    ("github", "github_url"),
]


class MarkdownSynthesizer:
    def __init__(self):
        self._renderers: dict[SectionKind, Callable[..., list[str]]] = {
            SectionKind.SUMMARY: self._summary,
            SectionKind.EXPERIENCE: self._experience,
            SectionKind.SKILL: self._skills,
            SectionKind.EDUCATION: self._education,
        }

    def synthesize(
        self,
        matches: Sequence[RankedMatch | dict],
        skills: Sequence[Skill],
        education: Sequence[Education],
        contact: ContactDetails | dict,
        structure: ResumeStructure,
        summary_text: str | None = None,
    ) -> str:
        """Render one markup document, section by section in structure order.

        Raises:
            ValidationError: if the matches or contact details are malformed.
        """
        matches = _validate_matches(matches)
        contact = _validate_contact(contact)

        blocks: list[str] = [f"# {_one_line(contact.full_name)}"]
        contact_line = self.contact_line(contact, structure.contact_fields)
        if contact_line:
            blocks.append(contact_line)

        context = _SectionInput(
            matches=matches,
            skills=list(skills),
            education=list(education),
            summary_text=_one_line(summary_text or ""),
            include_role_summaries=structure.include_role_summaries,
        )
        for section in structure.sections:
            render = self._renderers.get(section.kind, self._library_entries)
            body = render(section, context)
            if not body:
                logger.debug("Skipping empty section %r", section.label)
                continue
            blocks.append(f"## {section.label}")
            blocks.extend(body)

        return "\n\n".join(blocks) + "\n"

    @staticmethod
    def contact_line(contact: ContactDetails, fields: Sequence[str]) -> str:
        wanted = {f.lower() for f in fields}
        parts = []
        for name, attr in _CONTACT_ATTRS:
            value = getattr(contact, attr)
            if name in wanted and value and value.strip():
                parts.append(_one_line(value))
        return " | ".join(parts)

    # -- section renderers: each returns a list of blank-line separated blocks --

    @staticmethod
    def _summary(section: ResumeSection, ctx: _SectionInput) -> list[str]:
        return [ctx.summary_text] if ctx.summary_text else []

    @staticmethod
    def _experience(section: ResumeSection, ctx: _SectionInput) -> list[str]:
        groups: dict[tuple[str, str], list[RankedMatch]] = {}
        for match in ctx.matches:
            if match.is_library_entry:
                continue
            groups.setdefault((match.company, match.title), []).append(match)

        blocks = []
        for (company, title), role_matches in groups.items():
            first = role_matches[0]
            header = f"**{_one_line(company)}**" + (f" | {_one_line(first.location)}" if first.location else "")
            title_line = _one_line(title)
            if first.start_date:
                title_line += f", {first.start_date} - {first.end_date or PRESENT}"
            lines = [header, title_line]
            if ctx.include_role_summaries and first.role_summary and first.role_summary.strip():
                lines.append(f"_{_one_line(first.role_summary)}_")
            blocks.append("\n".join(lines))
            blocks.append("\n".join(f"- {_one_line(m.text)}" for m in role_matches))
        return blocks

    @staticmethod
    def _skills(section: ResumeSection, ctx: _SectionInput) -> list[str]:
        by_category: dict[str, list[str]] = {}
        for skill in ctx.skills:
            category = (skill.category or "").strip() or DEFAULT_SKILL_CATEGORY
            by_category.setdefault(_one_line(category), []).append(_one_line(skill.name))
        if not by_category:
            return []
        return ["\n".join(f"**{cat}:** {', '.join(names)}" for cat, names in by_category.items())]

    @staticmethod
    def _education(section: ResumeSection, ctx: _SectionInput) -> list[str]:
        blocks = []
        for edu in ctx.education:
            header = f"**{_one_line(edu.institution)}**" + (f" | {_one_line(edu.location)}" if edu.location else "")
            degree = _one_line(edu.degree)
            if edu.field:
                degree += f" in {_one_line(edu.field)}"
            if edu.end_date:
                degree += f", {edu.end_date.year}"
            if edu.gpa:
                degree += f" | GPA: {_one_line(edu.gpa)}"
            if edu.honors:
                degree += f" | {_one_line(edu.honors)}"
            blocks.append(f"{header}\n{degree}")
        return blocks

    @staticmethod
    def _library_entries(section: ResumeSection, ctx: _SectionInput) -> list[str]:
        blocks = []
        for match in ctx.matches:
            if not match.is_library_entry or match.item_type != section.type:
                continue
            title_line = f"**{_one_line(match.title)}**"
            if match.subtitle:
                title_line += f" | {_one_line(match.subtitle)}"
            if match.start_date:
                dates = match.start_date
                if match.end_date:
                    dates += f" - {match.end_date}"
                title_line += f" | {dates}"
            block = title_line
            if match.description:
                block += f"\n\n- {_one_line(match.description)}"
            blocks.append(block)
        return blocks


@dataclass
class _SectionInput:
    matches: list[RankedMatch]
    skills: list[Skill]
    education: list[Education]
    summary_text: str
    include_role_summaries: bool


def _validate_matches(matches: Sequence[RankedMatch | dict]) -> list[RankedMatch]:
    validated = []
    for index, match in enumerate(matches):
        if isinstance(match, dict):
            try:
                match = RankedMatch.model_validate(match)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, f"matches.{index}") from e
        validated.append(match)
    return validated


def _validate_contact(contact: ContactDetails | dict) -> ContactDetails:
    if isinstance(contact, dict):
        try:
            contact = ContactDetails.model_validate(contact)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, "contact") from e
    if not contact.full_name.strip():
        raise ValidationError("contact.full_name", "name is required")
    return contact


def _one_line(text: str) -> str:
    """Collapse runs of whitespace, newlines included, so a field stays on its markup line."""
    return " ".join(text.split())
