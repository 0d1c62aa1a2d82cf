"""Parse generated resume markup back into the render-ready ResumeData model.

A line-oriented finite-state parser. Headings (``## ...``) switch the state;
every other line goes to the handler for the current state. Lines a handler
does not recognize are dropped, so a parse never fails on content.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from resume_pipeline.errors import ValidationError
from resume_pipeline.models.resume import EducationEntry, ExperienceEntry, ResumeData
from resume_pipeline.models.structure import SectionKind

logger = logging.getLogger(__name__)


class ParserState(str, Enum):
    HEADER = "header"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    SKILLS = "skills"
    EDUCATION = "education"
    OTHER = "other"


# heading substring -> state, checked in order
_HEADING_STATES = [
    ("experience", ParserState.EXPERIENCE),
    ("skill", ParserState.SKILLS),
    ("education", ParserState.EDUCATION),
    ("summary", ParserState.SUMMARY),
]

_STATE_KINDS = {
    ParserState.SUMMARY: SectionKind.SUMMARY,
    ParserState.EXPERIENCE: SectionKind.EXPERIENCE,
    ParserState.SKILLS: SectionKind.SKILL,
    ParserState.EDUCATION: SectionKind.EDUCATION,
}

_BOLD_LEAD = re.compile(r"^\*\*(.+?)\*\*\s*(?:\|\s*(.*))?$")
_DATE_RANGE = re.compile(r",\s*(\d{2}/\d{4})\s*-\s*(\d{2}/\d{4}|Present)", re.IGNORECASE)
_CATEGORY_PREFIX = re.compile(r"^\*\*[^*]+?:\*\*\s*")
_TRAILING_YEAR = re.compile(r",\s*(\d{4})\s*(?=\||$)")
_ANY_YEAR = re.compile(r",?\s*\b(\d{4})\b")
_PHONE = re.compile(r"\(\d{3}\)")
_LOCATION = re.compile(r"[A-Z][a-z]+,\s*[A-Z]{2}\b")


@dataclass
class _Cursor:
    data: ResumeData = field(default_factory=ResumeData)
    state: ParserState = ParserState.HEADER
    experience: ExperienceEntry | None = None
    awaiting_title: bool = False
    education: EducationEntry | None = None

    def flush_experience(self) -> None:
        if self.experience is not None:
            self.data.experience.append(self.experience)
        self.experience = None
        self.awaiting_title = False


class MarkupParser:
    def __init__(self):
        self._handlers = {
            ParserState.HEADER: self._header_line,
            ParserState.SUMMARY: self._summary_line,
            ParserState.EXPERIENCE: self._experience_line,
            ParserState.SKILLS: self._skills_line,
            ParserState.EDUCATION: self._education_line,
            ParserState.OTHER: self._other_line,
        }

    def parse(self, markup: str) -> ResumeData:
        if not isinstance(markup, str):
            raise ValidationError("markup", f"expected text, got {type(markup).__name__}")

        cursor = _Cursor()
        for raw in markup.splitlines():
            line = raw.strip()
            if not line:
                continue
            if line.startswith("## "):
                self._enter_section(cursor, line[3:].strip())
            elif line.startswith("# "):
                cursor.data.name = line[2:].strip()
            elif self._is_contact_line(cursor, line):
                self._parse_contact(cursor.data, line)
            else:
                self._handlers[cursor.state](cursor, line)

        cursor.flush_experience()
        logger.debug(
            "Parsed markup: %d experience, %d skills, %d education",
            len(cursor.data.experience), len(cursor.data.skills), len(cursor.data.education),
        )
        return cursor.data

    # -- transitions --

    @staticmethod
    def _enter_section(cursor: _Cursor, heading: str) -> None:
        cursor.flush_experience()
        cursor.education = None
        lowered = heading.lower()
        cursor.state = next(
            (state for key, state in _HEADING_STATES if key in lowered), ParserState.OTHER
        )
        kind = _STATE_KINDS.get(cursor.state)
        if kind is not None:
            cursor.data.section_labels[kind.value] = heading
            if kind.value not in cursor.data.section_order:
                cursor.data.section_order.append(kind.value)

    @staticmethod
    def _is_contact_line(cursor: _Cursor, line: str) -> bool:
        if "@" not in line or line.startswith(("- ", "* ")):
            return False
        if cursor.state is ParserState.HEADER:
            return True
        return "|" in line and not cursor.data.email

    @staticmethod
    def _parse_contact(data: ResumeData, line: str) -> None:
        # unrecognized parts (portfolio, github, ...) are dropped
        for part in (p.strip() for p in line.split("|")):
            if not part:
                continue
            if "@" in part:
                data.email = part
            elif _PHONE.search(part):
                data.phone = part
            elif "linkedin" in part:
                data.linkedin = part
            elif _LOCATION.search(part):
                data.location = part

    # -- state handlers --

    @staticmethod
    def _header_line(cursor: _Cursor, line: str) -> None:
        pass

    @staticmethod
    def _other_line(cursor: _Cursor, line: str) -> None:
        pass

    @staticmethod
    def _summary_line(cursor: _Cursor, line: str) -> None:
        data = cursor.data
        data.summary = f"{data.summary} {line}" if data.summary else line

    @staticmethod
    def _experience_line(cursor: _Cursor, line: str) -> None:
        if line.startswith(("- ", "* ")):
            if cursor.experience is not None:
                cursor.experience.bullets.append(line[2:].strip())
            return

        lead = _BOLD_LEAD.match(line)
        if lead:
            cursor.flush_experience()
            cursor.experience = ExperienceEntry(
                company=lead.group(1).strip(),
                location=(lead.group(2) or "").strip() or None,
            )
            cursor.awaiting_title = True
            return

        entry = cursor.experience
        if entry is None:
            return
        if cursor.awaiting_title:
            dates = _DATE_RANGE.search(line)
            if dates:
                entry.title = line[: dates.start()].strip()
                entry.start_date = dates.group(1)
                end = dates.group(2)
                entry.end_date = "Present" if end.lower() == "present" else end
            else:
                entry.title = line
            cursor.awaiting_title = False
        elif len(line) > 2 and line.startswith("_") and line.endswith("_"):
            entry.summary = line[1:-1].strip()

    @staticmethod
    def _skills_line(cursor: _Cursor, line: str) -> None:
        if line.startswith(("- ", "* ")):
            line = line[2:]
        line = _CATEGORY_PREFIX.sub("", line.strip())
        cursor.data.skills.extend(s.strip() for s in line.split(",") if s.strip())

    @staticmethod
    def _education_line(cursor: _Cursor, line: str) -> None:
        lead = _BOLD_LEAD.match(line)
        if lead:
            cursor.education = EducationEntry(
                school=lead.group(1).strip(),
                location=(lead.group(2) or "").strip() or None,
            )
            cursor.data.education.append(cursor.education)
            return

        entry = cursor.education
        if entry is None or entry.degree:
            return
        year = _TRAILING_YEAR.search(line)
        if year:
            entry.degree = line[: year.start()].strip()
            entry.year = year.group(1)
            return
        loose = _ANY_YEAR.search(line)
        if loose:
            entry.degree = line[: loose.start()].split("|")[0].strip()
            entry.year = loose.group(1)
        else:
            entry.degree = line.split("|")[0].strip()
