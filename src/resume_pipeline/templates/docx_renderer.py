"""DOCX output renderer: styled one-column resume from ResumeData."""

from __future__ import annotations

import io
import logging
import os
import re
import tempfile
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT
from docx.shared import Inches, Pt

from resume_pipeline.errors import RenderFailure, StorageWriteError
from resume_pipeline.models.resume import EducationEntry, ExperienceEntry, ResumeData

logger = logging.getLogger(__name__)

FONT_NAME = "Cambria"
MARGIN = Inches(0.75)
BULLET_INDENT = Inches(0.25)
NAME_SIZE = Pt(14)
CONTACT_SIZE = Pt(10)
HEADING_SIZE = Pt(11)
BODY_SIZE = Pt(10)

DEFAULT_ORDER = ["summary", "experience", "skill", "education"]
DEFAULT_LABELS = {
    "summary": "Summary",
    "experience": "Professional Experience",
    "skill": "Skills",
    "education": "Education",
}

_BOLD_SPAN = re.compile(r"\*\*(.+?)\*\*")


def split_bold_segments(text: str) -> list[tuple[str, bool]]:
    """Split ``**bold**`` spans out of text as (segment, is_bold) pairs.

    Unmatched ``**`` markers are left in place as literal text.
    """
    parts = _BOLD_SPAN.split(text)
    # re.split with one group alternates plain, bold, plain, ...
    return [(part, i % 2 == 1) for i, part in enumerate(parts) if part]


class DocxRenderer:
    def render(self, data: ResumeData):
        """Build a python-docx Document. Raises RenderFailure if the resume has no name."""
        if not data.name.strip():
            raise RenderFailure("resume has no name")
        try:
            doc = Document()
            self._setup(doc)
            self._header(doc, data)
            for kind in data.section_order or DEFAULT_ORDER:
                label = data.section_labels.get(kind, DEFAULT_LABELS.get(kind, kind))
                self._section(doc, kind, label, data)
        except (KeyError, ValueError, AttributeError) as e:
            raise RenderFailure(f"could not build document: {e}") from e
        return doc

    def to_bytes(self, data: ResumeData) -> bytes:
        doc = self.render(data)
        buf = io.BytesIO()
        try:
            doc.save(buf)
        except (OSError, ValueError) as e:
            raise RenderFailure(f"could not encode document: {e}") from e
        return buf.getvalue()

    def write(self, data: ResumeData, path: str | Path) -> Path:
        """Render and write to ``path`` via a temp file, so readers never see a partial file."""
        content = self.to_bytes(data)
        path = Path(path)
        tmp: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # one temp file per writer; concurrent renders of the same name never share it
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f"{path.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp = Path(f.name)
                f.write(content)
            os.replace(tmp, path)
        except OSError as e:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise StorageWriteError(f"could not write {path}: {e}") from e
        logger.info("Wrote %s (%d bytes)", path, len(content))
        return path

    # ------------------------------------------------------------------

    @staticmethod
    def _setup(doc) -> None:
        font = doc.styles["Normal"].font
        font.name = FONT_NAME
        font.size = BODY_SIZE
        for section in doc.sections:
            section.top_margin = section.bottom_margin = MARGIN
            section.left_margin = section.right_margin = MARGIN

    @staticmethod
    def _header(doc, data: ResumeData) -> None:
        p = doc.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = p.add_run(data.name.strip())
        run.bold = True
        run.font.size = NAME_SIZE

        contact = [v for v in (data.email, data.phone, data.location, data.linkedin) if v]
        if contact:
            p = doc.add_paragraph()
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER
            p.add_run(" | ".join(contact)).font.size = CONTACT_SIZE

    def _section(self, doc, kind: str, label: str, data: ResumeData) -> None:
        if kind == "summary":
            if data.summary:
                self._heading(doc, label)
                doc.add_paragraph(data.summary)
        elif kind == "experience":
            if data.experience:
                self._heading(doc, label)
                for entry in data.experience:
                    self._experience(doc, entry)
        elif kind == "skill":
            if data.skills:
                self._heading(doc, label)
                doc.add_paragraph(", ".join(data.skills))
        elif kind == "education":
            if data.education:
                self._heading(doc, label)
                for entry in data.education:
                    self._education(doc, entry)

    @staticmethod
    def _heading(doc, label: str) -> None:
        p = doc.add_paragraph()
        p.paragraph_format.space_before = Pt(10)
        p.paragraph_format.space_after = Pt(4)
        run = p.add_run(label.upper())
        run.bold = True
        run.font.size = HEADING_SIZE

    def _experience(self, doc, entry: ExperienceEntry) -> None:
        p = doc.add_paragraph()
        p.add_run(entry.company).bold = True
        if entry.location:
            p.add_run(f" | {entry.location}")

        dates = _date_range(entry)
        if entry.title or dates:
            p = doc.add_paragraph()
            section = doc.sections[-1]
            usable = section.page_width - section.left_margin - section.right_margin
            p.paragraph_format.tab_stops.add_tab_stop(usable, WD_TAB_ALIGNMENT.RIGHT)
            if entry.title:
                p.add_run(entry.title).italic = True
            if dates:
                p.add_run(f"\t{dates}")

        if entry.summary:
            p = doc.add_paragraph()
            p.add_run(entry.summary).italic = True

        for bullet in entry.bullets:
            p = doc.add_paragraph(style="List Bullet")
            p.paragraph_format.left_indent = BULLET_INDENT
            for segment, bold in split_bold_segments(bullet):
                p.add_run(segment).bold = bold or None

    @staticmethod
    def _education(doc, entry: EducationEntry) -> None:
        p = doc.add_paragraph()
        p.add_run(entry.school).bold = True
        if entry.location:
            p.add_run(f" | {entry.location}")
        line = ", ".join(v for v in (entry.degree, entry.year) if v)
        if line:
            p = doc.add_paragraph()
            p.add_run(line).italic = True


def _date_range(entry: ExperienceEntry) -> str:
    if entry.start_date:
        return f"{entry.start_date} - {entry.end_date or 'Present'}"
    return entry.end_date or ""
