"""Generated resume records and the intermediate render-ready model."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class GeneratedResume(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    target_company: str
    target_role: str
    markdown: str
    docx_url: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class ExperienceEntry(BaseModel):
    company: str
    title: str = ""
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    summary: str | None = None
    bullets: list[str] = Field(default_factory=list)


class EducationEntry(BaseModel):
    school: str
    degree: str = ""
    year: str | None = None
    location: str | None = None


class ResumeData(BaseModel):
    """Structured form of a resume recovered from markup, ready to render."""

    name: str = ""
    email: str = ""
    phone: str | None = None
    location: str | None = None
    linkedin: str | None = None
    summary: str | None = None
    experience: list[ExperienceEntry] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    section_labels: dict[str, str] = Field(default_factory=dict)  # kind -> heading text
    section_order: list[str] = Field(default_factory=list)
