"""Pydantic models for the user's career library."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class Accomplishment(BaseModel):
    """A single tagged bullet of work history.

    Role fields are denormalized onto the accomplishment when it is fetched so
    matching never needs to look the owning role up again.
    """

    id: str
    role_id: str | None = None
    company: str
    title: str
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None  # None means current role
    text: str
    tags: list[str] = Field(default_factory=list)
    role_summary: str | None = None


class Role(BaseModel):
    id: str
    company: str
    title: str
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    summary: str | None = None
    accomplishments: list[Accomplishment] = Field(default_factory=list)  # most recent first


class LibraryEntry(BaseModel):
    """A non-role artifact: project, certification, award, publication..."""

    id: str
    type: str
    title: str
    subtitle: str | None = None
    date: str | None = None
    location: str | None = None
    url: str | None = None
    bullets: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @property
    def is_matchable(self) -> bool:
        return len(self.tags) > 0


class Skill(BaseModel):
    name: str
    category: str | None = None
    level: str | None = None


class Education(BaseModel):
    institution: str
    degree: str
    field: str | None = None
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    gpa: str | None = None
    honors: str | None = None
    activities: list[str] = Field(default_factory=list)


class ContactDetails(BaseModel):
    full_name: str
    email: str
    phone: str | None = None
    location: str | None = None
    linkedin_url: str | None = None
    portfolio_url: str | None = None
    github_url: str | None = None
    headline: str | None = None
