"""Pydantic models for the success profile consumed by matching."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class KeyTheme(BaseModel):
    theme: str = Field(min_length=1)
    tags: list[str]

    @field_validator("tags")
    @classmethod
    def _tags_not_empty(cls, tags: list[str]) -> list[str]:
        cleaned = [t.strip() for t in tags if t and t.strip()]
        if not cleaned:
            raise ValueError("theme must have at least one tag")
        return cleaned


class TermMapping(BaseModel):
    their_term: str = Field(alias="theirTerm")
    your_term: str = Field(alias="yourTerm")

    model_config = {"populate_by_name": True}


class SuccessProfile(BaseModel):
    """What the target role requires, grouped into tagged themes."""

    company: str = ""
    role: str = ""
    must_have: list[str] = Field(alias="mustHave")
    nice_to_have: list[str] = Field(default_factory=list, alias="niceToHave")
    key_themes: list[KeyTheme] = Field(default_factory=list, alias="keyThemes")
    terminology: list[TermMapping] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    company_context: str | None = Field(default=None, alias="companyContext")

    model_config = {"populate_by_name": True}


class ParsedRequirement(BaseModel):
    """One requirement pulled out of a job description."""

    text: str = Field(min_length=1)
    type: Literal["must_have", "nice_to_have"]
    tags: list[str] = Field(default_factory=list)
