"""Pydantic models for MatchingEngine output."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RankedMatch(BaseModel):
    item_id: str = Field(alias="itemId")
    text: str
    company: str
    title: str
    subtitle: str | None = None
    location: str | None = None
    start_date: str | None = Field(default=None, alias="startDate")  # MM/YYYY
    end_date: str | None = Field(default=None, alias="endDate")
    score: int = Field(ge=0, le=100)
    matched_requirements: list[str] = Field(default_factory=list, alias="matchedRequirements")
    is_library_entry: bool = Field(default=False, alias="isLibraryEntry")
    item_type: str | None = Field(default=None, alias="itemType")
    role_summary: str | None = Field(default=None, alias="roleSummary")
    description: str | None = None
    reasoning: str | None = None

    model_config = {"populate_by_name": True}


class Gap(BaseModel):
    requirement: str
    best_match_score: int = Field(default=0, alias="bestMatchScore")
    best_match_text: str | None = Field(default=None, alias="bestMatchText")

    model_config = {"populate_by_name": True}


class MatchSummary(BaseModel):
    total_items: int = Field(alias="totalItems")
    total_accomplishments: int = Field(default=0, alias="totalAccomplishments")
    total_library_entries: int = Field(default=0, alias="totalLibraryEntries")
    strong_matches: int = Field(alias="strongMatches")  # score >= 80
    good_matches: int = Field(alias="goodMatches")  # 60-79
    weak_matches: int = Field(default=0, alias="weakMatches")
    library_entry_matches: int = Field(default=0, alias="libraryEntryMatches")
    gap_count: int = Field(alias="gapCount")

    model_config = {"populate_by_name": True}


class MatchResult(BaseModel):
    matches: list[RankedMatch]
    gaps: list[Gap]
    summary: MatchSummary
    message: str | None = None
