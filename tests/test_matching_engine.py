"""Tests for MatchingEngine ranking, filtering and gap detection."""

from __future__ import annotations

import json
from datetime import date

import pytest

from conftest import make_accomplishment
from resume_pipeline.errors import ScoringUnavailable, ValidationError
from resume_pipeline.matching.engine import (
    EMPTY_LIBRARY_MESSAGE,
    MAX_MATCHES,
    MatchingEngine,
    parse_profile,
)
from resume_pipeline.matching.scorers import ItemScore, Scorer, TagOverlapScorer
from resume_pipeline.models.library import LibraryEntry
from resume_pipeline.models.match import Gap
from resume_pipeline.models.profile import SuccessProfile


class FixedScorer(Scorer):
    """Returns preset scores in item order."""

    name = "fixed"

    def __init__(self, scores: list[int], matched: list[list[str]] | None = None):
        self.scores = scores
        self.matched = matched

    async def score(self, profile, items):
        matched = self.matched or [[] for _ in self.scores]
        return [ItemScore(score=s, matched_requirements=m) for s, m in zip(self.scores, matched)]


PYTHON_PROFILE = {
    "mustHave": ["Python"],
    "keyThemes": [{"theme": "Technical", "tags": ["python", "api"]}],
}


class TestParseProfile:
    def test_accepts_model(self, sample_profile):
        assert parse_profile(sample_profile) is sample_profile

    def test_accepts_dict_with_wire_names(self):
        profile = parse_profile(PYTHON_PROFILE)
        assert profile.must_have == ["Python"]
        assert profile.key_themes[0].tags == ["python", "api"]

    def test_accepts_json_string(self):
        profile = parse_profile(json.dumps(PYTHON_PROFILE))
        assert profile.key_themes[0].theme == "Technical"

    def test_invalid_json_string(self):
        with pytest.raises(ValidationError, match="profile"):
            parse_profile("{not json")

    def test_missing_must_have_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_profile({"keyThemes": []})
        assert exc_info.value.field == "profile.mustHave"

    def test_theme_without_tags_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_profile({"mustHave": [], "keyThemes": [{"theme": "Empty", "tags": []}]})
        assert exc_info.value.field.startswith("profile.keyThemes.0")

    def test_non_object_rejected(self):
        with pytest.raises(ValidationError):
            parse_profile(["Python"])


class TestMatchingEngine:
    async def test_python_gap_example(self):
        engine = MatchingEngine(TagOverlapScorer())
        item = make_accomplishment("a1", tags=["python", "leadership"], text="Built APIs")

        result = await engine.match(PYTHON_PROFILE, [item])

        assert [m.score for m in result.matches] == [50]
        assert result.gaps == [Gap(requirement="Python", best_match_score=50, best_match_text="Built APIs")]

    async def test_strong_match_is_not_a_gap(self):
        engine = MatchingEngine(TagOverlapScorer())
        item = make_accomplishment("a1", tags=["python", "api"])
        result = await engine.match(PYTHON_PROFILE, [item])
        assert result.matches[0].score == 100
        assert result.gaps == []

    async def test_unattributed_requirement_is_zero_gap(self):
        engine = MatchingEngine(FixedScorer([90]))
        profile = {"mustHave": ["Kubernetes"]}
        result = await engine.match(profile, [make_accomplishment(tags=["python"])])
        assert result.gaps == [Gap(requirement="Kubernetes", best_match_score=0, best_match_text=None)]

    async def test_gap_uses_best_attributable_item(self):
        engine = MatchingEngine(FixedScorer([45, 70], matched=[["Python"], ["Python backend"]]))
        items = [make_accomplishment("a", tags=[]), make_accomplishment("b", tags=[])]
        result = await engine.match({"mustHave": ["Python"]}, items)
        assert result.gaps == []

    async def test_gap_detection_sees_items_below_inclusion(self):
        engine = MatchingEngine(FixedScorer([30], matched=[["Python"]]))
        result = await engine.match({"mustHave": ["Python"]}, [make_accomplishment(tags=[])])
        assert result.matches == []
        assert result.gaps[0].best_match_score == 30

    async def test_duplicate_must_haves_give_one_gap(self):
        engine = MatchingEngine(FixedScorer([10]))
        result = await engine.match({"mustHave": ["Go", "Go"]}, [make_accomplishment(tags=[])])
        assert [g.requirement for g in result.gaps] == ["Go"]

    async def test_inclusion_boundary(self):
        engine = MatchingEngine(FixedScorer([40, 39]))
        items = [make_accomplishment("in"), make_accomplishment("out")]
        result = await engine.match({"mustHave": []}, items)
        assert [m.item_id for m in result.matches] == ["in"]

    async def test_cap_keeps_top_scores_in_stable_order(self):
        scores = [70 if i % 2 else 60 for i in range(20)]
        engine = MatchingEngine(FixedScorer(scores))
        items = [make_accomplishment(f"a{i}") for i in range(20)]

        result = await engine.match({"mustHave": []}, items)

        assert len(result.matches) == MAX_MATCHES == 15
        expected = [f"a{i}" for i in range(1, 20, 2)] + ["a0", "a2", "a4", "a6", "a8"]
        assert [m.item_id for m in result.matches] == expected

    async def test_ties_keep_caller_order_across_item_kinds(self):
        engine = MatchingEngine(FixedScorer([70, 70, 70]))
        items = [
            LibraryEntry(id="e1", type="project", title="pyfoo", tags=["x"]),
            make_accomplishment("a1"),
            LibraryEntry(id="e-untagged", type="award", title="Winner"),
            LibraryEntry(id="e2", type="project", title="barlib", tags=["y"]),
        ]

        result = await engine.match({"mustHave": []}, items)

        assert [m.item_id for m in result.matches] == ["e1", "a1", "e2"]
        assert result.summary.total_accomplishments == 1
        assert result.summary.total_library_entries == 2

    async def test_matching_is_idempotent(self, sample_profile):
        engine = MatchingEngine(TagOverlapScorer())
        items = [
            make_accomplishment("a1", tags=["python", "api"]),
            make_accomplishment("a2", tags=["docker"]),
            make_accomplishment("a3", tags=["django"]),
        ]
        first = await engine.match(sample_profile, items)
        second = await engine.match(sample_profile, items)
        assert first.model_dump_json() == second.model_dump_json()

    async def test_empty_library(self):
        engine = MatchingEngine(TagOverlapScorer())
        result = await engine.match({"mustHave": ["Python", "SQL"]}, [])
        assert result.matches == []
        assert [(g.requirement, g.best_match_score, g.best_match_text) for g in result.gaps] == [
            ("Python", 0, None),
            ("SQL", 0, None),
        ]
        assert result.message == EMPTY_LIBRARY_MESSAGE
        assert result.summary.gap_count == 2

    async def test_untagged_entries_are_not_matchable(self):
        engine = MatchingEngine(TagOverlapScorer())
        entry = LibraryEntry(id="e1", type="award", title="Hackathon winner")
        result = await engine.match({"mustHave": ["Python"]}, [entry])
        assert result.matches == []
        assert result.message == EMPTY_LIBRARY_MESSAGE

    async def test_library_entry_denormalized(self):
        engine = MatchingEngine(TagOverlapScorer())
        entry = LibraryEntry(
            id="e1", type="project", title="pyfoo", subtitle="Open source", date="2022",
            bullets=["Django plugin", "2k stars"], tags=["python"],
        )
        result = await engine.match({"mustHave": [], "keyThemes": [{"theme": "P", "tags": ["python"]}]}, [entry])

        match = result.matches[0]
        assert match.is_library_entry
        assert match.item_type == "project"
        assert match.text == "pyfoo at Open source"
        assert match.company == "Open source"
        assert match.start_date == "2022"
        assert match.description == "Django plugin 2k stars"

    async def test_accomplishment_dates_formatted(self):
        engine = MatchingEngine(FixedScorer([80]))
        item = make_accomplishment(start_date=date(2020, 3, 15), end_date=date(2022, 11, 1))
        result = await engine.match({"mustHave": []}, [item])
        assert (result.matches[0].start_date, result.matches[0].end_date) == ("03/2020", "11/2022")

    async def test_dict_items_are_validated(self):
        engine = MatchingEngine(FixedScorer([80, 80]))
        items = [
            {"id": "a1", "company": "Acme", "title": "Eng", "text": "Did it", "tags": ["x"]},
            {"id": "e1", "type": "project", "title": "pyfoo", "tags": ["x"]},
        ]
        result = await engine.match({"mustHave": []}, items)
        assert [m.is_library_entry for m in result.matches] == [False, True]

    async def test_malformed_item_rejected(self):
        engine = MatchingEngine(TagOverlapScorer())
        with pytest.raises(ValidationError) as exc_info:
            await engine.match({"mustHave": []}, [{"id": "a1", "text": "no company"}])
        assert exc_info.value.field.startswith("items.0")

    async def test_score_count_mismatch(self):
        engine = MatchingEngine(FixedScorer([80]))
        with pytest.raises(ScoringUnavailable):
            await engine.match({"mustHave": []}, [make_accomplishment("a"), make_accomplishment("b")])

    async def test_summary_counts(self):
        engine = MatchingEngine(FixedScorer([95, 65, 45, 10]))
        items = [make_accomplishment(f"a{i}") for i in range(3)]
        items.append(LibraryEntry(id="e1", type="project", title="p", tags=["x"]))
        result = await engine.match(SuccessProfile(must_have=[]), items)

        summary = result.summary
        assert summary.total_items == 4
        assert summary.total_accomplishments == 3
        assert summary.total_library_entries == 1
        assert (summary.strong_matches, summary.good_matches, summary.weak_matches) == (1, 1, 1)
        assert summary.library_entry_matches == 0
