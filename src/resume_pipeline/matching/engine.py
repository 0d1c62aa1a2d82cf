"""MatchingEngine: rank library items against a success profile and find gaps."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.errors import ScoringUnavailable, ValidationError
from resume_pipeline.matching.scorers import ItemScore, MatchItem, Scorer
from resume_pipeline.models.library import Accomplishment, LibraryEntry
from resume_pipeline.models.match import Gap, MatchResult, MatchSummary, RankedMatch
from resume_pipeline.models.profile import SuccessProfile

logger = logging.getLogger(__name__)

MIN_INCLUDE_SCORE = 40
GAP_THRESHOLD = 60
MAX_MATCHES = 15
STRONG_MATCH = 80

EMPTY_LIBRARY_MESSAGE = (
    "No accomplishments or library entries in library. Please add your resume first."
)


def parse_profile(profile: SuccessProfile | dict | str) -> SuccessProfile:
    """Coerce a profile given as a model, dict, or JSON string.

    Raises:
        ValidationError: naming the first offending field.
    """
    if isinstance(profile, SuccessProfile):
        return profile
    if isinstance(profile, str):
        try:
            profile = json.loads(profile)
        except json.JSONDecodeError as e:
            raise ValidationError("profile", f"not valid JSON ({e.msg})") from e
    if not isinstance(profile, dict):
        raise ValidationError("profile", f"expected an object, got {type(profile).__name__}")
    try:
        return SuccessProfile.model_validate(profile)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, "profile") from e


def requirement_overlaps(requirement: str, matched: str) -> bool:
    a, b = requirement.strip().lower(), matched.strip().lower()
    return bool(a and b) and (a in b or b in a)


class MatchingEngine:
    """Scores items with a pluggable Scorer, then ranks, filters, and detects gaps."""

    def __init__(self, scorer: Scorer):
        self.scorer = scorer

    async def match(
        self,
        profile: SuccessProfile | dict | str,
        items: Sequence[MatchItem],
    ) -> MatchResult:
        """Rank items against the profile.

        An empty (or untagged-only) library is a successful result in which
        every must-have requirement becomes a zero-score gap.
        """
        profile = parse_profile(profile)
        items = self._validate_items(items)

        # filtered in place so ties keep the caller's order
        eligible: list[MatchItem] = [
            i for i in items if isinstance(i, Accomplishment) or i.is_matchable
        ]
        total_entries = sum(1 for i in eligible if isinstance(i, LibraryEntry))
        total_accomplishments = len(eligible) - total_entries

        if not eligible:
            gaps = [Gap(requirement=r, best_match_score=0, best_match_text=None)
                    for r in _unique(profile.must_have)]
            return MatchResult(
                matches=[],
                gaps=gaps,
                summary=_summarize([], gaps, 0, 0),
                message=EMPTY_LIBRARY_MESSAGE,
            )

        logger.debug("Scoring %d items with %s", len(eligible), self.scorer.name)
        scores = await self.scorer.score(profile, eligible)
        if len(scores) != len(eligible):
            raise ScoringUnavailable(
                f"scorer {self.scorer.name} returned {len(scores)} scores for {len(eligible)} items"
            )

        # sorted() is stable: equal scores keep input order
        ranked = sorted(
            ((_to_ranked(item, s), item) for item, s in zip(eligible, scores)),
            key=lambda pair: -pair[0].score,
        )

        gaps = self.find_gaps(profile, ranked)
        matches = [m for m, _ in ranked if m.score >= MIN_INCLUDE_SCORE][:MAX_MATCHES]

        logger.debug("%d matches, %d gaps", len(matches), len(gaps))
        return MatchResult(
            matches=matches,
            gaps=gaps,
            summary=_summarize(matches, gaps, total_accomplishments, total_entries),
        )

    @staticmethod
    def find_gaps(
        profile: SuccessProfile, ranked: list[tuple[RankedMatch, MatchItem]]
    ) -> list[Gap]:
        """Must-haves whose best attributable item scores below GAP_THRESHOLD.

        An item is attributable to a requirement when one of its matched theme
        names or one of its own tags overlaps the requirement text. ``ranked``
        must already be sorted by score descending.
        """
        gaps: list[Gap] = []
        for requirement in _unique(profile.must_have):
            best = next(
                (
                    m for m, item in ranked
                    if any(
                        requirement_overlaps(requirement, evidence)
                        for evidence in [*m.matched_requirements, *item.tags]
                    )
                ),
                None,
            )
            if best is None or best.score < GAP_THRESHOLD:
                gaps.append(
                    Gap(
                        requirement=requirement,
                        best_match_score=best.score if best else 0,
                        best_match_text=best.text if best else None,
                    )
                )
        return gaps

    @staticmethod
    def _validate_items(items: Sequence) -> list[MatchItem]:
        validated: list[MatchItem] = []
        for index, item in enumerate(items):
            if isinstance(item, (Accomplishment, LibraryEntry)):
                validated.append(item)
                continue
            if not isinstance(item, dict):
                raise ValidationError(f"items.{index}", f"unsupported item type {type(item).__name__}")
            model = LibraryEntry if "type" in item else Accomplishment
            try:
                validated.append(model.model_validate(item))
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, f"items.{index}") from e
        return validated


def _to_ranked(item: MatchItem, score: ItemScore) -> RankedMatch:
    if isinstance(item, LibraryEntry):
        text = item.title + (f" at {item.subtitle}" if item.subtitle else "")
        return RankedMatch(
            item_id=item.id,
            text=text,
            company=item.subtitle or item.type,
            title=item.title,
            subtitle=item.subtitle,
            location=item.location,
            start_date=item.date,
            score=score.score,
            matched_requirements=score.matched_requirements,
            is_library_entry=True,
            item_type=item.type,
            description=" ".join(b.strip() for b in item.bullets if b.strip()) or None,
            reasoning=score.reasoning,
        )
    return RankedMatch(
        item_id=item.id,
        text=item.text,
        company=item.company,
        title=item.title,
        location=item.location,
        start_date=item.start_date.strftime("%m/%Y") if item.start_date else None,
        end_date=item.end_date.strftime("%m/%Y") if item.end_date else None,
        score=score.score,
        matched_requirements=score.matched_requirements,
        role_summary=item.role_summary,
        reasoning=score.reasoning,
    )


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _summarize(
    matches: list[RankedMatch],
    gaps: list[Gap],
    total_accomplishments: int,
    total_entries: int,
) -> MatchSummary:
    return MatchSummary(
        total_items=total_accomplishments + total_entries,
        total_accomplishments=total_accomplishments,
        total_library_entries=total_entries,
        strong_matches=sum(1 for m in matches if m.score >= STRONG_MATCH),
        good_matches=sum(1 for m in matches if GAP_THRESHOLD <= m.score < STRONG_MATCH),
        weak_matches=sum(1 for m in matches if m.score < GAP_THRESHOLD),
        library_entry_matches=sum(1 for m in matches if m.is_library_entry),
        gap_count=len(gaps),
    )
