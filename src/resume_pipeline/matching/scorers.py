"""Scoring strategies: deterministic tag overlap and an LLM-backed reasoner.

Both implement :class:`Scorer`, so the engine never branches on which one is
active. The strategy is picked once, from config, when the pipeline is built.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Union

import anthropic
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.clients.llm_client import LLMClient
from resume_pipeline.config import AppConfig
from resume_pipeline.errors import ScoringUnavailable
from resume_pipeline.models.library import Accomplishment, LibraryEntry
from resume_pipeline.models.profile import SuccessProfile

logger = logging.getLogger(__name__)

MatchItem = Union[Accomplishment, LibraryEntry]

# Score given to every item when the profile has no themes to compare against
DEFAULT_SCORE = 50


@dataclass
class ItemScore:
    score: int
    matched_requirements: list[str] = field(default_factory=list)
    reasoning: str | None = None


class Scorer(ABC):
    """Scores items against a success profile, one ItemScore per item, in order."""

    name: str = "scorer"

    @abstractmethod
    async def score(self, profile: SuccessProfile, items: list[MatchItem]) -> list[ItemScore]:
        ...


def tags_match(tag: str, theme_tag: str) -> bool:
    """Case-insensitive, substring-tolerant tag comparison."""
    a, b = tag.lower(), theme_tag.lower()
    return a in b or b in a


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TagOverlapScorer(Scorer):
    """Deterministic strategy: best single-theme tag overlap, as a percentage."""

    name = "tag_overlap"

    async def score(self, profile: SuccessProfile, items: list[MatchItem]) -> list[ItemScore]:
        return [self.score_item(profile, item) for item in items]

    def score_item(self, profile: SuccessProfile, item: MatchItem) -> ItemScore:
        if not profile.key_themes:
            return ItemScore(score=DEFAULT_SCORE)

        best = 0.0
        matched: list[str] = []
        for theme in profile.key_themes:
            overlap = [t for t in item.tags if any(tags_match(t, tt) for tt in theme.tags)]
            theme_score = len(overlap) / len(theme.tags) * 100
            if theme_score > 0:
                matched.append(theme.theme)
            # best theme wins; themes are never averaged
            best = max(best, theme_score)

        return ItemScore(score=round_half_up(best), matched_requirements=matched)


SYSTEM_PROMPT = """\
You are a resume matching assistant. You judge how well each of a candidate's \
accomplishments or portfolio items demonstrates the requirements of a target role.

Respond ONLY with JSON in this exact shape:
{
  "scores": [
    {
      "id": "item id exactly as given",
      "score": 0-100,
      "matchedRequirements": ["names of the key themes this item demonstrates"],
      "reasoning": "one sentence"
    }
  ]
}

Rules:
- Score every item exactly once.
- matchedRequirements may only contain theme names from the profile.
- Judge only what the item text says. Do not assume unstated experience."""


class _ReasonerScore(BaseModel):
    id: str
    score: float
    matched_requirements: list[str] = Field(default_factory=list, alias="matchedRequirements")
    reasoning: str | None = None

    model_config = {"populate_by_name": True}


class LLMScorer(Scorer):
    """External-reasoner strategy: delegates judgment to Claude."""

    name = "llm"

    def __init__(self, llm: LLMClient, timeout: float = 90.0, model: str | None = None):
        self.llm = llm
        self.timeout = timeout
        self.model = model

    async def score(self, profile: SuccessProfile, items: list[MatchItem]) -> list[ItemScore]:
        if not items:
            return []
        prompt = self._build_prompt(profile, items)
        try:
            data = await asyncio.wait_for(
                self.llm.generate_json(prompt=prompt, system=SYSTEM_PROMPT, model=self.model),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Scoring request timed out after %.1fs", self.timeout)
            raise ScoringUnavailable(f"scoring timed out after {self.timeout}s") from e
        except (anthropic.APIError, ValueError) as e:
            logger.error("Scoring request failed", exc_info=True)
            raise ScoringUnavailable(f"scoring request failed: {e}") from e
        return self._parse_scores(profile, data, items)

    def _build_prompt(self, profile: SuccessProfile, items: list[MatchItem]) -> str:
        themes = [{"theme": t.theme, "tags": t.tags} for t in profile.key_themes]
        payload = [
            {"id": item.id, "text": _item_text(item), "tags": item.tags}
            for item in items
        ]
        return f"""Score these items against the target role.

## Target role
- Company: {profile.company or "(unspecified)"}
- Role: {profile.role or "(unspecified)"}
- Must have: {json.dumps(profile.must_have, ensure_ascii=False)}
- Nice to have: {json.dumps(profile.nice_to_have, ensure_ascii=False)}
- Key themes: {json.dumps(themes, ensure_ascii=False)}

## Items
{json.dumps(payload, ensure_ascii=False, indent=2)}

Respond with JSON only."""

    def _parse_scores(
        self, profile: SuccessProfile, data: dict | list, items: list[MatchItem]
    ) -> list[ItemScore]:
        raw = data.get("scores") if isinstance(data, dict) else data
        if not isinstance(raw, list):
            raise ScoringUnavailable("scoring reply has no scores list")

        by_id: dict[str, _ReasonerScore] = {}
        for entry in raw:
            try:
                parsed = _ReasonerScore.model_validate(entry)
            except PydanticValidationError as e:
                raise ScoringUnavailable(f"malformed score entry: {e}") from e
            by_id[parsed.id] = parsed

        missing = [item.id for item in items if item.id not in by_id]
        if missing:
            raise ScoringUnavailable(f"scoring reply missing items: {', '.join(missing)}")

        theme_names = {t.theme for t in profile.key_themes}
        results = []
        for item in items:
            s = by_id[item.id]
            matched = s.matched_requirements
            if theme_names:
                matched = [m for m in matched if m in theme_names]
            results.append(
                ItemScore(
                    score=min(100, max(0, round_half_up(s.score))),
                    matched_requirements=matched,
                    reasoning=s.reasoning,
                )
            )
        return results


def _item_text(item: MatchItem) -> str:
    if isinstance(item, LibraryEntry):
        parts = [f"[{item.type}] {item.title}"]
        if item.subtitle:
            parts.append(f"at {item.subtitle}")
        if item.bullets:
            parts.append("- " + " ".join(item.bullets))
        return " ".join(parts)
    return f"{item.text} ({item.title} at {item.company})"


def build_scorer(config: AppConfig, llm: LLMClient | None = None) -> Scorer:
    """Select the scoring strategy named in config."""
    if config.matching.strategy == "llm":
        if llm is None:
            llm = LLMClient(
                timeout=config.llm.timeout,
                model=config.llm.model,
                max_retries=config.llm.max_retries,
            )
        return LLMScorer(llm, timeout=config.matching.scoring_timeout)
    return TagOverlapScorer()
