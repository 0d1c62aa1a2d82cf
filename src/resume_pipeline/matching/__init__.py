"""Accomplishment matching: scoring strategies and the ranking engine."""

from resume_pipeline.matching.engine import (
    GAP_THRESHOLD,
    MAX_MATCHES,
    MIN_INCLUDE_SCORE,
    MatchingEngine,
    parse_profile,
)
from resume_pipeline.matching.profile_builder import build_success_profile, group_tags_by_theme
from resume_pipeline.matching.scorers import (
    DEFAULT_SCORE,
    ItemScore,
    LLMScorer,
    Scorer,
    TagOverlapScorer,
    build_scorer,
)

__all__ = [
    "DEFAULT_SCORE",
    "GAP_THRESHOLD",
    "ItemScore",
    "LLMScorer",
    "MAX_MATCHES",
    "MIN_INCLUDE_SCORE",
    "MatchingEngine",
    "Scorer",
    "TagOverlapScorer",
    "build_scorer",
    "build_success_profile",
    "group_tags_by_theme",
    "parse_profile",
]
