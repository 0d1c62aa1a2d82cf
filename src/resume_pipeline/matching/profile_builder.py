"""Build a SuccessProfile from requirements parsed out of a job description.

Deterministic: requirements are split by type, and their tags are grouped into
key themes through a fixed tag-to-theme table.
"""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.errors import ValidationError
from resume_pipeline.models.profile import KeyTheme, ParsedRequirement, SuccessProfile

logger = logging.getLogger(__name__)

OTHER_THEME = "Other"

# output order of themes
THEMES = [
    "Technical Skills",
    "Leadership",
    "Data & Analytics",
    "Product Management",
    "Communication",
    OTHER_THEME,
]

TAG_THEMES = {
    "engineering": "Technical Skills",
    "technical": "Technical Skills",
    "architecture": "Technical Skills",
    "api": "Technical Skills",
    "database": "Technical Skills",
    "cloud": "Technical Skills",
    "infrastructure": "Technical Skills",
    "leadership": "Leadership",
    "management": "Leadership",
    "mentoring": "Leadership",
    "team-building": "Leadership",
    "cross-functional": "Leadership",
    "data": "Data & Analytics",
    "analytics": "Data & Analytics",
    "metrics": "Data & Analytics",
    "reporting": "Data & Analytics",
    "a/b-testing": "Data & Analytics",
    "product": "Product Management",
    "roadmap": "Product Management",
    "strategy": "Product Management",
    "prioritization": "Product Management",
    "user-research": "Product Management",
    "communication": "Communication",
    "stakeholder": "Communication",
    "presentation": "Communication",
    "documentation": "Communication",
}

_REQUIREMENTS = TypeAdapter(list[ParsedRequirement])
_KEYWORDS = TypeAdapter(list[str])


def group_tags_by_theme(tags: list[str]) -> list[KeyTheme]:
    """Group tags under their theme (case-insensitive lookup), unknown tags under "Other".

    Themes with no tags are left out; tags keep their original spelling and order.
    """
    grouped: dict[str, list[str]] = {theme: [] for theme in THEMES}
    for tag in tags:
        grouped[TAG_THEMES.get(tag.lower(), OTHER_THEME)].append(tag)
    return [KeyTheme(theme=theme, tags=group) for theme, group in grouped.items() if group]


def build_success_profile(
    company: str,
    role: str,
    requirements: list[ParsedRequirement | dict] | str,
    keywords: list[str] | str | None = None,
    company_context: str | None = None,
) -> SuccessProfile:
    """Turn parsed requirements into the profile the matcher consumes.

    ``requirements`` and ``keywords`` may also be given as JSON text.

    Raises:
        ValidationError: if either input is not valid JSON or does not fit its shape.
    """
    parsed = _load(_REQUIREMENTS, requirements, "requirements")
    parsed_keywords = _load(_KEYWORDS, keywords if keywords is not None else [], "keywords")

    unique_tags = list(dict.fromkeys(t.strip() for r in parsed for t in r.tags if t.strip()))
    profile = SuccessProfile(
        company=company,
        role=role,
        must_have=[r.text for r in parsed if r.type == "must_have"],
        nice_to_have=[r.text for r in parsed if r.type == "nice_to_have"],
        key_themes=group_tags_by_theme(unique_tags),
        keywords=parsed_keywords,
        company_context=company_context or None,
    )
    logger.debug(
        "Built profile for %s: %d must-have, %d themes",
        role or "(role)", len(profile.must_have), len(profile.key_themes),
    )
    return profile


def _load(adapter: TypeAdapter, raw, field: str):
    try:
        if isinstance(raw, str):
            return adapter.validate_json(raw)
        return adapter.validate_python(raw)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, field) from e
