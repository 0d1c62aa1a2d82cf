from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Identity of the acting user, passed explicitly through every stage."""

    user_id: str
