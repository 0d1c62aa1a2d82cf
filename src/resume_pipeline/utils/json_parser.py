"""Pull a JSON document out of an LLM reply."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


def extract_json(text: str) -> dict | list:
    """Parse JSON from a model reply.

    Accepts bare JSON, JSON wrapped in a fenced code block, or JSON surrounded
    by prose (the outermost ``{...}`` or ``[...]`` span is tried).
    """
    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1).strip()
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass

    for opener, closer in (("{", "}"), ("[", "]")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")
