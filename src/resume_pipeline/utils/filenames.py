"""Filename derivation for rendered resumes."""

from __future__ import annotations

import re

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")


def sanitize_filename(value: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_`` and collapse runs."""
    return _UNDERSCORE_RUN_RE.sub("_", _UNSAFE_RE.sub("_", value))


def resume_filename(name: str, target_company: str, target_role: str, ext: str = "docx") -> str:
    """Build ``{name}_{company}_{role}_Resume.{ext}`` from sanitized parts.

    Empty parts are skipped and the joined stem is collapsed again so the
    separators never produce a double underscore.
    """
    parts = [sanitize_filename(p) for p in (name, target_company, target_role) if p and p.strip()]
    stem = sanitize_filename("_".join(parts + ["Resume"]))
    return f"{stem}.{ext}"


def download_path(public_root: str, filename: str) -> str:
    """Relative download path of a rendered file under the public resources root."""
    return f"{public_root.rstrip('/')}/{filename}"
