"""Sanitizers applied to free-form text before persistence."""

from __future__ import annotations


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Drop NUL bytes, trim surrounding whitespace and cap the length."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    return cleaned[:max_len]
