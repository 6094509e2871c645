from __future__ import annotations

from app.utils.validators import sanitize_text


def test_sanitize_text_strips_null_and_trims():
    assert sanitize_text("  hola\x00mundo  ") == "holamundo"


def test_sanitize_text_handles_none_and_caps_length():
    assert sanitize_text(None) == ""
    assert sanitize_text("abcdef", max_len=3) == "abc"
