"""Shared helpers for catalog word normalization."""

from __future__ import annotations

import re

WHITESPACE_RE = re.compile(r"\s+")


def normalize_word(text: str) -> str:
    """Return ``text`` trimmed and upper-cased, keeping locale letters like Å/Ä/Ö."""

    if not text:
        return ""
    return WHITESPACE_RE.sub("", text.strip()).upper()


def is_word_text(text: str) -> bool:
    """True when ``text`` is a non-empty run of alphabetic characters."""

    return bool(text) and text.isalpha()


__all__ = ["normalize_word", "is_word_text"]
