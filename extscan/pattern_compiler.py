"""
Obfuscated-code matcher construction for extscan.

Turns a list of literal marker strings into one alternation regex.
Edges that are word characters get a word-boundary assertion so that
"eval" does not fire inside "medieval", while punctuation edges such
as the "<" of "<?php" can sit directly next to other punctuation.
"""

from __future__ import annotations

import re
from typing import Iterable

_WORD_CHAR = re.compile(r"\w", re.ASCII)


def _is_word_char(char: str) -> bool:
    return _WORD_CHAR.fullmatch(char) is not None


def build_fragment(pattern: str) -> str:
    """Escape a non-empty literal and anchor its word-character edges."""
    fragment = re.escape(pattern)
    if _is_word_char(pattern[0]):
        fragment = r"\b" + fragment
    if _is_word_char(pattern[-1]):
        fragment += r"\b"
    return fragment


def compile_patterns(patterns: Iterable[str]) -> re.Pattern[str] | None:
    """
    Compile literal patterns into a single matcher.

    Blank entries are skipped and duplicates are kept. Returns None when
    no usable pattern remains, which disables the obfuscated-code check.
    """
    fragments = [
        build_fragment(stripped)
        for stripped in (pattern.strip() for pattern in patterns)
        if stripped
    ]
    if not fragments:
        return None
    # ASCII so that \b matches the [A-Za-z0-9_] boundary used for the edge test
    return re.compile("(?:" + "|".join(fragments) + ")", re.ASCII)
