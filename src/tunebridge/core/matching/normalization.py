"""Text normalization for cross-platform title and artist comparison.

``normalize`` produces the comparison form used by the similarity scorer. It is
never shown to users. ``clean_for_search`` keeps the display form mostly intact
and only drops annotations that hurt platform search queries.

Examples:
    >>> normalize("Hello (Live at the BBC) [Remastered]")
    'hello'
    >>> normalize("Beyoncé  -  Halo!")
    'beyonce halo'
    >>> clean_for_search("Get Lucky (feat. Pharrell Williams) [Radio Edit]")
    'Get Lucky'

"""

from __future__ import annotations

import re
import unicodedata

_BRACKETED_PATTERN = re.compile(r"\(.*?\)|\[.*?\]")
_NON_WORD_PATTERN = re.compile(r"[^\w\s]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_FEAT_PATTERN = re.compile(r"\s*\(feat\..*?\)", re.IGNORECASE)
_SEARCH_BRACKETS_PATTERN = re.compile(r"\s*\[.*?\]\s*|\s*\(.*?\)\s*")


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if unicodedata.category(char) != "Mn")


def normalize(text: object) -> str:
    """Canonicalize free text for comparison.

    Decomposes and drops diacritics, lowercases, removes ``(...)`` and ``[...]``
    groups (feat./remix/remaster annotations), strips everything that is not a
    word character or whitespace, collapses whitespace and trims.

    A bracket group is replaced by a space, so the words around it stay
    separate: ``"One (Two) Three"`` becomes ``"one three"``. Deleting the group
    together with its surrounding whitespace would give ``"onethree"`` and a
    larger edit distance against ``"One Three"`` from another platform.

    Args:
        text: Any value; ``None`` and non-strings normalize to ``""``

    Returns:
        Normalized comparison string. ``normalize(normalize(x)) == normalize(x)``.

    """
    if not text or not isinstance(text, str):
        return ""

    normalized = _strip_accents(text.lower()).lower()
    normalized = _BRACKETED_PATTERN.sub(" ", normalized)
    normalized = _NON_WORD_PATTERN.sub("", normalized)
    normalized = _WHITESPACE_PATTERN.sub(" ", normalized)
    return normalized.strip()


def clean_for_search(text: object) -> str:
    """Drop feat./bracket/parenthesis annotations but keep case and punctuation."""
    if not text or not isinstance(text, str):
        return ""

    cleaned = _FEAT_PATTERN.sub("", text)
    cleaned = _SEARCH_BRACKETS_PATTERN.sub(" ", cleaned)
    return _WHITESPACE_PATTERN.sub(" ", cleaned).strip()


def contains_either(first: str, second: str) -> bool:
    """True when either normalized string contains the other. Empty strings never match."""
    if not first or not second:
        return False
    return first in second or second in first
