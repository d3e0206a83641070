"""Edit-distance similarity between two titles or artist names."""

from __future__ import annotations

import math

from rapidfuzz.distance import Levenshtein

from tunebridge.core.matching.normalization import normalize

MAX_SIMILARITY = 100


def similarity(first: object, second: object) -> int:
    """Score how alike two strings are on a 0-100 scale.

    Both inputs are normalized first. Identical normalized forms score 100, which
    includes two strings that both normalize to ``""`` (e.g. ``"(Live)"`` and
    ``"[Remix]"``); callers that need "no information" semantics must check the
    inputs are meaningful before scoring.

    Args:
        first: First string (non-strings and empty strings score 0)
        second: Second string

    Returns:
        ``100 * (max_len - distance) / max_len`` over the normalized forms,
        rounded half up (``12.5`` scores 13, not the banker's-rounding 12)

    """
    if not first or not second or not isinstance(first, str) or not isinstance(second, str):
        return 0

    normalized_first = normalize(first)
    normalized_second = normalize(second)
    if normalized_first == normalized_second:
        return MAX_SIMILARITY

    max_length = max(len(normalized_first), len(normalized_second))
    distance = Levenshtein.distance(normalized_first, normalized_second)
    return math.floor(MAX_SIMILARITY * (max_length - distance) / max_length + 0.5)
