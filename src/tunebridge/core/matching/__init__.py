"""Fuzzy matching: normalization, similarity scoring, query building and ranking."""

from tunebridge.core.matching.engine import MatchEngine, classify, score_candidate
from tunebridge.core.matching.normalization import clean_for_search, normalize
from tunebridge.core.matching.query_builder import build_album_queries, build_queries, is_usable_query
from tunebridge.core.matching.similarity import similarity

__all__ = [
    "MatchEngine",
    "build_album_queries",
    "build_queries",
    "classify",
    "clean_for_search",
    "is_usable_query",
    "normalize",
    "score_candidate",
    "similarity",
]
