"""Cross-platform fuzzy matching engine.

The engine takes a source record and an injected ``search`` coroutine for one
target platform. It issues every query from the query builder, scores each
returned candidate against the source, splits candidates into confident and
exploratory tiers, deduplicates by platform id and returns at most five records.

Scoring:
- artist mode (source and candidate both have an artist):
  ``artist_similarity * 0.55 + title_similarity * 0.45``
- title-only mode: ``title_similarity``, times 1.2 when one normalized title
  contains the other
- duration bonus in both modes: +5 under 5 seconds apart, +2 under 15

Scores are not clamped; only the confident threshold (40) carries meaning.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from tunebridge.core.matching.normalization import contains_either, normalize
from tunebridge.core.matching.query_builder import queries_for
from tunebridge.core.matching.similarity import similarity
from tunebridge.core.models.platform import MatchTier
from tunebridge.core.models.records import MatchResult, Record, ScoredCandidate

SearchFunc = Callable[[str, int], Awaitable[Sequence[Record | None]]]

ARTIST_WEIGHT = 0.55
TITLE_WEIGHT = 0.45
PARTIAL_MATCH_MULTIPLIER = 1.2
CLOSE_DURATION_SECONDS = 5
NEAR_DURATION_SECONDS = 15
CLOSE_DURATION_BONUS = 5
NEAR_DURATION_BONUS = 2
CONFIDENT_THRESHOLD = 40
DEFAULT_SEARCH_LIMIT = 3
MAX_RESULTS = 5


def duration_bonus(source_seconds: float | None, candidate_seconds: float | None) -> int:
    """Bonus for candidates whose length is close to the source's."""
    if source_seconds is None or candidate_seconds is None:
        return 0
    if not source_seconds or not candidate_seconds:
        return 0

    difference = abs(source_seconds - candidate_seconds)
    if difference < CLOSE_DURATION_SECONDS:
        return CLOSE_DURATION_BONUS
    if difference < NEAR_DURATION_SECONDS:
        return NEAR_DURATION_BONUS
    return 0


def score_candidate(source: Record, candidate: Record) -> float:
    """Compute the ranking score of one candidate against the source record.

    Args:
        source: Record being converted
        candidate: Record returned by the target platform's search

    Returns:
        Open-ended score, typically between 0 and 120

    """
    source_artist = source.primary_artist
    candidate_artist = candidate.primary_artist
    title_similarity = similarity(source.title, candidate.title or "")

    if source_artist and candidate_artist:
        score = similarity(source_artist, candidate_artist) * ARTIST_WEIGHT + title_similarity * TITLE_WEIGHT
    elif contains_either(normalize(source.title), normalize(candidate.title)):
        score = title_similarity * PARTIAL_MATCH_MULTIPLIER
    else:
        score = float(title_similarity)

    return score + duration_bonus(source.duration_seconds, candidate.duration_seconds)


def classify(score: float, threshold: float = CONFIDENT_THRESHOLD) -> MatchTier:
    """Tier is a pure function of the score."""
    return MatchTier.CONFIDENT if score >= threshold else MatchTier.EXPLORATORY


class MatchEngine:
    """Scores, tiers and deduplicates search candidates for one source record.

    The engine is stateless between calls and indifferent to which platform
    supplied ``search``; it only relies on the ``search(query, limit)`` contract.
    """

    def __init__(
        self,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        *,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        max_results: int = MAX_RESULTS,
    ) -> None:
        """Initialize the engine.

        Args:
            console_logger: Logger for progress and debug output
            error_logger: Logger for swallowed search failures
            search_limit: Results requested per query (capped to 1..5)
            max_results: Maximum records returned (capped to 1..5)

        """
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.search_limit = min(max(1, search_limit), MAX_RESULTS)
        self.max_results = min(max(1, max_results), MAX_RESULTS)

    async def find_matches(self, source: Record, search: SearchFunc) -> list[Record]:
        """Return up to five matching records, confident tier first."""
        result = await self.match(source, search)
        return result.records

    async def match(self, source: Record, search: SearchFunc) -> MatchResult:
        """Run every query for ``source`` and build the tiered result.

        Args:
            source: Record to find on the target platform
            search: Coroutine ``(query, limit) -> records`` for the target platform

        Returns:
            MatchResult drawn from the confident tier, else the exploratory tier,
            else empty

        """
        queries = queries_for(source)
        if not queries:
            self.console_logger.debug("[match] No usable queries for '%s'", source.title)
            return MatchResult()

        candidates = await self._collect_candidates(queries, search)
        scored = [self._score(source, candidate) for candidate in candidates]
        confident, exploratory = self._partition(scored)

        self.console_logger.debug(
            "[match] '%s': %d candidates, %d confident, %d exploratory",
            source.title,
            len(scored),
            len(confident),
            len(exploratory),
        )

        if confident:
            return MatchResult(tuple(confident[: self.max_results]))
        if exploratory:
            return MatchResult(tuple(exploratory[: self.max_results]))
        return MatchResult()

    async def _collect_candidates(self, queries: list[str], search: SearchFunc) -> list[Record]:
        """Issue all queries concurrently and flatten results in query priority order."""
        results = await asyncio.gather(
            *(search(query, self.search_limit) for query in queries),
            return_exceptions=True,
        )

        candidates: list[Record] = []
        for query, result in zip(queries, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self.error_logger.warning(
                    "[match] Search failed for query '%s': %s: %s",
                    query,
                    type(result).__name__,
                    result,
                )
                continue
            hits = [hit for hit in result if hit is not None]
            self.console_logger.debug("[match] Query '%s' returned %d candidates", query, len(hits))
            candidates.extend(hits)
        return candidates

    @staticmethod
    def _score(source: Record, candidate: Record) -> ScoredCandidate:
        score = score_candidate(source, candidate)
        return ScoredCandidate(record=candidate, score=score, tier=classify(score))

    @staticmethod
    def _partition(scored: list[ScoredCandidate]) -> tuple[list[ScoredCandidate], list[ScoredCandidate]]:
        """Split into tiers and deduplicate each tier by platform id.

        A repeated id replaces the earlier entry only when its score is not lower;
        the position of the first occurrence is kept.
        """
        tiers: dict[MatchTier, dict[str, ScoredCandidate]] = {
            MatchTier.CONFIDENT: {},
            MatchTier.EXPLORATORY: {},
        }
        for candidate in scored:
            bucket = tiers[candidate.tier]
            record = candidate.record
            key = record.platform_id or f"{normalize(record.title)}|{normalize(record.primary_artist)}"
            existing = bucket.get(key)
            if existing is None or candidate.score >= existing.score:
                bucket[key] = candidate

        return list(tiers[MatchTier.CONFIDENT].values()), list(tiers[MatchTier.EXPLORATORY].values())
