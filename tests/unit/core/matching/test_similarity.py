"""Tests for edit-distance similarity."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tunebridge.core.matching.similarity import MAX_SIMILARITY, similarity


class TestSimilarity:
    """Tests for similarity."""

    def test_identical_after_normalization(self) -> None:
        """Case, punctuation and annotations should not cost anything."""
        assert similarity("Hello", "hello!") == MAX_SIMILARITY
        assert similarity("Hello (Remastered)", "HELLO") == MAX_SIMILARITY

    def test_partial_overlap(self) -> None:
        """Five shared characters out of twelve round to 42."""
        assert similarity("Intro", "Introduction") == 42

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [("abcdefgh", "abcdexyz", 63), ("abcdefgh", "abcdefgz", 88), ("abcdefgh", "axyzwvut", 13)],
    )
    def test_halves_round_up(self, first: str, second: str, expected: int) -> None:
        """Ratios ending in .5 round up rather than to the nearest even integer."""
        assert similarity(first, second) == expected

    def test_completely_different(self) -> None:
        """Strings of equal length with no common position score 0."""
        assert similarity("abcd", "wxyz") == 0

    @pytest.mark.parametrize(("first", "second"), [("", "Hello"), ("Hello", ""), (None, "Hello"), ("Hello", 5)])
    def test_missing_input_scores_zero(self, first: object, second: object) -> None:
        """Empty or non-string input should score 0."""
        assert similarity(first, second) == 0

    def test_both_annotation_only(self) -> None:
        """Two strings that both normalize to empty compare as identical."""
        assert similarity("(Live)", "[Remix]") == MAX_SIMILARITY

    @given(st.text(min_size=1), st.text(min_size=1))
    def test_symmetric(self, first: str, second: str) -> None:
        """Argument order should not matter."""
        assert similarity(first, second) == similarity(second, first)

    @given(st.text(), st.text())
    def test_bounded(self, first: str, second: str) -> None:
        """Scores should stay within 0..100."""
        assert 0 <= similarity(first, second) <= MAX_SIMILARITY

    @given(st.text(min_size=1))
    def test_reflexive(self, text: str) -> None:
        """A string is fully similar to itself."""
        assert similarity(text, text) == MAX_SIMILARITY
