"""Tests for title and artist normalization."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tunebridge.core.matching.normalization import clean_for_search, contains_either, normalize


class TestNormalize:
    """Tests for normalize."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Hello", "hello"),
            ("  HELLO   World  ", "hello world"),
            ("Hello (Live at the BBC)", "hello"),
            ("Hello [Remastered 2011]", "hello"),
            ("Don't Stop Me Now!", "dont stop me now"),
            ("Beyoncé", "beyonce"),
            ("Sigur Rós", "sigur ros"),
            ("AC/DC", "acdc"),
        ],
    )
    def test_canonical_forms(self, raw: str, expected: str) -> None:
        """Should lowercase, drop brackets, punctuation and diacritics."""
        assert normalize(raw) == expected

    def test_words_around_brackets_stay_separate(self) -> None:
        """Bracket removal should not glue the neighbouring words together."""
        assert normalize("One (Two) Three") == "one three"

    @pytest.mark.parametrize("value", [None, "", 42, ["Hello"]])
    def test_non_text_normalizes_to_empty(self, value: object) -> None:
        """None, empty and non-string values should give an empty string."""
        assert normalize(value) == ""

    def test_only_annotations_normalize_to_empty(self) -> None:
        """A title made only of annotations has no comparison form."""
        assert normalize("(Live) [Remix]") == ""

    @given(st.text())
    def test_idempotent(self, text: str) -> None:
        """Normalizing twice should change nothing."""
        once = normalize(text)
        assert normalize(once) == once

    @given(st.text())
    def test_no_outer_or_double_whitespace(self, text: str) -> None:
        """Output should be trimmed with single spaces only."""
        result = normalize(text)
        assert result == result.strip()
        assert "  " not in result


class TestCleanForSearch:
    """Tests for clean_for_search."""

    def test_drops_feat_and_edit_annotations(self) -> None:
        """Should remove feat. credits and bracketed edits."""
        assert clean_for_search("Get Lucky (feat. Pharrell Williams) [Radio Edit]") == "Get Lucky"

    def test_keeps_case_and_punctuation(self) -> None:
        """Display form should survive apart from annotations."""
        assert clean_for_search("Don't Stop Me Now!") == "Don't Stop Me Now!"

    def test_non_text(self) -> None:
        """Non-string values should give an empty string."""
        assert clean_for_search(None) == ""


class TestContainsEither:
    """Tests for contains_either."""

    def test_containment_in_both_directions(self) -> None:
        """Either string containing the other counts."""
        assert contains_either("intro", "introduction")
        assert contains_either("introduction", "intro")

    def test_empty_never_matches(self) -> None:
        """Empty strings carry no information."""
        assert not contains_either("", "intro")
        assert not contains_either("intro", "")

    def test_disjoint(self) -> None:
        """Unrelated strings do not match."""
        assert not contains_either("hello", "world")
