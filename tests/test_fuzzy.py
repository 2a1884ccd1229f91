"""
Tests for the nearest-match suggestion helper.
"""

import itertools

import pytest

from stacksfinder_mcp.core.fuzzy import distance, suggest

WORDS = ["nextjs", "nexjs", "nuxt", "nestjs", "", "react", "preact", "remix", "sveltekit"]


class TestDistance:
    """Test Levenshtein distance."""

    @pytest.mark.parametrize("a,b,expected", [
        ("", "", 0),
        ("", "abc", 3),
        ("kitten", "sitting", 3),
        ("nexjs", "nextjs", 1),
        ("flaw", "lawn", 2),
    ])
    def test_known_distances(self, a, b, expected):
        assert distance(a, b) == expected

    def test_symmetric(self):
        for a, b in itertools.product(WORDS, repeat=2):
            assert distance(a, b) == distance(b, a)

    def test_zero_only_for_identical(self):
        for a, b in itertools.product(WORDS, repeat=2):
            assert (distance(a, b) == 0) == (a == b)

    def test_triangle_inequality(self):
        for a, b, c in itertools.product(WORDS, repeat=3):
            assert distance(a, c) <= distance(a, b) + distance(b, c)


class TestSuggest:
    """Test suggestion ranking."""

    def test_closest_first(self):
        assert suggest("nexjs", ["nuxt", "nestjs", "nextjs"])[0] == "nextjs"

    def test_ties_broken_alphabetically(self):
        # "bat" and "cat" are both one edit from "hat"
        assert suggest("hat", ["cat", "bat"]) == ["bat", "cat"]

    def test_sorted_by_distance(self):
        candidates = ["react", "preact", "reactive", "redux"]
        result = suggest("react", candidates)
        distances = [distance("react", c) for c in result]
        assert distances == sorted(distances)

    def test_respects_limit(self):
        assert len(suggest("aa", ["a", "b", "ab", "ba", "aaa"], limit=2)) == 2

    def test_filters_distant_candidates(self):
        assert suggest("nextjs", ["postgres", "cloudflare"]) == []

    def test_case_insensitive(self):
        assert suggest("NextJS", ["nextjs"]) == ["nextjs"]

    @pytest.mark.parametrize("limit", [0, -1, -5])
    def test_non_positive_limit_yields_nothing(self, limit):
        assert suggest("nexjs", ["nextjs", "nestjs", "nuxt"], limit=limit) == []
