# tests/test_fuzzy.py

from __future__ import annotations

import pytest

from resource_toolkit.matching import best_match, edit_distance, similarity_pct


def _ident(value):
    return value


def test_similarity_of_identical_strings():
    assert similarity_pct("jane doe", "jane doe") == 100.0
    assert similarity_pct("", "") == 0.0


def test_threshold_boundary_exactly_85_qualifies():
    query = "abcdefghijklmnopqrst"
    cand = "abcdefghijklmnopqxyz"
    assert similarity_pct(query, cand) == 85.0
    assert edit_distance(query, cand) == 3

    hit = best_match(query, [cand], key=_ident, threshold=85.0, max_distance=2)
    assert hit is not None
    assert hit[0] == cand


def test_below_threshold_and_distance_does_not_qualify():
    query = "abcdefghijklmnopqrst"
    cand = "abcdefghijklmnopwxyz"
    assert similarity_pct(query, cand) == 80.0
    assert edit_distance(query, cand) == 4
    assert best_match(query, [cand], key=_ident, threshold=85.0, max_distance=2) is None


def test_distance_fallback_qualifies_short_strings():
    # "bob" vs "rob": 66.7% similar, but only one edit away
    hit = best_match("bob", ["rob"], key=_ident, threshold=85.0, max_distance=2)
    assert hit is not None
    assert hit[0] == "rob"


def test_strictly_higher_score_wins_and_ties_keep_first():
    hit = best_match("jane doe", ["jane dox", "jane doe "], key=_ident)
    assert hit[0] == "jane doe "

    tie = best_match("jane doe", ["jane dox", "jane dog"], key=_ident)
    assert tie[0] == "jane dox"


def test_empty_query_and_empty_keys_never_match():
    assert best_match("", ["anything"], key=_ident) is None
    assert best_match("jane", ["", ""], key=_ident) is None


def test_similarity_counts_substring_blocks_not_scattered_characters():
    # "th richardson" + "el" + "i": 16 shared of 39, the scattered "a" and "e" do not count
    query = "elizabeth richardson"
    cand = "elzsbith richardson"
    assert similarity_pct(query, cand) == pytest.approx(82.05, abs=0.01)
    assert edit_distance(query, cand) == 3
    assert best_match(query, [cand], key=_ident, threshold=85.0, max_distance=2) is None

