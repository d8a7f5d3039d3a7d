"""
Fuzzy string matching for consultant reconciliation.

Similarity is the share of common characters found by repeatedly taking the
first longest common substring and recursing into the text on either side of
it (the left side only when the block was not the first one found), counted
over the UTF-8 bytes of both strings:

    similarity = 200 * common / (len(a) + len(b))

A candidate qualifies when its percentage similarity to the query reaches
the threshold OR its edit distance stays within the distance threshold.
Among qualifying candidates the strictly highest similarity wins; on equal
scores the first candidate in iteration order is kept, so callers must pass
candidates in a deterministic order (consultant matching sorts by id).
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Tuple, TypeVar

from rapidfuzz.distance import Levenshtein

T = TypeVar("T")

DEFAULT_SIMILARITY_THRESHOLD = 85.0
NAME_MAX_DISTANCE = 2
EMAIL_MAX_DISTANCE = 3


def _longest_common_block(a: bytes, b: bytes) -> Tuple[int, int, int, int]:
    """First longest common substring as ``(pos_a, pos_b, length, improvements)``."""
    length = pos_a = pos_b = improvements = 0
    for i in range(len(a)):
        for j in range(len(b)):
            k = 0
            while i + k < len(a) and j + k < len(b) and a[i + k] == b[j + k]:
                k += 1
            if k > length:
                length, pos_a, pos_b = k, i, j
                improvements += 1
    return pos_a, pos_b, length, improvements


def common_chars(a: bytes, b: bytes) -> int:
    pos_a, pos_b, length, improvements = _longest_common_block(a, b)
    if not length:
        return 0
    total = length
    # Left side is only searched when the block was not the first one found.
    if pos_a and pos_b and improvements > 1:
        total += common_chars(a[:pos_a], b[:pos_b])
    if pos_a + length < len(a) and pos_b + length < len(b):
        total += common_chars(a[pos_a + length:], b[pos_b + length:])
    return total


def similarity_pct(a: str, b: str) -> float:
    """Shared characters as a percentage of the combined length (0-100)."""
    raw_a = a.encode("utf-8")
    raw_b = b.encode("utf-8")
    total = len(raw_a) + len(raw_b)
    if total == 0:
        return 0.0
    return common_chars(raw_a, raw_b) * 200.0 / total


def edit_distance(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def qualifies(score: float, distance: int, threshold: float, max_distance: int) -> bool:
    return score >= threshold or distance <= max_distance


def best_match(
    query: str,
    candidates: Iterable[T],
    key: Callable[[T], str],
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    max_distance: int = NAME_MAX_DISTANCE,
) -> Optional[Tuple[T, float]]:
    """
    Return ``(candidate, score)`` for the best qualifying candidate, or None.

    Candidates whose key is empty are ignored. An empty query never matches.
    """
    if not query:
        return None

    best: Optional[T] = None
    best_score = 0.0

    for candidate in candidates:
        value = key(candidate)
        if not value:
            continue
        score = similarity_pct(query, value)
        distance = edit_distance(query, value)
        if qualifies(score, distance, threshold, max_distance) and score > best_score:
            best = candidate
            best_score = score

    if best is None:
        return None
    return best, best_score
