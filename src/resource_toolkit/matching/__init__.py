"""
Matching package: fuzzy scoring and consultant (author) resolution.
"""

from .consultants import (
    Candidate,
    MatchOutcome,
    MatchReport,
    MatchSettings,
    MatchType,
    find_consultant_match,
    match_rows,
    order_candidates,
)
from .fuzzy import best_match, edit_distance, similarity_pct

__all__ = [
    "Candidate",
    "MatchOutcome",
    "MatchReport",
    "MatchSettings",
    "MatchType",
    "best_match",
    "edit_distance",
    "find_consultant_match",
    "match_rows",
    "order_candidates",
    "similarity_pct",
]
