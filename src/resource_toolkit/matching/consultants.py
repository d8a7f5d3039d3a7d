"""
Consultant (author) resolution.

Resolution order for one (email, name) pair is fixed and the first
satisfying check wins:

  1. exact normalized name
  2. fuzzy normalized name   (similarity >= 85 or distance <= 2)
  3. exact lower-cased email
  4. fuzzy email             (similarity >= 85 or distance <= 3)
  5. no match

Rows naming several authors are excluded before any of this runs and land
in the unmatched bucket tagged ``skipped_multi_author``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from resource_toolkit.loader import Row, cell
from resource_toolkit.logging import get_logger
from resource_toolkit.matching.fuzzy import (
    DEFAULT_SIMILARITY_THRESHOLD,
    EMAIL_MAX_DISTANCE,
    NAME_MAX_DISTANCE,
    best_match,
)
from resource_toolkit.normalization import is_multi_author, normalize_email, normalize_name

log = get_logger("consultant_matcher")

AUTHOR_EMAIL = "Author Email"
AUTHOR_NAME = "Author Name"
CONSULTANT_ID = "Consultant ID"
MATCH_TYPE = "Match Type"
REQUIRED_COLUMNS = (AUTHOR_EMAIL, AUTHOR_NAME)

SKIPPED_MULTI_AUTHOR = "skipped_multi_author"


class MatchType(str, Enum):
    EXACT_NAME = "exact_name"
    FUZZY_NAME = "fuzzy_name"
    EXACT_EMAIL = "exact_email"
    FUZZY_EMAIL = "fuzzy_email"
    NONE = ""


@dataclass(slots=True, frozen=True)
class Candidate:
    id: int
    display_name: str
    normalized_name: str
    email: str

    @classmethod
    def build(cls, id: int, display_name: str, email: Optional[str] = None) -> "Candidate":
        return cls(
            id=int(id),
            display_name=display_name or "",
            normalized_name=normalize_name(display_name),
            email=normalize_email(email),
        )


@dataclass(slots=True, frozen=True)
class MatchOutcome:
    type: MatchType
    candidate_id: Optional[int] = None
    score: Optional[float] = None

    @property
    def matched(self) -> bool:
        return self.type is not MatchType.NONE


NO_MATCH = MatchOutcome(MatchType.NONE)


@dataclass(frozen=True)
class MatchSettings:
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    name_max_distance: int = NAME_MAX_DISTANCE
    email_max_distance: int = EMAIL_MAX_DISTANCE

    @classmethod
    def from_config(cls, cfg) -> "MatchSettings":
        matching = getattr(cfg, "matching", {}) or {}
        return cls(
            similarity_threshold=float(matching.get("similarity_threshold", DEFAULT_SIMILARITY_THRESHOLD)),
            name_max_distance=int(matching.get("name_max_distance", NAME_MAX_DISTANCE)),
            email_max_distance=int(matching.get("email_max_distance", EMAIL_MAX_DISTANCE)),
        )


def order_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Ascending id order makes the equal-score tie-break explicit."""
    return sorted(candidates, key=lambda c: c.id)


def find_consultant_match(
    author_email: str,
    author_name: str,
    candidates: Sequence[Candidate],
    settings: MatchSettings = MatchSettings(),
) -> MatchOutcome:
    """Classify one (email, name) pair against ``candidates`` (already ordered)."""
    email = normalize_email(author_email)
    name = normalize_name(author_name)

    if name:
        for c in candidates:
            if c.normalized_name == name:
                return MatchOutcome(MatchType.EXACT_NAME, c.id, 100.0)

        hit = best_match(
            name,
            candidates,
            key=lambda c: c.normalized_name,
            threshold=settings.similarity_threshold,
            max_distance=settings.name_max_distance,
        )
        if hit is not None:
            return MatchOutcome(MatchType.FUZZY_NAME, hit[0].id, hit[1])

    if email:
        for c in candidates:
            if c.email and c.email == email:
                return MatchOutcome(MatchType.EXACT_EMAIL, c.id, 100.0)

        hit = best_match(
            email,
            candidates,
            key=lambda c: c.email,
            threshold=settings.similarity_threshold,
            max_distance=settings.email_max_distance,
        )
        if hit is not None:
            return MatchOutcome(MatchType.FUZZY_EMAIL, hit[0].id, hit[1])

    return NO_MATCH


# -----------------------------------------------------------------------------
# Whole-file matching
# -----------------------------------------------------------------------------

@dataclass
class MatchReport:
    """Rows partitioned by outcome, each carrying Consultant ID / Match Type."""

    total: int = 0
    matched: List[Row] = field(default_factory=list)
    unmatched: List[Row] = field(default_factory=list)
    skipped: List[Row] = field(default_factory=list)
    stats: Dict[str, int] = field(
        default_factory=lambda: {t.value: 0 for t in MatchType if t is not MatchType.NONE}
    )

    @property
    def compiled(self) -> List[Row]:
        return self.matched + self.unmatched + self.skipped

    def summary(self) -> Dict[str, int]:
        out = {"total": self.total}
        out.update(self.stats)
        out["skipped"] = len(self.skipped)
        out["unmatched"] = len(self.unmatched)
        return out


def _tagged(row: Row, consultant_id: str, match_type: str) -> Row:
    out = dict(row)
    out[CONSULTANT_ID] = consultant_id
    out[MATCH_TYPE] = match_type
    return out


def match_rows(
    rows: Sequence[Row],
    candidates: Iterable[Candidate],
    settings: MatchSettings = MatchSettings(),
) -> MatchReport:
    """Match every row; source rows are copied, never modified."""
    ordered = order_candidates(candidates)
    report = MatchReport(total=len(rows))

    for row in rows:
        email = cell(row, AUTHOR_EMAIL)
        name = cell(row, AUTHOR_NAME)

        if is_multi_author(name):
            report.skipped.append(_tagged(row, "", SKIPPED_MULTI_AUTHOR))
            continue

        outcome = find_consultant_match(email, name, ordered, settings)
        if outcome.matched:
            report.matched.append(_tagged(row, str(outcome.candidate_id), outcome.type.value))
            report.stats[outcome.type.value] += 1
            log.debug("Matched %r / %r -> %s (%s)", name, email, outcome.candidate_id, outcome.type.value)
        else:
            report.unmatched.append(_tagged(row, "", ""))

    log.info(
        "Consultant matching complete: total=%d matched=%d unmatched=%d skipped=%d",
        report.total,
        len(report.matched),
        len(report.unmatched),
        len(report.skipped),
    )
    return report
