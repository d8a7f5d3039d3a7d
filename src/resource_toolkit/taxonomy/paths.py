"""
Category path resolution.

Each row carries up to three parallel category paths, each up to four
levels deep, in the columns

    Resource Category <n> - Main Category
    Resource Category <n> - Sub Category
    Resource Category <n> - Sub Sub Category
    Resource Category <n> - Sub Sub Sub Category

A path ends at its first empty level. Walking a path starts under the root
(parent 0); at every level the operator's memory is consulted first
(``tax:<parent>:<value>``), then the term forest. An unknown label suspends
the walk with a ``MismatchToken`` listing every term under the current
parent. Only the deepest resolved term of a path is recorded; ancestors are
implied by the forest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from resource_toolkit.core.memory import ResolutionMemory, taxonomy_key
from resource_toolkit.core.results import MismatchToken
from resource_toolkit.loader import Row, cell
from resource_toolkit.logging import get_logger
from resource_toolkit.taxonomy.terms import ROOT, TermForest

log = get_logger("taxonomy_paths")

CATEGORY_PATHS = 3
LEVEL_LABELS = (
    "Main Category",
    "Sub Category",
    "Sub Sub Category",
    "Sub Sub Sub Category",
)


def category_column(path_number: int, depth: int) -> str:
    return f"Resource Category {path_number} - {LEVEL_LABELS[depth]}"


def path_levels(row: Row, path_number: int) -> List[str]:
    """Raw level values of one path, stopping at the first empty level."""
    levels: List[str] = []
    for depth in range(len(LEVEL_LABELS)):
        value = cell(row, category_column(path_number, depth))
        if not value:
            break
        levels.append(value)
    return levels


class PathState(str, Enum):
    RESOLVED = "resolved"
    SUSPENDED = "suspended"
    SKIPPED = "skipped"
    EMPTY = "empty"


@dataclass(slots=True)
class PathOutcome:
    path_number: int
    state: PathState
    term_id: Optional[int] = None
    mismatch: Optional[MismatchToken] = None


def _remembered_term(memory: ResolutionMemory, key: str) -> Optional[int]:
    try:
        return int(memory[key])
    except (TypeError, ValueError):
        log.warning("Ignoring non-numeric term resolution %r for %s", memory[key], key)
        return None


def resolve_path(
    path_number: int,
    levels: List[str],
    forest: TermForest,
    memory: ResolutionMemory,
    describe: Callable[[int, int], str],
) -> PathOutcome:
    """
    Walk one path level by level.

    ``describe(path_number, depth)`` builds the human-readable context of a
    mismatch raised at ``depth`` (0-based).
    """
    if not levels:
        return PathOutcome(path_number, PathState.EMPTY)

    parent_id = ROOT
    last_term_id: Optional[int] = None

    for depth, raw in enumerate(levels):
        key = taxonomy_key(parent_id, raw)

        if key in memory:
            if memory.is_skip(key):
                return PathOutcome(path_number, PathState.SKIPPED)
            remembered = _remembered_term(memory, key)
            if remembered is not None:
                last_term_id = parent_id = remembered
                continue

        node = forest.find(raw, parent_id)
        if node is None:
            token = MismatchToken(
                mapping_key=key,
                csv_value=raw,
                context=describe(path_number, depth),
                options=forest.sibling_options(parent_id),
            )
            return PathOutcome(path_number, PathState.SUSPENDED, mismatch=token)

        last_term_id = parent_id = node.id

    return PathOutcome(path_number, PathState.RESOLVED, term_id=last_term_id)


@dataclass
class RowCategories:
    term_ids: List[int] = field(default_factory=list)
    assigned: int = 0
    skipped: int = 0
    mismatch: Optional[MismatchToken] = None


def resolve_row_categories(
    row: Row,
    forest: TermForest,
    memory: ResolutionMemory,
    describe: Callable[[int, int], str],
) -> RowCategories:
    """
    Resolve every category path of ``row``.

    Stops at the first suspended path; counters accumulated up to that point
    are kept so the caller can report partial progress.
    """
    out = RowCategories()
    for path_number in range(1, CATEGORY_PATHS + 1):
        outcome = resolve_path(path_number, path_levels(row, path_number), forest, memory, describe)

        if outcome.state is PathState.SUSPENDED:
            out.mismatch = outcome.mismatch
            return out
        if outcome.state is PathState.SKIPPED:
            out.skipped += 1
        elif outcome.state is PathState.RESOLVED and outcome.term_id:
            out.term_ids.append(outcome.term_id)
            out.assigned += 1

    return out
