"""
Hierarchical term forest.

Terms are addressable by id and by (name, parent). ``parent_id == 0`` marks
a root. Name lookup is case-insensitive and trims whitespace; sibling names
are assumed unique (the first match in load order wins otherwise).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from resource_toolkit.core.results import MismatchOption

ROOT = 0


@dataclass(slots=True, frozen=True)
class TermNode:
    id: int
    name: str
    parent_id: int = ROOT


def _fold(name: str) -> str:
    return (name or "").strip().lower()


class TermForest:
    """Read-only snapshot of one taxonomy, loaded fresh for every batch step."""

    def __init__(self, terms: Iterable[TermNode]):
        self._by_id: Dict[int, TermNode] = {}
        self._children: Dict[int, List[TermNode]] = {}
        for term in terms:
            self._by_id[term.id] = term
            self._children.setdefault(term.parent_id, []).append(term)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, term_id: object) -> bool:
        return term_id in self._by_id

    def get(self, term_id: int) -> Optional[TermNode]:
        return self._by_id.get(term_id)

    def children(self, parent_id: int) -> List[TermNode]:
        return list(self._children.get(parent_id, []))

    def find(self, name: str, parent_id: int) -> Optional[TermNode]:
        wanted = _fold(name)
        for term in self._children.get(parent_id, []):
            if _fold(term.name) == wanted:
                return term
        return None

    def sibling_options(self, parent_id: int) -> List[MismatchOption]:
        """Every child of ``parent_id`` as dropdown options, sorted by name ignoring case."""
        terms = sorted(self._children.get(parent_id, []), key=lambda t: t.name.lower())
        return [MismatchOption(value=str(t.id), label=t.name) for t in terms]

    def path(self, term_id: int) -> List[TermNode]:
        """Ancestors of ``term_id`` from the root down, the term itself last."""
        out: List[TermNode] = []
        seen = set()
        node = self._by_id.get(term_id)
        while node is not None and node.id not in seen:
            seen.add(node.id)
            out.append(node)
            node = self._by_id.get(node.parent_id) if node.parent_id != ROOT else None
        return list(reversed(out))
