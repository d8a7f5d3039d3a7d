"""
User-resolution memory.

Maps a mapping key (an ambiguous CSV token in its context) to the canonical
value the operator picked, or to ``SKIP``. The caller owns the memory and
passes it in whole on every batch step; processors only read it.

Key formats:
  - ``tax:<parent_id>:<raw value>`` for a category level under a parent term
  - ``aud:<field name>:<label>`` for an audience label in one field
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Union

SKIP = "__SKIP__"


def taxonomy_key(parent_id: int, raw_value: str) -> str:
    return f"tax:{parent_id}:{raw_value}"


def audience_key(field_name: str, label: str) -> str:
    return f"aud:{field_name}:{label}"


class ResolutionMemory(Mapping[str, str]):
    """Read-mostly view over the operator's resolutions for one job."""

    def __init__(self, mappings: Optional[Mapping[str, str]] = None):
        self._mappings: Dict[str, str] = {}
        for key, value in (mappings or {}).items():
            self._mappings[str(key)] = str(value)

    def __getitem__(self, key: str) -> str:
        return self._mappings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def is_skip(self, key: str) -> bool:
        return self._mappings.get(key) == SKIP

    def remember(self, key: str, value: str) -> "ResolutionMemory":
        """Return a new memory with one more resolution; the receiver is untouched."""
        merged = dict(self._mappings)
        merged[key] = str(value)
        return ResolutionMemory(merged)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._mappings)

    # -- persistence (CLI only) ----------------------------------------------

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ResolutionMemory":
        path = Path(path)
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Mappings file must hold a JSON object: {path}")
        return cls(data)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._mappings, f, ensure_ascii=False, indent=2, sort_keys=True)
