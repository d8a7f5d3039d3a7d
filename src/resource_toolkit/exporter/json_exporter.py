"""
json_exporter.py
JSON helpers for step payloads, job summaries and reports.

- Converts dataclasses, enums and objects to dictionaries (NOT strings)
- Objects exposing ``to_dict`` serialize through it
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any


def to_json_compatible(obj: Any) -> Any:
    """
    Recursively convert objects into JSON-compatible structures.

    Rules:
    - Primitives pass through
    - Enums -> their value
    - objects with ``to_dict`` -> that dict
    - dataclasses -> dict (recursively)
    - dict / Mapping-like -> dict (recursively)
    - list / tuple / set -> list (recursively)
    - Path -> str
    - Unknown objects -> __dict__ if present, else str(obj)
    """
    if isinstance(obj, Enum):
        return obj.value

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return to_json_compatible(obj.to_dict())

    if is_dataclass(obj) and not isinstance(obj, type):
        return {k: to_json_compatible(v) for k, v in asdict(obj).items()}

    if isinstance(obj, dict):
        return {str(k): to_json_compatible(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [to_json_compatible(v) for v in obj]

    if isinstance(obj, Path):
        return str(obj)

    if hasattr(obj, "__dict__"):
        return {k: to_json_compatible(v) for k, v in obj.__dict__.items()}

    return str(obj)


def dumps_json(data: Any, *, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(to_json_compatible(data), indent=2, ensure_ascii=False)
    return json.dumps(to_json_compatible(data), separators=(",", ":"), ensure_ascii=False)
