# src/resource_toolkit/utils/pathing.py

from __future__ import annotations

from pathlib import Path
from typing import Union

from resource_toolkit.config import get_config

# This file lives at <project_root>/src/resource_toolkit/utils/pathing.py
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


def project_root() -> Path:
    """
    Return the absolute path to the project root directory
    (the one holding src/, tests/ and config/).
    """
    return _PROJECT_ROOT


def resolve_project_path(relative: Union[str, Path]) -> Path:
    """
    Resolve a path relative to the project root; absolute paths pass through.

    Examples:
        resolve_project_path("exports")
        resolve_project_path("/var/tmp/media")
    """
    path = Path(relative)
    return path if path.is_absolute() else project_root() / path


def configured_dir(key: str, default: str) -> Path:
    """A ``paths.<key>`` directory from the YAML config, resolved against the project root."""
    cfg = get_config()
    return resolve_project_path(cfg.paths.get(key) or default)
