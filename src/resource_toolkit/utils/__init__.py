# src/resource_toolkit/utils/__init__.py

from .pathing import (
    configured_dir,
    project_root,
    resolve_project_path,
)

__all__ = [
    "configured_dir",
    "project_root",
    "resolve_project_path",
]
