"""
Taxonomy package: term forest, category path walking and audience labels.
"""

from .audience import (
    AUDIENCE_CHOICES,
    AUDIENCE_FIELDS,
    PRIMARY_FIELD,
    SECONDARY_FIELD,
    AudienceResolution,
    label_to_value,
    resolve_audience,
    split_labels,
)
from .paths import (
    CATEGORY_PATHS,
    LEVEL_LABELS,
    PathOutcome,
    PathState,
    RowCategories,
    category_column,
    path_levels,
    resolve_path,
    resolve_row_categories,
)
from .terms import ROOT, TermForest, TermNode

__all__ = [
    "AUDIENCE_CHOICES",
    "AUDIENCE_FIELDS",
    "AudienceResolution",
    "CATEGORY_PATHS",
    "LEVEL_LABELS",
    "PRIMARY_FIELD",
    "PathOutcome",
    "PathState",
    "ROOT",
    "RowCategories",
    "SECONDARY_FIELD",
    "TermForest",
    "TermNode",
    "category_column",
    "label_to_value",
    "path_levels",
    "resolve_audience",
    "resolve_path",
    "resolve_row_categories",
    "split_labels",
]
