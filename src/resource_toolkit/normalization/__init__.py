"""
resource_toolkit.normalization package

- name_normalization: author names / emails for consultant matching
"""

from .name_normalization import (
    CREDENTIALS,
    is_credential,
    is_multi_author,
    normalize_email,
    normalize_name,
    strip_credentials,
)

__all__ = [
    "CREDENTIALS",
    "is_credential",
    "is_multi_author",
    "normalize_email",
    "normalize_name",
    "strip_credentials",
]
