"""
Datastore and network collaborators.
"""

from .fetcher import HttpFileFetcher, extract_filename, sanitize_url
from .interfaces import CONSULTANT, RESOURCE_CATEGORY, Directory, FileFetcher, RecordStore, TermSource
from .snapshot import SnapshotDatastore

__all__ = [
    "CONSULTANT",
    "Directory",
    "FileFetcher",
    "HttpFileFetcher",
    "RESOURCE_CATEGORY",
    "RecordStore",
    "SnapshotDatastore",
    "TermSource",
    "extract_filename",
    "sanitize_url",
]
