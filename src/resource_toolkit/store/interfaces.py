"""
Narrow interfaces to the content datastore and the network.

The core never talks to a concrete datastore; processors receive objects
satisfying these protocols. ``SnapshotDatastore`` implements the first
three over a JSON document, ``HttpFileFetcher`` implements the last.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Protocol, Sequence

from resource_toolkit.matching import Candidate
from resource_toolkit.taxonomy import TermNode

RESOURCE_CATEGORY = "resource-category"
CONSULTANT = "consultant"


class RecordStore(Protocol):
    def find_by_external_id(self, external_ids: Iterable[str]) -> Dict[str, int]:
        """Map each known external id to its internal record id."""

    def create(self, fields: Mapping[str, Any]) -> int:
        """Create a record; raises ``ValidationError``."""

    def update(self, record_id: int, fields: Mapping[str, Any]) -> int:
        """Update a record; raises ``RecordNotFound`` / ``ValidationError``."""

    def get_title(self, record_id: int) -> str: ...

    def get_field(self, record_id: int, name: str, default: Any = None) -> Any: ...

    def set_fields(self, record_id: int, values: Mapping[str, Any]) -> None: ...

    def set_terms(self, record_id: int, term_ids: Sequence[int], taxonomy: str = RESOURCE_CATEGORY) -> None: ...

    def get_terms(self, record_id: int, taxonomy: str = RESOURCE_CATEGORY) -> List[int]: ...

    def attach(self, local_path: Path, record_id: int, filename: str) -> int:
        """Store a downloaded file against a record; raises ``AttachError``."""

    def list_record_ids(self) -> List[int]: ...


class Directory(Protocol):
    def list_candidates(self, kind: str = CONSULTANT) -> List[Candidate]: ...


class TermSource(Protocol):
    def load_terms(self, taxonomy: str = RESOURCE_CATEGORY) -> List[TermNode]: ...


class FileFetcher(Protocol):
    def download(self, url: str) -> Path:
        """Fetch ``url`` into a local temporary file; raises ``DownloadError``."""
