"""
snapshot.py
JSON snapshot datastore.

Implements ``RecordStore``, ``Directory`` and ``TermSource`` over a single
JSON document so the toolkit can run end-to-end without a live CMS:

    {
      "next_id": 100,
      "records": {
        "12": {"type": "resource", "title": "...", "status": "publish",
               "fields": {"resource_original_id": "42", ...},
               "terms": {"resource-category": [7]}},
        "30": {"type": "consultant", "title": "Jane Doe, MD",
               "status": "publish", "fields": {"email": "jane@example.org"}}
      },
      "terms": {"resource-category": [{"id": 3, "name": "Health", "parent": 0}]},
      "attachments": {"101": {"record_id": 12, "filename": "guide.pdf", "path": "..."}}
    }

Record, term and attachment ids share one counter (``next_id``).
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from resource_toolkit.core.exceptions import AttachError, RecordNotFound, ValidationError
from resource_toolkit.logging import get_logger
from resource_toolkit.matching import Candidate
from resource_toolkit.store.interfaces import CONSULTANT, RESOURCE_CATEGORY
from resource_toolkit.taxonomy import TermNode

log = get_logger("snapshot_store")

RESOURCE = "resource"
TRASH = "trash"
PUBLISH = "publish"
ORIGINAL_ID_FIELD = "resource_original_id"


def _empty_document() -> Dict[str, Any]:
    return {"next_id": 1, "records": {}, "terms": {}, "attachments": {}}


class SnapshotDatastore:
    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        *,
        path: Optional[Path] = None,
        media_dir: Optional[Path] = None,
    ):
        self.data = _empty_document()
        self.data.update(data or {})
        self.path = path
        self.media_dir = media_dir

        # Keep the counter ahead of any id already present.
        used = [int(k) for k in self.data["records"]] + [int(k) for k in self.data["attachments"]]
        used += [int(t["id"]) for terms in self.data["terms"].values() for t in terms]
        self.data["next_id"] = max([int(self.data.get("next_id", 1)), *(u + 1 for u in used)])

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    @classmethod
    def open(cls, path: Union[str, Path], media_dir: Optional[Path] = None) -> "SnapshotDatastore":
        path = Path(path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
        else:
            data = {}
        log.info("Opened datastore snapshot %s (%d records)", path, len(data.get("records", {})))
        return cls(data, path=path, media_dir=media_dir)

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        target = Path(path) if path else self.path
        if target is None:
            raise ValueError("No snapshot path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.data, f, ensure_ascii=False, indent=2)
        log.info("Saved datastore snapshot %s", target)
        return target

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _next_id(self) -> int:
        new_id = int(self.data["next_id"])
        self.data["next_id"] = new_id + 1
        return new_id

    def _record(self, record_id: int) -> Dict[str, Any]:
        rec = self.data["records"].get(str(record_id))
        if rec is None:
            raise RecordNotFound(f"Record #{record_id} not found")
        return rec

    def _split_title(self, fields: Mapping[str, Any]) -> tuple:
        values = dict(fields)
        title = values.pop("title", None)
        return title, values

    # -------------------------------------------------------------------------
    # RecordStore
    # -------------------------------------------------------------------------

    def add_record(self, record_type: str, title: str, fields: Optional[Mapping[str, Any]] = None,
                   status: str = PUBLISH) -> int:
        """Insert a record of any type (used for seeding snapshots)."""
        record_id = self._next_id()
        self.data["records"][str(record_id)] = {
            "type": record_type,
            "title": title,
            "status": status,
            "fields": dict(fields or {}),
            "terms": {},
        }
        return record_id

    def find_by_external_id(self, external_ids: Iterable[str]) -> Dict[str, int]:
        wanted = {str(e) for e in external_ids if str(e) != ""}
        found: Dict[str, int] = {}
        for key, rec in self.data["records"].items():
            if rec.get("type") != RESOURCE or rec.get("status") == TRASH:
                continue
            original = str(rec.get("fields", {}).get(ORIGINAL_ID_FIELD, ""))
            if original in wanted:
                found[original] = int(key)
        return found

    def create(self, fields: Mapping[str, Any]) -> int:
        title, values = self._split_title(fields)
        if not (title or "").strip():
            raise ValidationError("Content, title, and excerpt are empty.")
        return self.add_record(RESOURCE, title, values)

    def update(self, record_id: int, fields: Mapping[str, Any]) -> int:
        rec = self._record(record_id)
        title, values = self._split_title(fields)
        if title is not None:
            if not title.strip():
                raise ValidationError("Title cannot be empty.")
            rec["title"] = title
        rec.setdefault("fields", {}).update(values)
        return int(record_id)

    def get_title(self, record_id: int) -> str:
        return self._record(record_id).get("title", "")

    def get_field(self, record_id: int, name: str, default: Any = None) -> Any:
        return self._record(record_id).get("fields", {}).get(name, default)

    def set_fields(self, record_id: int, values: Mapping[str, Any]) -> None:
        self._record(record_id).setdefault("fields", {}).update(values)

    def set_terms(self, record_id: int, term_ids: Sequence[int], taxonomy: str = RESOURCE_CATEGORY) -> None:
        self._record(record_id).setdefault("terms", {})[taxonomy] = [int(t) for t in term_ids]

    def get_terms(self, record_id: int, taxonomy: str = RESOURCE_CATEGORY) -> List[int]:
        return list(self._record(record_id).get("terms", {}).get(taxonomy, []))

    def attach(self, local_path: Path, record_id: int, filename: str) -> int:
        if str(record_id) not in self.data["records"]:
            raise AttachError(f"Record #{record_id} not found")
        local_path = Path(local_path)
        if not local_path.is_file():
            raise AttachError(f"Downloaded file is missing: {local_path}")

        attachment_id = self._next_id()
        stored = local_path
        if self.media_dir is not None:
            try:
                self.media_dir.mkdir(parents=True, exist_ok=True)
                stored = self.media_dir / f"{attachment_id}-{filename}"
                shutil.move(str(local_path), stored)
            except OSError as exc:
                raise AttachError(f"Could not store {filename}: {exc}") from exc

        self.data["attachments"][str(attachment_id)] = {
            "record_id": int(record_id),
            "filename": filename,
            "path": str(stored),
        }
        return attachment_id

    def list_record_ids(self) -> List[int]:
        return sorted(
            int(k) for k, rec in self.data["records"].items() if rec.get("type") == RESOURCE
        )

    # -------------------------------------------------------------------------
    # Directory / TermSource
    # -------------------------------------------------------------------------

    def list_candidates(self, kind: str = CONSULTANT) -> List[Candidate]:
        out: List[Candidate] = []
        for key, rec in self.data["records"].items():
            if rec.get("type") != kind or rec.get("status") != PUBLISH:
                continue
            email = str(rec.get("fields", {}).get("email") or "")
            out.append(Candidate.build(int(key), rec.get("title", ""), email))
        return out

    def add_term(self, name: str, parent_id: int = 0, taxonomy: str = RESOURCE_CATEGORY) -> int:
        term_id = self._next_id()
        self.data["terms"].setdefault(taxonomy, []).append(
            {"id": term_id, "name": name, "parent": int(parent_id)}
        )
        return term_id

    def load_terms(self, taxonomy: str = RESOURCE_CATEGORY) -> List[TermNode]:
        return [
            TermNode(id=int(t["id"]), name=str(t.get("name", "")), parent_id=int(t.get("parent", 0) or 0))
            for t in self.data["terms"].get(taxonomy, [])
        ]
