"""
Resource importer.

Creates resource records from a CSV export, or updates them when their
``ResourceID`` already exists (duplicate protection). The CSV is usually
the "compiled" output of consultant matching, so it carries a
``Consultant ID`` column next to ``Author Name`` / ``Author Email``.

Author scenarios (all three columns may be pipe-delimited):

  1. no consultant id            -> individual_organization; raw author
                                    name/email become the org/individual fields
  2. one id, no pipes            -> consultant, material_author = [id]
  3. one id plus empty pipe slots-> consultant, material_author = [id]; the
                                    remaining names/emails become co-authors
  4. several ids                 -> consultant, material_author = all ids
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from dateutil import parser as date_parser

from resource_toolkit.core.exceptions import RowError
from resource_toolkit.core.memory import ResolutionMemory
from resource_toolkit.core.results import BatchResult, Mode
from resource_toolkit.loader import Row, cell
from resource_toolkit.logging import get_logger
from resource_toolkit.store.interfaces import CONSULTANT, Directory, RecordStore

log = get_logger("resource_importer")

TITLE = "Title"
RESOURCE_ID = "ResourceID"
REQUIRED_COLUMNS = (TITLE, RESOURCE_ID)

VALID_RESOURCE_TYPES = (
    "assessment", "audio", "issue_brief", "manual", "online_training",
    "presentation", "report", "toolkit", "trainer_tools",
    "training_curriculum", "webinar", "website", "other",
)
VALID_TRAINING_LEVELS = ("101", "202", "advanced")

AUTHOR_CONSULTANT = "consultant"
AUTHOR_INDIVIDUAL = "individual_organization"
EXTERNAL_LINK_LABEL = "Open External Resource."

COUNTERS = [
    "imported",
    "updated",
    "author_consultant",
    "author_individual",
    "skipped_format",
    "errors",
]


# -----------------------------------------------------------------------------
# Column mapping
# -----------------------------------------------------------------------------

def map_resource_type(fmt: str) -> Optional[str]:
    """Slug for a Format value; "" for an empty value, None when unknown."""
    fmt = (fmt or "").strip()
    if not fmt:
        return ""
    slug = fmt.lower().replace(" ", "_")
    return slug if slug in VALID_RESOURCE_TYPES else None


def map_training_level(level: str) -> str:
    level = (level or "").strip()
    if not level:
        return ""
    slug = level.lower().replace(" ", "_")
    if slug in VALID_TRAINING_LEVELS:
        return slug
    if "/" in level:
        first = level.split("/")[0].strip().lower()
        if first in VALID_TRAINING_LEVELS:
            return first
    return ""


def convert_date(value: str) -> str:
    """Any parseable date as YYYYMMDD; "" otherwise."""
    value = (value or "").strip()
    if not value:
        return ""
    try:
        return date_parser.parse(value).strftime("%Y%m%d")
    except (ValueError, OverflowError):
        return ""


def _pipe_parts(raw: str) -> List[str]:
    return [p.strip() for p in raw.split("|")] if raw else []


@dataclass
class ResourceImport:
    title: str
    original_id: str
    description: str
    resource_type: str
    author_type: str
    consultant_ids: List[str] = field(default_factory=list)
    co_author_names: str = ""
    co_author_emails: str = ""
    training_level: str = ""
    added_by_name: str = ""
    added_by_email: str = ""
    date_added: str = ""
    external_link: str = ""

    @property
    def is_consultant(self) -> bool:
        return self.author_type == AUTHOR_CONSULTANT

    def author_label(self) -> str:
        if self.is_consultant and self.consultant_ids and self.co_author_names:
            return f"{len(self.consultant_ids)} consultant(s) + non-consultant co-author(s)"
        if self.is_consultant and len(self.consultant_ids) > 1:
            return f"{len(self.consultant_ids)} consultants"
        if self.is_consultant:
            return "consultant"
        return "individual/org"


def build_import_data(row: Row, resource_type: str) -> ResourceImport:
    id_raw = cell(row, "Consultant ID")
    names_raw = cell(row, "Author Name")
    emails_raw = cell(row, "Author Email")

    id_parts = _pipe_parts(id_raw)
    real_ids = [p for p in id_parts if p]

    author_type = AUTHOR_INDIVIDUAL
    consultant_ids: List[str] = []
    co_names = ""
    co_emails = ""

    if not real_ids:
        co_names, co_emails = names_raw, emails_raw
    elif len(real_ids) == 1 and len(id_parts) > 1:
        # First name/email belongs to the consultant, the rest are co-authors.
        author_type = AUTHOR_CONSULTANT
        consultant_ids = real_ids
        co_names = ", ".join(p for p in _pipe_parts(names_raw)[1:] if p)
        co_emails = ", ".join(p for p in _pipe_parts(emails_raw)[1:] if p)
    else:
        author_type = AUTHOR_CONSULTANT
        consultant_ids = real_ids

    return ResourceImport(
        title=cell(row, TITLE),
        original_id=cell(row, RESOURCE_ID),
        description=row.get("Description") or "",
        resource_type=resource_type,
        author_type=author_type,
        consultant_ids=consultant_ids,
        co_author_names=co_names,
        co_author_emails=co_emails,
        training_level=map_training_level(row.get("Training Level") or ""),
        added_by_name=cell(row, "Added By Name"),
        added_by_email=cell(row, "Added By Email"),
        date_added=convert_date(row.get("Date Added") or ""),
        external_link=cell(row, "External Resource Link"),
    )


def record_fields(data: ResourceImport, valid_consultants: Set[int], updating: bool) -> Dict[str, Any]:
    """Field values written for one import; ``updating`` clears stale author data."""
    fields: Dict[str, Any] = {
        "title": data.title,
        "resource_original_id": data.original_id,
        "resource_status": "waiting",
        "resource_description": data.description,
        "author_type": data.author_type,
        "added_by_name": data.added_by_name,
        "added_by_email": data.added_by_email,
    }
    for name, value in (
        ("resource_type", data.resource_type),
        ("training_level", data.training_level),
        ("date_added", data.date_added),
    ):
        if value:
            fields[name] = value

    if data.is_consultant and data.consultant_ids:
        valid_ids = []
        for cid in data.consultant_ids:
            try:
                cid_int = int(cid)
            except ValueError:
                continue
            if cid_int > 0 and cid_int in valid_consultants:
                valid_ids.append(cid_int)
        if valid_ids:
            fields["material_author"] = valid_ids
        if updating or data.co_author_names:
            fields["organization_or_individual_name"] = data.co_author_names
        if updating or data.co_author_emails:
            fields["organization_or_individual_email"] = data.co_author_emails
    elif not data.is_consultant:
        if data.co_author_names:
            fields["organization_or_individual_name"] = data.co_author_names
        if data.co_author_emails:
            fields["organization_or_individual_email"] = data.co_author_emails
        if updating:
            fields["material_author"] = []

    if data.external_link:
        fields["resource_links"] = [
            {
                "resource_link_label": EXTERNAL_LINK_LABEL,
                "resource_external_link": data.external_link,
                "resource_internal_file": "",
            }
        ]
    return fields


# -----------------------------------------------------------------------------
# Batch processor
# -----------------------------------------------------------------------------

class ResourceImporter:
    kind = "resources"
    required_columns = REQUIRED_COLUMNS

    def __init__(self, store: RecordStore, directory: Directory, batch_size: int = 10):
        self.store = store
        self.directory = directory
        self.batch_size = batch_size

    def process(self, rows: List[Row], offset: int, mode: Mode, memory: ResolutionMemory) -> BatchResult:
        result = BatchResult.begin(mode, offset, COUNTERS)

        batch_ids = {cell(r, RESOURCE_ID) for r in rows} - {""}
        existing = self.store.find_by_external_id(sorted(batch_ids)) if batch_ids else {}
        valid_consultants = {c.id for c in self.directory.list_candidates(CONSULTANT)}

        for i, row in enumerate(rows):
            row_num = offset + i + 2
            data_title = cell(row, TITLE)
            if not data_title:
                result.skip(f"Row {row_num}: Skipped - no title.")
                result.bump("errors")
                continue

            format_raw = cell(row, "Format")
            resource_type = map_resource_type(format_raw)
            if resource_type is None:
                result.skip(
                    f'Row {row_num}: Skipped - Format "{format_raw}" has no matching Resource Type - "{data_title}"'
                )
                result.bump("skipped_format")
                continue

            data = build_import_data(row, resource_type)
            author_label = data.author_label()
            record_id = existing.get(data.original_id) if data.original_id else None

            if record_id is not None:
                if mode.is_live:
                    try:
                        self.store.update(record_id, record_fields(data, valid_consultants, updating=True))
                    except RowError as exc:
                        result.error(f'Row {row_num}: ERROR updating post #{record_id} - "{data.title}" - {exc}')
                        result.bump("errors")
                        continue
                    result.ok(f'Row {row_num}: Updated post #{record_id} - "{data.title}" ({author_label})')
                else:
                    result.ok(f'Row {row_num}: Would update post #{record_id} - "{data.title}" (Author: {author_label})')
                result.bump("updated")
            else:
                if mode.is_live:
                    try:
                        new_id = self.store.create(record_fields(data, valid_consultants, updating=False))
                    except RowError as exc:
                        result.error(f'Row {row_num}: ERROR creating "{data.title}" - {exc}')
                        result.bump("errors")
                        continue
                    result.ok(f'Row {row_num}: Created post #{new_id} - "{data.title}" ({author_label})')
                    if data.original_id:
                        existing[data.original_id] = new_id
                else:
                    result.ok(
                        f'Row {row_num}: Would import - "{data.title}" '
                        f"(Format: {format_raw}, Author: {author_label})"
                    )
                result.bump("imported")

            result.bump("author_consultant" if data.is_consultant else "author_individual")

        log.debug("Resource batch at offset %d: %s", offset, result.counters)
        return result
