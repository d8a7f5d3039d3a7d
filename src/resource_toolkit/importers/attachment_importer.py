"""
Attachment importer.

Downloads files listed in a CSV and appends them to the ``resource_links``
list of existing resources (matched by ``Resource ID``). Batches are small
(3 rows) because every live row performs network I/O.

Per batch, rows are grouped by Resource ID so each record's link list is
read once and written once. A label already present on the record, or
attached earlier in the same group, is treated as a duplicate.
"""

from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Set
from urllib.parse import unquote

from resource_toolkit.core.exceptions import AttachError, DownloadError, RowError
from resource_toolkit.core.memory import ResolutionMemory
from resource_toolkit.core.results import BatchResult, Mode
from resource_toolkit.loader import Row, cell
from resource_toolkit.logging import get_logger
from resource_toolkit.store.fetcher import extract_filename
from resource_toolkit.store.interfaces import FileFetcher, RecordStore

log = get_logger("attachment_importer")

RESOURCE_ID = "Resource ID"
FILE_URL = "Resource Internal File"
LINK_LABEL = "Resource Link Label"

LINKS_FIELD = "resource_links"
LINK_LABEL_KEY = "resource_link_label"
LINK_EXTERNAL_KEY = "resource_external_link"
LINK_FILE_KEY = "resource_internal_file"

COUNTERS = ["attached", "not_found", "download_errors", "skipped_dup", "errors"]


def existing_labels(links: List[Dict[str, Any]]) -> Set[str]:
    labels = set()
    for link in links:
        label = str(link.get(LINK_LABEL_KEY) or "").strip()
        if label:
            labels.add(label)
    return labels


class AttachmentImporter:
    kind = "attachments"
    required_columns = (RESOURCE_ID, FILE_URL, LINK_LABEL)

    def __init__(self, store: RecordStore, fetcher: FileFetcher, batch_size: int = 3):
        self.store = store
        self.fetcher = fetcher
        self.batch_size = batch_size

    def _sideload(self, url: str, record_id: int) -> int:
        """Download ``url`` and attach it; the temp file never outlives a failure."""
        tmp = self.fetcher.download(url)
        try:
            return self.store.attach(Path(tmp), record_id, extract_filename(url))
        except AttachError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _process_group(self, resource_id: str, record_id: int, file_rows: List[Row],
                       mode: Mode, result: BatchResult) -> None:
        links = self.store.get_field(record_id, LINKS_FIELD) or []
        if not isinstance(links, list):
            links = []
        labels = existing_labels(links)
        new_links: List[Dict[str, Any]] = []

        for file_row in file_rows:
            url = cell(file_row, FILE_URL)
            label = cell(file_row, LINK_LABEL)

            if not url:
                result.skip(f"Resource ID {resource_id}: Empty file URL. Skipping.")
                result.bump("errors")
                continue

            if label and label in labels:
                result.skip(f'Resource ID {resource_id}: "{label}" already in repeater. Skipping.')
                result.bump("skipped_dup")
                continue

            if mode.is_live:
                try:
                    attachment_id = self._sideload(url, record_id)
                except (DownloadError, AttachError) as exc:
                    log.warning("Attach failed for resource %s (%s): %s", resource_id, url, exc)
                    result.error(f'Resource ID {resource_id}: Download failed for "{label}" - {exc}')
                    result.bump("download_errors")
                    continue

                new_links.append({LINK_LABEL_KEY: label, LINK_EXTERNAL_KEY: "", LINK_FILE_KEY: attachment_id})
                result.ok(
                    f'Resource ID {resource_id}: Attached "{label}" (attachment #{attachment_id}) '
                    f"to post #{record_id}"
                )
            else:
                filename = Path(unquote(url)).name
                result.ok(
                    f'Resource ID {resource_id}: Would download "{filename}" and attach as "{label}" '
                    f"to post #{record_id}"
                )

            labels.add(label)
            result.bump("attached")

        if mode.is_live and new_links:
            self.store.set_fields(record_id, {LINKS_FIELD: links + new_links})

    def process(self, rows: List[Row], offset: int, mode: Mode, memory: ResolutionMemory) -> BatchResult:
        result = BatchResult.begin(mode, offset, COUNTERS)

        grouped: "OrderedDict[str, List[Row]]" = OrderedDict()
        for row in rows:
            resource_id = cell(row, RESOURCE_ID)
            if not resource_id:
                result.skip("Row with empty Resource ID. Skipping.")
                result.bump("errors")
                continue
            grouped.setdefault(resource_id, []).append(row)

        id_map = self.store.find_by_external_id(list(grouped)) if grouped else {}

        for resource_id, file_rows in grouped.items():
            record_id = id_map.get(resource_id)
            if record_id is None:
                result.error(
                    f"Resource ID {resource_id}: No matching resource post found. "
                    f"Skipping {len(file_rows)} file(s)."
                )
                result.bump("not_found", len(file_rows))
                continue

            try:
                self._process_group(resource_id, record_id, file_rows, mode, result)
            except RowError as exc:
                result.error(f"Resource ID {resource_id}: ERROR updating post #{record_id} - {exc}")
                result.bump("errors")

        return result
