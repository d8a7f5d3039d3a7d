"""
Remove empty ``resource_links`` rows.

A link row is kept when either its external link is a non-blank string or
its internal file carries something: a positive attachment id, a dict with
an ``id``, or a non-blank string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from resource_toolkit.core.results import LogEntry, LogLevel, Mode
from resource_toolkit.importers.attachment_importer import LINK_EXTERNAL_KEY, LINK_FILE_KEY, LINKS_FIELD
from resource_toolkit.logging import get_logger
from resource_toolkit.store.interfaces import RecordStore

log = get_logger("link_cleanup")


def _has_file(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, dict):
        return bool(value.get("id"))
    if isinstance(value, (int, float)):
        return int(value) > 0
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text) > 0
        return bool(text)
    return False


def link_has_content(link: Dict[str, Any]) -> bool:
    external = link.get(LINK_EXTERNAL_KEY)
    if isinstance(external, str) and external.strip():
        return True
    return _has_file(link.get(LINK_FILE_KEY))


@dataclass
class CleanupReport:
    mode: Mode
    scanned: int = 0
    cleaned: int = 0
    removed: int = 0
    log: List[LogEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "scanned": self.scanned,
            "cleaned": self.cleaned,
            "removed": self.removed,
            "log": [entry.to_dict() for entry in self.log],
        }


def cleanup_empty_links(store: RecordStore, mode: Mode = Mode.PREVIEW) -> CleanupReport:
    report = CleanupReport(mode=mode)

    for record_id in store.list_record_ids():
        report.scanned += 1
        links = store.get_field(record_id, LINKS_FIELD)
        if not isinstance(links, list) or not links:
            continue

        kept = [link for link in links if isinstance(link, dict) and link_has_content(link)]
        dropped = len(links) - len(kept)
        if not dropped:
            continue

        if mode.is_live:
            store.set_fields(record_id, {LINKS_FIELD: kept})

        report.removed += dropped
        report.cleaned += 1
        verb, rest = ("Removed", "remain") if mode.is_live else ("Would remove", "would remain")
        title = store.get_title(record_id)
        report.log.append(
            LogEntry(
                LogLevel.OK,
                f'Post #{record_id} "{title}": {verb} {dropped} empty row(s), {len(kept)} {rest}.',
            )
        )

    log.info(
        "Link cleanup (%s): scanned=%d cleaned=%d removed=%d",
        mode.value, report.scanned, report.cleaned, report.removed,
    )
    return report
