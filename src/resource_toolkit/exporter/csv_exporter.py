"""
csv_exporter.py
CSV output of consultant matching.

Three timestamped files land in the export directory:

- ``matched-<ts>.csv``    matched rows, all source columns + Consultant ID / Match Type
- ``unmatched-<ts>.csv``  Author Name / Author Email of unmatched and multi-author rows
- ``compiled-<ts>.csv``   every row, ready for the resource importer
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from resource_toolkit.loader import Row
from resource_toolkit.logging import get_logger
from resource_toolkit.matching.consultants import (
    AUTHOR_EMAIL,
    AUTHOR_NAME,
    CONSULTANT_ID,
    MATCH_TYPE,
    MatchReport,
)

log = get_logger("csv_exporter")

TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"
UNMATCHED_COLUMNS = [AUTHOR_NAME, AUTHOR_EMAIL]


@dataclass(slots=True)
class MatchExport:
    matched: Path
    unmatched: Path
    compiled: Path


def output_columns(headers: Sequence[str]) -> List[str]:
    """Source headers followed by the two match columns (never duplicated)."""
    columns = [h for h in headers if h not in (CONSULTANT_ID, MATCH_TYPE)]
    return columns + [CONSULTANT_ID, MATCH_TYPE]


def write_rows(rows: Sequence[Row], path: Path, columns: Sequence[str]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(columns), extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({c: row.get(c, "") for c in columns})
    log.info("Wrote %d row(s) to %s", len(rows), path)
    return path


def export_match_report(
    report: MatchReport,
    headers: Sequence[str],
    out_dir: Path,
    timestamp: Optional[str] = None,
) -> MatchExport:
    ts = timestamp or datetime.now().strftime(TIMESTAMP_FORMAT)
    out_dir = Path(out_dir)
    columns = output_columns(headers)

    return MatchExport(
        matched=write_rows(report.matched, out_dir / f"matched-{ts}.csv", columns),
        unmatched=write_rows(report.unmatched + report.skipped, out_dir / f"unmatched-{ts}.csv", UNMATCHED_COLUMNS),
        compiled=write_rows(report.compiled, out_dir / f"compiled-{ts}.csv", columns),
    )
