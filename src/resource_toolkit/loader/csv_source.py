"""
CSV row source.

Reads data rows from a CSV export as ``{column: raw string}`` mappings.

Rules shared by every importer:
  - header cells are trimmed of whitespace and a leading UTF-8 BOM
  - a data line whose field count differs from the header is ignored,
    both when counting and when slicing, so offsets stay consistent
  - required columns are validated up front (``MissingColumn``)
"""

from __future__ import annotations

import csv
from itertools import islice
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Union

from resource_toolkit.core.exceptions import EmptySource, MissingColumn, ReadError
from resource_toolkit.logging import get_logger

log = get_logger("csv_source")

Row = Dict[str, str]

_HEADER_STRIP = "\ufeff \t\n\r\0\x0b"


def clean_header(cells: Sequence[str]) -> List[str]:
    return [cell.strip(_HEADER_STRIP) for cell in cells]


class CsvRowSource:
    """Row source over one CSV file on disk."""

    def __init__(
        self,
        location: Union[str, Path],
        required_columns: Sequence[str] = (),
        encoding: str = "utf-8",
    ):
        self.location = Path(location)
        self.required_columns = tuple(required_columns)
        self.encoding = encoding
        self._headers: Optional[List[str]] = None

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _open(self):
        try:
            return open(self.location, "r", encoding=self.encoding, newline="")
        except OSError as exc:
            raise ReadError(f"Could not read the CSV file: {self.location}") from exc

    def _iter_rows(self) -> Iterator[Row]:
        with self._open() as handle:
            reader = csv.reader(handle)
            try:
                first = next(reader, None)
                if not first:
                    raise EmptySource("The CSV file appears to be empty.")

                headers = clean_header(first)
                for column in self.required_columns:
                    if column not in headers:
                        raise MissingColumn(column)
                self._headers = headers

                width = len(headers)
                for data in reader:
                    if len(data) == width:
                        yield dict(zip(headers, data))
            except csv.Error as exc:
                raise ReadError(f"Malformed CSV {self.location}: {exc}") from exc
            except UnicodeDecodeError as exc:
                raise ReadError(f"CSV {self.location} is not valid {self.encoding}") from exc

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def headers(self) -> List[str]:
        if self._headers is None:
            # Reading the first row populates the header cache.
            for _ in islice(self._iter_rows(), 1):
                pass
        return list(self._headers or [])

    def count(self) -> int:
        total = sum(1 for _ in self._iter_rows())
        if total == 0:
            raise EmptySource("The CSV file contains no data rows.")
        log.debug("Counted %d rows in %s", total, self.location)
        return total

    def read(self, offset: int, count: int) -> List[Row]:
        if offset < 0 or count <= 0:
            return []
        return list(islice(self._iter_rows(), offset, offset + count))

    def read_all(self) -> List[Row]:
        rows = list(self._iter_rows())
        if not rows:
            raise EmptySource("The CSV file contains no data rows.")
        return rows


def cell(row: Row, column: str) -> str:
    """Trimmed value of ``column``; absent columns read as empty."""
    return (row.get(column) or "").strip()
