# tests/test_csv_source.py

from __future__ import annotations

import pytest

from resource_toolkit.core.exceptions import EmptySource, MissingColumn, ReadError
from resource_toolkit.loader import CsvRowSource, cell, clean_header


def test_header_is_trimmed_of_bom_and_whitespace(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_text("\ufeff Resource ID ,Title\n1,Guide\n", encoding="utf-8")

    source = CsvRowSource(path, ["Resource ID"])
    assert source.headers == ["Resource ID", "Title"]
    assert source.read(0, 5) == [{"Resource ID": "1", "Title": "Guide"}]


def test_ragged_lines_are_ignored_for_count_and_read(tmp_path):
    path = tmp_path / "ragged.csv"
    path.write_text("A,B\n1,2\nbroken\n3,4\n5,6,7\n8,9\n", encoding="utf-8")

    source = CsvRowSource(path, ["A"])
    assert source.count() == 3
    assert [r["A"] for r in source.read(1, 2)] == ["3", "8"]


def test_missing_column(write_csv):
    path = write_csv("x.csv", ["Title"], [{"Title": "t"}])
    with pytest.raises(MissingColumn) as exc:
        CsvRowSource(path, ["Resource ID"]).count()
    assert exc.value.column == "Resource ID"


def test_empty_file_and_header_only(tmp_path, write_csv):
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(EmptySource):
        CsvRowSource(empty).count()

    header_only = write_csv("h.csv", ["Resource ID"], [])
    with pytest.raises(EmptySource):
        CsvRowSource(header_only, ["Resource ID"]).count()


def test_unreadable_file(tmp_path):
    with pytest.raises(ReadError):
        CsvRowSource(tmp_path / "nope.csv").count()


def test_read_bounds(write_csv):
    path = write_csv("r.csv", ["A"], [{"A": str(i)} for i in range(5)])
    source = CsvRowSource(path, ["A"])
    assert source.read(4, 10) == [{"A": "4"}]
    assert source.read(5, 10) == []
    assert source.read(0, 0) == []


def test_helpers():
    assert clean_header(["\ufeffA ", "\tB"]) == ["A", "B"]
    assert cell({"A": "  x "}, "A") == "x"
    assert cell({}, "A") == ""
