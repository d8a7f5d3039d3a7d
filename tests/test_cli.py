# tests/test_cli.py

from __future__ import annotations

import json
import logging

from typer.testing import CliRunner

from resource_toolkit.cli import app
from resource_toolkit.logging import set_debug
from resource_toolkit.store import SnapshotDatastore
from resource_toolkit.store.snapshot import RESOURCE

runner = CliRunner()


def _json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def _snapshot(tmp_path):
    store = SnapshotDatastore()
    store.add_record("consultant", "Jane Doe", {"email": "jane@x.org"})
    health = store.add_term("Health")
    store.add_term("Mental Health", health)
    store.add_record(RESOURCE, "Guide", {"resource_original_id": "42"})
    return store.save(tmp_path / "snapshot.json")


def test_match_consultants_writes_exports(tmp_path, write_csv):
    snapshot = _snapshot(tmp_path)
    csv_path = write_csv(
        "authors.csv",
        ["Title", "Author Name", "Author Email"],
        [
            {"Title": "A", "Author Name": "Doe, Jane", "Author Email": ""},
            {"Title": "B", "Author Name": "Nobody", "Author Email": "nobody@elsewhere.net"},
        ],
    )
    out_dir = tmp_path / "exports"
    result = runner.invoke(
        app, ["match-consultants", str(csv_path), "--datastore", str(snapshot), "--out-dir", str(out_dir), "--json"]
    )

    assert result.exit_code == 0, result.output
    payload = _json_lines(result.output)[-1]
    assert payload["stats"]["exact_name"] == 1
    assert payload["stats"]["unmatched"] == 1
    assert len(list(out_dir.glob("compiled-*.csv"))) == 1


def test_match_consultants_missing_column(tmp_path, write_csv):
    snapshot = _snapshot(tmp_path)
    csv_path = write_csv("bad.csv", ["Title"], [{"Title": "A"}])
    result = runner.invoke(app, ["match-consultants", str(csv_path), "--datastore", str(snapshot)])

    assert result.exit_code == 1
    assert "Author Email" in result.output


def test_import_resources_live_saves_snapshot(tmp_path, write_csv):
    snapshot = _snapshot(tmp_path)
    csv_path = write_csv("res.csv", ["Title", "ResourceID"], [{"Title": "New", "ResourceID": "43"}])
    result = runner.invoke(
        app, ["import-resources", str(csv_path), "--datastore", str(snapshot), "--live", "--json"]
    )

    assert result.exit_code == 0, result.output
    summary = _json_lines(result.output)[-1]
    assert summary["imported"] == 1
    assert summary["done"] is True
    assert SnapshotDatastore.open(snapshot).find_by_external_id(["43"])


def test_assign_taxonomy_non_interactive_exits_2(tmp_path, write_csv):
    snapshot = _snapshot(tmp_path)
    csv_path = write_csv(
        "tax.csv",
        ["Resource ID", "Resource Category 1 - Main Category", "Resource Category 1 - Sub Category"],
        [
            {
                "Resource ID": "42",
                "Resource Category 1 - Main Category": "Health",
                "Resource Category 1 - Sub Category": "Nutrition",
            }
        ],
    )
    mappings = tmp_path / "mappings.json"
    args = ["assign-taxonomy", str(csv_path), "--datastore", str(snapshot), "--mappings", str(mappings)]

    result = runner.invoke(app, args + ["--non-interactive"])
    assert result.exit_code == 2
    mismatch = _json_lines(result.output)[-1]["mismatch"]
    assert mismatch["csv_value"] == "Nutrition"
    assert [o["label"] for o in mismatch["options"]] == ["Mental Health"]

    # resolve through the mappings file and rerun
    mappings.write_text(json.dumps({mismatch["mapping_key"]: mismatch["options"][0]["value"]}), encoding="utf-8")
    result = runner.invoke(app, args + ["--non-interactive", "--live"])
    assert result.exit_code == 0, result.output
    store = SnapshotDatastore.open(snapshot)
    record_id = store.find_by_external_id(["42"])["42"]
    assert store.get_terms(record_id) == [int(mismatch["options"][0]["value"])]


def test_assign_taxonomy_interactive_prompt(tmp_path, write_csv):
    snapshot = _snapshot(tmp_path)
    csv_path = write_csv(
        "tax.csv",
        ["Resource ID", "Resource Category 1 - Main Category"],
        [{"Resource ID": "42", "Resource Category 1 - Main Category": "Wellness"}],
    )
    result = runner.invoke(
        app, ["assign-taxonomy", str(csv_path), "--datastore", str(snapshot), "--json"], input="s\n"
    )

    assert result.exit_code == 0, result.output
    summary = _json_lines(result.output)[-1]
    assert summary["terms_skipped"] == 1
    assert summary["done"] is True


def test_cleanup_links_json(tmp_path):
    store = SnapshotDatastore()
    store.add_record(RESOURCE, "Guide", {"resource_links": [{"resource_external_link": "", "resource_internal_file": ""}]})
    snapshot = store.save(tmp_path / "snap.json")

    result = runner.invoke(app, ["cleanup-links", "--datastore", str(snapshot), "--live", "--json"])
    assert result.exit_code == 0, result.output
    report = _json_lines(result.output)[-1]
    assert report["removed"] == 1
    assert report["mode"] == "live"
    assert SnapshotDatastore.open(snapshot).get_field(1, "resource_links") == []


def test_debug_option_raises_log_level(tmp_path):
    snapshot = SnapshotDatastore().save(tmp_path / "snap.json")
    try:
        result = runner.invoke(app, ["--debug", "cleanup-links", "--datastore", str(snapshot), "--json"])
        assert result.exit_code == 0, result.output
        assert logging.getLogger("resource_toolkit.link_cleanup").level == logging.DEBUG
    finally:
        set_debug(False)
    assert logging.getLogger("resource_toolkit.link_cleanup").level == logging.INFO
