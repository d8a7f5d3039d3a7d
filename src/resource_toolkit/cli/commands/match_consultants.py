from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from resource_toolkit.cli.utils import fail, open_datastore, write_json
from resource_toolkit.config import get_config
from resource_toolkit.core.exceptions import ToolkitError
from resource_toolkit.exporter import export_match_report
from resource_toolkit.loader import CsvRowSource
from resource_toolkit.matching import MatchSettings, match_rows
from resource_toolkit.matching.consultants import REQUIRED_COLUMNS
from resource_toolkit.store import CONSULTANT
from resource_toolkit.utils import configured_dir

console = Console()


def match_consultants_command(
    csv_file: Path = typer.Argument(..., exists=True, readable=True),
    datastore: Path = typer.Option(..., "--datastore", "-d", help="JSON datastore snapshot"),
    out_dir: Optional[Path] = typer.Option(
        None,
        "--out-dir",
        "-o",
        help="Directory for matched/unmatched/compiled CSVs (default: paths.exports_dir)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the statistics as JSON"),
):
    """
    Match CSV authors to consultant records and write the three result CSVs.
    """
    store = open_datastore(datastore)
    source = CsvRowSource(csv_file, REQUIRED_COLUMNS)
    try:
        rows = source.read_all()
    except ToolkitError as exc:
        fail(exc)

    candidates = store.list_candidates(CONSULTANT)
    report = match_rows(rows, candidates, MatchSettings.from_config(get_config()))
    export = export_match_report(report, source.headers, out_dir or configured_dir("exports_dir", "exports"))

    if as_json:
        write_json({"stats": report.summary(), "files": export})
        return

    table = Table(title=f"Consultant Matching ({len(candidates)} consultants)")
    table.add_column("Outcome", style="bold")
    table.add_column("Rows", justify="right")
    for name, value in report.summary().items():
        table.add_row(name.replace("_", " ").title(), str(value))
    console.print(table)

    console.print(f"Matched:   {export.matched}")
    console.print(f"Unmatched: {export.unmatched}")
    console.print(f"Compiled:  {export.compiled}")
