from __future__ import annotations

from pathlib import Path

import typer

from resource_toolkit.cli.utils import open_datastore, run_batch, summary_payload, write_json
from resource_toolkit.config import get_config
from resource_toolkit.importers import ResourceImporter


def import_resources_command(
    csv_file: Path = typer.Argument(..., exists=True, readable=True),
    datastore: Path = typer.Option(..., "--datastore", "-d", help="JSON datastore snapshot"),
    live: bool = typer.Option(False, "--live", help="Write changes (default is a dry run)"),
    limit: int = typer.Option(0, "--limit", min=0, help="Process at most N rows (0 = all)"),
    as_json: bool = typer.Option(False, "--json", help="Print each step payload as JSON"),
):
    """
    Create or update resource records from a (compiled) resources CSV.
    """
    store = open_datastore(datastore)
    processor = ResourceImporter(store, store, batch_size=get_config().batch_size("resources", 10))
    summary = run_batch(processor, csv_file, store, live=live, limit=limit, as_json=as_json)
    if as_json:
        write_json(summary_payload(summary))
