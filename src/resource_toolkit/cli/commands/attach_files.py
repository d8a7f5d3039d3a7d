from __future__ import annotations

from pathlib import Path

import typer

from resource_toolkit.cli.utils import open_datastore, run_batch, summary_payload, write_json
from resource_toolkit.config import get_config
from resource_toolkit.importers import AttachmentImporter
from resource_toolkit.store import HttpFileFetcher


def attach_files_command(
    csv_file: Path = typer.Argument(..., exists=True, readable=True),
    datastore: Path = typer.Option(..., "--datastore", "-d", help="JSON datastore snapshot"),
    live: bool = typer.Option(False, "--live", help="Download and attach (default is a dry run)"),
    limit: int = typer.Option(0, "--limit", min=0, help="Process at most N rows (0 = all)"),
    as_json: bool = typer.Option(False, "--json", help="Print each step payload as JSON"),
):
    """
    Download files listed in a CSV and add them to resource link lists.
    """
    cfg = get_config()
    store = open_datastore(datastore)
    processor = AttachmentImporter(
        store,
        HttpFileFetcher.from_config(cfg),
        batch_size=cfg.batch_size("attachments", 3),
    )
    summary = run_batch(processor, csv_file, store, live=live, limit=limit, as_json=as_json)
    if as_json:
        write_json(summary_payload(summary))
