from __future__ import annotations

from pathlib import Path

import typer

from resource_toolkit.cli.utils import open_datastore, print_counters, print_log, write_json
from resource_toolkit.core.results import Mode
from resource_toolkit.importers import cleanup_empty_links


def cleanup_links_command(
    datastore: Path = typer.Option(..., "--datastore", "-d", help="JSON datastore snapshot"),
    live: bool = typer.Option(False, "--live", help="Write the filtered link lists"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
):
    """
    Remove link rows that carry neither an external link nor a file.
    """
    store = open_datastore(datastore)
    mode = Mode.APPLY if live else Mode.PREVIEW
    report = cleanup_empty_links(store, mode)

    if mode.is_live and report.cleaned:
        store.save()

    if as_json:
        write_json(report)
        return

    print_log(report.log)
    print_counters(
        f"Link Cleanup ({'LIVE' if mode.is_live else 'DRY RUN'})",
        {"scanned": report.scanned, "cleaned": report.cleaned, "removed": report.removed},
    )
