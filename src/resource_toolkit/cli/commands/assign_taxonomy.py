from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from resource_toolkit.cli.utils import open_datastore, run_batch, summary_payload, write_json
from resource_toolkit.config import get_config
from resource_toolkit.core.memory import SKIP, ResolutionMemory
from resource_toolkit.core.results import MismatchToken
from resource_toolkit.importers import TaxonomyAssigner

console = Console()

SKIP_CHOICE = "s"
QUIT_CHOICE = "q"


def prompt_for_mapping(token: MismatchToken) -> Optional[str]:
    """Ask the operator to map ``token``; SKIP to ignore it, None to stop."""
    console.print(f"\n[bold yellow]Unmatched value[/bold yellow] \"{token.csv_value}\"")
    console.print(f"[dim]{token.context}[/dim]")

    table = Table(show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Option")
    for index, option in enumerate(token.options, start=1):
        table.add_row(str(index), option.label)
    console.print(table)

    choices = [str(i) for i in range(1, len(token.options) + 1)] + [SKIP_CHOICE, QUIT_CHOICE]
    answer = Prompt.ask(
        f"Pick an option, [bold]{SKIP_CHOICE}[/bold] to skip or [bold]{QUIT_CHOICE}[/bold] to stop",
        choices=choices,
        show_choices=False,
        console=console,
    )
    if answer == QUIT_CHOICE:
        return None
    if answer == SKIP_CHOICE:
        return SKIP
    return token.options[int(answer) - 1].value


def assign_taxonomy_command(
    csv_file: Path = typer.Argument(..., exists=True, readable=True),
    datastore: Path = typer.Option(..., "--datastore", "-d", help="JSON datastore snapshot"),
    live: bool = typer.Option(False, "--live", help="Write terms and audiences (default is a dry run)"),
    limit: int = typer.Option(0, "--limit", min=0, help="Process at most N rows (0 = all)"),
    mappings: Optional[Path] = typer.Option(
        None,
        "--mappings",
        "-m",
        help="JSON file of remembered resolutions (read, then updated)",
    ),
    non_interactive: bool = typer.Option(
        False,
        "--non-interactive",
        help="Print the first unresolved value as JSON and exit with code 2",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print each step payload as JSON"),
):
    """
    Assign resource categories and target audiences from a CSV.
    """
    store = open_datastore(datastore)
    memory = ResolutionMemory.load(mappings) if mappings else ResolutionMemory()
    processor = TaxonomyAssigner(store, store, batch_size=get_config().batch_size("taxonomy", 10))

    summary = run_batch(
        processor,
        csv_file,
        store,
        live=live,
        limit=limit,
        as_json=as_json,
        memory=memory,
        on_mismatch=None if non_interactive else prompt_for_mapping,
    )

    if mappings:
        summary.memory.save(mappings)

    if as_json:
        write_json(summary_payload(summary))

    if summary.pending is not None:
        if non_interactive and not as_json:
            write_json({"mismatch": summary.pending.to_dict()})
        elif not as_json:
            console.print(f"[yellow]Stopped at row offset {summary.next_offset}; rerun to continue.[/yellow]")
        raise typer.Exit(2)
