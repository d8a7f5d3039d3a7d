from __future__ import annotations

import typer
from rich.console import Console

from resource_toolkit.cli.commands.assign_taxonomy import assign_taxonomy_command
from resource_toolkit.cli.commands.attach_files import attach_files_command
from resource_toolkit.cli.commands.cleanup_links import cleanup_links_command
from resource_toolkit.cli.commands.import_resources import import_resources_command
from resource_toolkit.cli.commands.match_consultants import match_consultants_command
from resource_toolkit.logging import get_logger, set_debug

app = typer.Typer(
    name="rit",
    help="Resource import toolkit: consultant matching, resource/attachment/taxonomy imports",
    add_completion=False,
)

console = Console()
log = get_logger("cli")


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level to the console and log files"),
):
    if debug:
        set_debug(True)
        log.debug("Debug logging enabled")


app.command("match-consultants")(match_consultants_command)
app.command("import-resources")(import_resources_command)
app.command("attach-files")(attach_files_command)
app.command("assign-taxonomy")(assign_taxonomy_command)
app.command("cleanup-links")(cleanup_links_command)


def main():
    app()


if __name__ == "__main__":
    main()
