"""
CLI command modules for resource_toolkit.

Each command module defines a single Typer-compatible command function.
"""

from resource_toolkit.cli.commands.assign_taxonomy import assign_taxonomy_command
from resource_toolkit.cli.commands.attach_files import attach_files_command
from resource_toolkit.cli.commands.cleanup_links import cleanup_links_command
from resource_toolkit.cli.commands.import_resources import import_resources_command
from resource_toolkit.cli.commands.match_consultants import match_consultants_command

__all__ = [
    "assign_taxonomy_command",
    "attach_files_command",
    "cleanup_links_command",
    "import_resources_command",
    "match_consultants_command",
]
