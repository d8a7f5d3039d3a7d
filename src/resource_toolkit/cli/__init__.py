"""
CLI package for resource_toolkit.

Provides the Typer application entrypoint and shared CLI utilities.
"""

from resource_toolkit.cli.app import app, main

__all__ = [
    "app",
    "main",
]
