"""
Exporter package.

Re-exports the CSV writers used by consultant matching and the JSON helpers
used by the CLI.
"""

from __future__ import annotations

from .csv_exporter import MatchExport, export_match_report, write_rows
from .json_exporter import dumps_json, to_json_compatible

__all__ = ["MatchExport", "dumps_json", "export_match_report", "to_json_compatible", "write_rows"]
