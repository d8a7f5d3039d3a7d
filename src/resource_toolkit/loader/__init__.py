"""
Loader package: CSV row sources consumed by the batch cursor.
"""

from .csv_source import CsvRowSource, Row, cell, clean_header

__all__ = [
    "CsvRowSource",
    "Row",
    "cell",
    "clean_header",
]
