import csv
import sys
from pathlib import Path

import pytest

# Ensure the project src directory is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def write_csv(tmp_path):
    """Write ``rows`` (dicts) under ``header`` to a CSV in tmp_path and return its path."""

    def _write(name, header, rows):
        path = tmp_path / name
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            for row in rows:
                writer.writerow([row.get(col, "") for col in header])
        return path

    return _write


@pytest.fixture
def store():
    from resource_toolkit.store import SnapshotDatastore

    return SnapshotDatastore()
