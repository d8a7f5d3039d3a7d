class ToolkitError(Exception):
    """Base exception for toolkit failures."""


# Source-level failures: fatal to the job, surfaced verbatim to the caller.

class SourceError(ToolkitError):
    """Raised when the row source cannot be used."""


class MissingColumn(SourceError):
    """Raised when a required CSV column is absent."""

    def __init__(self, column: str):
        super().__init__(f'CSV must contain a "{column}" column.')
        self.column = column


class EmptySource(SourceError):
    """Raised when the CSV has no header or no data rows."""


class ReadError(SourceError):
    """Raised when the CSV cannot be opened or parsed."""


class JobNotFound(ToolkitError):
    """Raised when a job id is unknown or its state has expired."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id!r} expired or not found. Please restart the job.")
        self.job_id = job_id


# Row-level failures: counted and logged, the batch continues.

class RowError(ToolkitError):
    """Base class for failures local to a single row."""


class RecordNotFound(RowError):
    """Raised when a row references a record that does not exist."""


class ValidationError(RowError):
    """Raised when the datastore rejects a create/update."""


class AttachError(RowError):
    """Raised when a downloaded file cannot be attached to a record."""


class DownloadError(RowError):
    """Raised when a remote file cannot be fetched."""
