from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import typer
from rich.console import Console
from rich.table import Table

from resource_toolkit.config import get_config
from resource_toolkit.core.exceptions import ToolkitError
from resource_toolkit.core.jobs import DEFAULT_TTL_SECONDS, BatchProcessor, JobManager, JobState
from resource_toolkit.core.memory import ResolutionMemory
from resource_toolkit.core.pipeline import JobRunner, JobSummary, MismatchHandler
from resource_toolkit.core.results import BatchResult, LogEntry, Mode
from resource_toolkit.exporter import dumps_json
from resource_toolkit.logging import get_logger
from resource_toolkit.store import SnapshotDatastore
from resource_toolkit.utils import configured_dir

console = Console()
log = get_logger("cli")

LEVEL_STYLES = {"ok": "green", "skip": "yellow", "error": "red"}


def open_datastore(path: Path) -> SnapshotDatastore:
    return SnapshotDatastore.open(path, media_dir=configured_dir("media_dir", "media"))


def job_manager() -> JobManager:
    cfg = get_config()
    ttl = float((cfg.jobs or {}).get("ttl_seconds", DEFAULT_TTL_SECONDS))
    return JobManager(ttl_seconds=ttl)


def write_json(
    data: Any,
    *,
    out: Path | None = None,
    pretty: bool = False,
):
    """
    Write JSON to stdout or file.
    """
    payload = dumps_json(data, pretty=pretty)
    if out:
        out.write_text(payload, encoding="utf-8")
    else:
        print(payload)


def fail(exc: Exception, code: int = 1):
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(code)


def print_counters(title: str, counters: Dict[str, int]) -> None:
    table = Table(title=title)
    table.add_column("Counter", style="bold")
    table.add_column("Value", justify="right")
    for name, value in counters.items():
        table.add_row(name.replace("_", " ").title(), str(value))
    console.print(table)


def print_log(entries: Iterable[LogEntry]) -> None:
    for entry in entries:
        style = LEVEL_STYLES.get(entry.level.value, "white")
        console.print(f"[{style}]{entry.level.value.upper():5}[/{style}] {entry.msg}", highlight=False)


def step_printer(as_json: bool):
    """``on_step`` callback: one JSON payload per step, or nothing."""
    if not as_json:
        return None

    def _print(job: JobState, result: BatchResult) -> None:
        write_json({"job_id": job.job_id, **result.to_dict()})

    return _print


def summary_payload(summary: JobSummary) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "job_id": summary.job.job_id,
        "mode": summary.job.mode.value,
        "total": summary.job.total,
        "steps": summary.steps,
        "next_offset": summary.next_offset,
        "done": summary.done,
        **summary.counters,
        "log": [entry.to_dict() for entry in summary.log],
    }
    if summary.pending is not None:
        payload["mismatch"] = summary.pending.to_dict()
    return payload


def run_batch(
    processor: BatchProcessor,
    csv_path: Path,
    store: SnapshotDatastore,
    *,
    live: bool,
    limit: int,
    as_json: bool,
    memory: Optional[ResolutionMemory] = None,
    on_mismatch: Optional[MismatchHandler] = None,
) -> JobSummary:
    """Drive one batch job to completion (or suspension) and report it."""
    mode = Mode.APPLY if live else Mode.PREVIEW
    runner = JobRunner(job_manager(), processor)

    try:
        summary = runner.run(
            csv_path,
            mode=mode,
            limit=limit,
            memory=memory,
            on_mismatch=on_mismatch,
            on_step=step_printer(as_json),
        )
    except ToolkitError as exc:
        log.error("%s job failed: %s", processor.kind, exc)
        fail(exc)

    if mode.is_live:
        store.save()

    if not as_json:
        label = "LIVE" if mode.is_live else "DRY RUN"
        print_log(summary.log)
        print_counters(f"{processor.kind.title()} ({label}, {summary.job.total} rows)", summary.counters)
    return summary
