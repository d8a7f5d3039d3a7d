"""
Batch cursor and job state.

``JobManager.start`` validates and counts the row source, then stores an
immutable ``JobState`` in a TTL store under a fresh job id.
``JobManager.step`` is a pure function of (job, offset, memory): it reads
one batch of rows at ``offset``, hands them to the job's processor and
returns the processor's ``BatchResult`` with the cursor filled in. A
suspended result keeps ``next_offset == offset`` so the caller replays the
same batch once the mismatch is resolved.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from resource_toolkit.core.exceptions import JobNotFound
from resource_toolkit.core.memory import ResolutionMemory
from resource_toolkit.core.results import BatchResult, Mode
from resource_toolkit.loader import CsvRowSource, Row
from resource_toolkit.logging import get_logger

log = get_logger("jobs")

DEFAULT_TTL_SECONDS = 3600


# -----------------------------------------------------------------------------
# Transient key-value store
# -----------------------------------------------------------------------------

class TransientStore:
    """In-process key-value store whose entries expire after a TTL."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._items: Dict[str, Tuple[float, Any]] = {}

    def _alive(self, key: str) -> bool:
        entry = self._items.get(key)
        if entry is None:
            return False
        if entry[0] <= self._clock():
            del self._items[key]
            return False
        return True

    def add(self, key: str, value: Any, ttl: float) -> bool:
        """Store ``value`` unless a live entry already holds ``key``."""
        if self._alive(key):
            return False
        self._items[key] = (self._clock() + ttl, value)
        return True

    def get(self, key: str) -> Any:
        return self._items[key][1] if self._alive(key) else None

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (expires, _) in self._items.items() if expires <= now]
        for k in expired:
            del self._items[k]
        return len(expired)


# -----------------------------------------------------------------------------
# Job state and processors
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class JobState:
    job_id: str
    kind: str
    source_location: str
    mode: Mode
    total: int


class BatchProcessor(Protocol):
    """One importer: a fixed column schema plus a per-batch row handler."""

    kind: str
    batch_size: int
    required_columns: Sequence[str]

    def process(
        self,
        rows: List[Row],
        offset: int,
        mode: Mode,
        memory: ResolutionMemory,
    ) -> BatchResult: ...


class JobManager:
    def __init__(
        self,
        store: Optional[TransientStore] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        source_factory: Callable[..., CsvRowSource] = CsvRowSource,
    ):
        self.store = store or TransientStore()
        self.ttl_seconds = ttl_seconds
        self.source_factory = source_factory

    def _source(self, processor: BatchProcessor, location: Union[str, Any]) -> CsvRowSource:
        return self.source_factory(location, processor.required_columns)

    def _new_job_id(self, kind: str) -> str:
        return f"rit_{kind}_{uuid.uuid4().hex}"

    def start(
        self,
        processor: BatchProcessor,
        location: Union[str, Any],
        mode: Union[Mode, str] = Mode.PREVIEW,
        limit: int = 0,
    ) -> JobState:
        """Validate and count the source; raises ``MissingColumn``/``EmptySource``/``ReadError``."""
        mode = Mode.parse(mode)
        purged = self.store.purge_expired()
        if purged:
            log.debug("Purged %d expired job(s)", purged)
        total = self._source(processor, location).count()
        if limit and 0 < limit < total:
            total = limit

        job_id = self._new_job_id(processor.kind)
        while True:
            state = JobState(job_id, processor.kind, str(location), mode, total)
            if self.store.add(job_id, state, self.ttl_seconds):
                break
            job_id = self._new_job_id(processor.kind)

        log.info("Started %s job %s: %d rows, mode=%s, source=%s", processor.kind, job_id, total, mode.value, location)
        return state

    def get(self, job_id: str) -> JobState:
        state = self.store.get(job_id)
        if state is None:
            raise JobNotFound(job_id)
        return state

    def step(
        self,
        processor: BatchProcessor,
        job_id: str,
        offset: int,
        memory: Optional[ResolutionMemory] = None,
    ) -> BatchResult:
        state = self.get(job_id)
        if state.kind != processor.kind:
            raise ValueError(f"Job {job_id} belongs to {state.kind!r}, not {processor.kind!r}")

        offset = max(0, int(offset))
        count = min(processor.batch_size, max(0, state.total - offset))
        rows = self._source(processor, state.source_location).read(offset, count)

        result = processor.process(rows, offset, state.mode, memory or ResolutionMemory())
        if result.suspended:
            log.info("Job %s suspended at offset %d on %s", job_id, offset, result.mismatch.mapping_key)
            return result

        result.finish(processor.batch_size, state.total)
        log.debug(
            "Job %s step offset=%d rows=%d next=%d done=%s counters=%s",
            job_id, offset, len(rows), result.next_offset, result.done, result.counters,
        )
        return result
