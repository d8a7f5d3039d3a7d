from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from resource_toolkit.core.jobs import BatchProcessor, JobManager, JobState
from resource_toolkit.core.memory import SKIP, ResolutionMemory
from resource_toolkit.core.results import BatchResult, LogEntry, LogLevel, MismatchToken, Mode
from resource_toolkit.logging import get_logger

log = get_logger("pipeline")

# Returns the chosen option value, SKIP, or None to stop the job suspended.
MismatchHandler = Callable[[MismatchToken], Optional[str]]
StepHandler = Callable[[JobState, BatchResult], None]


@dataclass
class JobSummary:
    job: JobState
    counters: Dict[str, int] = field(default_factory=dict)
    log: List[LogEntry] = field(default_factory=list)
    memory: ResolutionMemory = field(default_factory=ResolutionMemory)
    steps: int = 0
    next_offset: int = 0
    done: bool = False
    pending: Optional[MismatchToken] = None


class JobRunner:
    """
    Caller-side driver of the batch protocol.
    No business logic lives here: it starts a job, requests steps, and on a
    mismatch asks ``on_mismatch`` for a resolution, merges it into memory and
    replays the same offset.
    """

    def __init__(self, manager: JobManager, processor: BatchProcessor):
        self.manager = manager
        self.processor = processor

    def run(
        self,
        location,
        mode: Union[Mode, str] = Mode.PREVIEW,
        limit: int = 0,
        memory: Optional[ResolutionMemory] = None,
        on_mismatch: Optional[MismatchHandler] = None,
        on_step: Optional[StepHandler] = None,
    ) -> JobSummary:
        job = self.manager.start(self.processor, location, mode, limit)
        summary = JobSummary(job=job, memory=memory or ResolutionMemory())
        return self.resume(summary, on_mismatch=on_mismatch, on_step=on_step)

    def resume(
        self,
        summary: JobSummary,
        on_mismatch: Optional[MismatchHandler] = None,
        on_step: Optional[StepHandler] = None,
    ) -> JobSummary:
        job = summary.job
        offset = summary.next_offset

        while not summary.done:
            result = self.manager.step(self.processor, job.job_id, offset, summary.memory)
            summary.steps += 1
            if on_step is not None:
                on_step(job, result)

            if result.suspended:
                token = result.mismatch
                resolution = on_mismatch(token) if on_mismatch is not None else None
                if resolution is None:
                    summary.pending = token
                    summary.next_offset = offset
                    log.info("Job %s left suspended at offset %d (%s)", job.job_id, offset, token.mapping_key)
                    return summary

                summary.memory = summary.memory.remember(token.mapping_key, resolution)
                if resolution == SKIP:
                    summary.log.append(LogEntry(LogLevel.SKIP, f'User skipped: "{token.csv_value}"'))
                else:
                    summary.log.append(LogEntry(LogLevel.OK, f'User mapped: "{token.csv_value}" → "{resolution}"'))
                summary.pending = None
                continue

            # Only completed steps count; a suspended step is replayed in full.
            for name, value in result.counters.items():
                summary.counters[name] = summary.counters.get(name, 0) + value
            summary.log.extend(result.log)
            summary.next_offset = offset = result.next_offset
            summary.done = result.done

        log.info("Job %s finished after %d step(s): %s", job.job_id, summary.steps, summary.counters)
        return summary
