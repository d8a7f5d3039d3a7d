"""
Batch step payloads.

A step either completes (counters + log + cursor) or suspends on a
``MismatchToken`` that the caller must resolve before replaying the same
offset. ``BatchResult.to_dict`` produces the wire shape consumed by the
polling client: counters flattened at the top level next to ``log``,
``next_offset``, ``done``, ``mode`` and the optional ``mismatch``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Mode(str, Enum):
    PREVIEW = "dry_run"
    APPLY = "live"

    @classmethod
    def parse(cls, value: Any) -> "Mode":
        # Anything that is not explicitly "live" runs as a dry run.
        if isinstance(value, Mode):
            return value
        return cls.APPLY if str(value).strip().lower() == cls.APPLY.value else cls.PREVIEW

    @property
    def is_live(self) -> bool:
        return self is Mode.APPLY


class LogLevel(str, Enum):
    OK = "ok"
    SKIP = "skip"
    ERROR = "error"


@dataclass(slots=True)
class LogEntry:
    level: LogLevel
    msg: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level.value, "msg": self.msg}


@dataclass(slots=True)
class MismatchOption:
    value: str
    label: str


@dataclass(slots=True)
class MismatchToken:
    """A request for the operator to disambiguate one unresolved label."""

    mapping_key: str
    csv_value: str
    context: str
    options: List[MismatchOption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mapping_key": self.mapping_key,
            "csv_value": self.csv_value,
            "context": self.context,
            "options": [{"value": o.value, "label": o.label} for o in self.options],
        }


@dataclass
class BatchResult:
    mode: Mode
    offset: int
    counters: Dict[str, int] = field(default_factory=dict)
    log: List[LogEntry] = field(default_factory=list)
    next_offset: int = 0
    done: bool = False
    mismatch: Optional[MismatchToken] = None

    @classmethod
    def begin(cls, mode: Mode, offset: int, counter_names: List[str]) -> "BatchResult":
        return cls(mode=mode, offset=offset, counters={name: 0 for name in counter_names})

    # -- accumulation ---------------------------------------------------------

    def bump(self, counter: str, amount: int = 1) -> None:
        self.counters[counter] = self.counters.get(counter, 0) + amount

    def ok(self, msg: str) -> None:
        self.log.append(LogEntry(LogLevel.OK, msg))

    def skip(self, msg: str) -> None:
        self.log.append(LogEntry(LogLevel.SKIP, msg))

    def error(self, msg: str) -> None:
        self.log.append(LogEntry(LogLevel.ERROR, msg))

    # -- completion -----------------------------------------------------------

    @property
    def suspended(self) -> bool:
        return self.mismatch is not None

    def suspend(self, token: MismatchToken) -> "BatchResult":
        self.mismatch = token
        self.next_offset = self.offset
        self.done = False
        return self

    def finish(self, batch_size: int, total: int) -> "BatchResult":
        self.next_offset = self.offset + batch_size
        self.done = self.next_offset >= total
        return self

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.counters)
        payload.update(
            {
                "log": [entry.to_dict() for entry in self.log],
                "next_offset": self.next_offset,
                "done": self.done,
                "mode": self.mode.value,
            }
        )
        if self.mismatch is not None:
            payload["mismatch"] = self.mismatch.to_dict()
        return payload
