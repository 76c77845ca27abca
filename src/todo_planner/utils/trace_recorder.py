"""Per-request traces of planner runs.

Each event carries the request id, so one planning request can be followed
from the plan request through every tool call to the summary.
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass
class TraceEvent:
    request_id: str
    phase: str
    event: str
    status: str
    data: Dict[str, Any] = field(default_factory=dict)
    latency_ms: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=True, default=str)


class TraceRecorder(Protocol):
    def record(self, event: TraceEvent) -> None:
        ...


class NoopTraceRecorder:
    def record(self, event: TraceEvent) -> None:
        return None


class MemoryTraceRecorder:
    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def record(self, event: TraceEvent) -> None:
        self.events.append(event)

    def for_request(self, request_id: str) -> List[TraceEvent]:
        return [event for event in self.events if event.request_id == request_id]


class JsonlTraceRecorder:
    """One JSON line per event. Web requests may share a single recorder."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(self, event: TraceEvent) -> None:
        line = event.to_json() + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)


def record_event(
    recorder: Optional[TraceRecorder],
    request_id: Optional[str],
    phase: str,
    event: str,
    status: str = "success",
    data: Optional[Mapping[str, Any]] = None,
    started: Optional[float] = None,
) -> None:
    """Record one event; a missing recorder or request id records nothing."""
    if recorder is None or not request_id:
        return
    latency_ms = int((time.time() - started) * 1000) if started is not None else None
    recorder.record(
        TraceEvent(
            request_id=request_id,
            phase=phase,
            event=event,
            status=status,
            data=dict(data or {}),
            latency_ms=latency_ms,
        )
    )


def trace_recorder_from_config(mode: str, path: str) -> TraceRecorder:
    if mode == "jsonl":
        return JsonlTraceRecorder(path)
    if mode == "memory":
        return MemoryTraceRecorder()
    if mode != "noop":
        logger.warning("Unknown trace recorder '%s', tracing disabled", mode)
    return NoopTraceRecorder()
