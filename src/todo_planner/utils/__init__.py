from .logging import setup_logging
from .schemas import ExecutionRecord, Plan, PlanStep
from .trace_recorder import TraceEvent, TraceRecorder, record_event, trace_recorder_from_config

__all__ = [
    "ExecutionRecord",
    "Plan",
    "PlanStep",
    "TraceEvent",
    "TraceRecorder",
    "record_event",
    "setup_logging",
    "trace_recorder_from_config",
]
