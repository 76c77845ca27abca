from .executor import ExecutionResult, PlanExecutor
from .parser import PlanParseError, PlanParser
from .planner import PlannerService
from .prompts import PromptTemplateError
from .registry import ToolCallback, ToolProvider, ToolRegistry
from .utils.schemas import ExecutionRecord, Plan, PlanStep

__all__ = [
    "ExecutionRecord",
    "ExecutionResult",
    "Plan",
    "PlanExecutor",
    "PlanParseError",
    "PlanParser",
    "PlanStep",
    "PlannerService",
    "PromptTemplateError",
    "ToolCallback",
    "ToolProvider",
    "ToolRegistry",
]
