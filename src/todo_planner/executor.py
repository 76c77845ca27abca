import json
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .registry import ToolCallback, ToolRegistry
from .utils.schemas import ExecutionRecord, Plan, PlanStep
from .utils.trace_recorder import TraceRecorder, record_event

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    content: Optional[str]
    records: List[ExecutionRecord] = field(default_factory=list)


class PlanExecutor:
    def __init__(self, trace_recorder: Optional[TraceRecorder] = None) -> None:
        self.trace_recorder = trace_recorder

    def execute(
        self,
        plan: Plan,
        registry: ToolRegistry,
        request_id: Optional[str] = None,
    ) -> Optional[str]:
        return self.execute_detailed(plan, registry, request_id=request_id).content

    def execute_detailed(
        self,
        plan: Plan,
        registry: ToolRegistry,
        request_id: Optional[str] = None,
    ) -> ExecutionResult:
        logger.info("Executing execution plan")
        if not plan.steps:
            logger.warning("No execution plan to execute")
            return ExecutionResult(content=None)

        tool_map = registry.tool_map()
        logger.debug("Tool mapping table prepared, containing %d tools", len(tool_map))

        records: List[ExecutionRecord] = []
        total = len(plan.steps)
        for index, step in enumerate(plan.steps, start=1):
            logger.info("Executing step %d/%d: %s", index, total, step.function_name)
            result = self._execute_step(step, tool_map, request_id)
            records.append(ExecutionRecord(index=index, step=step, result=result))

        content = "Results:\n" + "\n".join(record.format() for record in records)
        logger.info("Execution plan completed, result length: %d", len(content))
        return ExecutionResult(content=content, records=records)

    def _execute_step(
        self,
        step: PlanStep,
        tool_map: Dict[str, ToolCallback],
        request_id: Optional[str],
    ) -> str:
        tool_name = step.function_name
        started = time.time()
        tool = tool_map.get(tool_name)
        if tool is None:
            logger.warning("Tool not found: %s", tool_name)
            self._record_trace(request_id, tool_name, "not_found", {}, started)
            return f"Tool not found: {tool_name}"

        tool_input = json.dumps(step.variables or {}, ensure_ascii=False)
        logger.info("Executing tool: %s, input parameters: %s", tool_name, tool_input)
        try:
            output = tool.call(tool_input)
        except Exception as exc:
            logger.exception("Tool %s execution failed", tool_name)
            self._record_trace(
                request_id,
                tool_name,
                "error",
                {"input": tool_input, "error": str(exc)},
                started,
            )
            return f"Error executing tool {tool_name}: {exc}"

        logger.info("Tool %s executed successfully", tool_name)
        self._record_trace(
            request_id,
            tool_name,
            "success",
            {"input": tool_input, "output": output},
            started,
        )
        return output

    def _record_trace(
        self,
        request_id: Optional[str],
        tool_name: str,
        status: str,
        data: Dict[str, str],
        started: float,
    ) -> None:
        record_event(self.trace_recorder, request_id, "execute_plan", tool_name, status, data, started=started)
