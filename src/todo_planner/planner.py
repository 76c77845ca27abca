"""Planner orchestration.

One request runs through a fixed graph::

    discover -> build_prompt -> request_plan -> parse_plan -> execute_plan -> summarize

Model failures, unreadable direct-JSON plans and missing prompt templates
abort the request. Everything that goes wrong inside a single step ends up as
text in the execution result so the summary can explain it.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, TypedDict

from langgraph.graph import END, StateGraph

from .executor import PlanExecutor
from .llm import TextGenerator
from .parser import PlanParser
from .prompts import PLAN_PROMPT, SUMMARY_PROMPT, PromptLoader, render
from .registry import ToolCallback, ToolRegistry
from .utils.schemas import Plan
from .utils.trace_recorder import TraceRecorder, record_event

logger = logging.getLogger(__name__)

SUMMARY_USER_PROMPT = "Please provide a comprehensive summary based on the above information."
NO_EXECUTION_RESULTS = "No execution results"


class PlannerState(TypedDict, total=False):
    request_id: str
    user_input: str
    tools: List[ToolCallback]
    system_prompt: str
    response: str
    plan: Plan
    execution_result: Optional[str]
    answer: str


def format_tool_catalog(tools: Sequence[ToolCallback]) -> str:
    return "".join(
        '{"function":"%s","description":"%s","schema":"%s"}'
        % (tool.name, tool.description, tool.input_schema)
        for tool in tools
    )


def format_plan_summary(plan: Plan) -> str:
    lines = [f"Total of {len(plan.steps)} steps executed:\n"]
    for index, step in enumerate(plan.steps, start=1):
        line = f"{index}. {step.function_name}"
        if step.description:
            line += f" - {step.description}"
        lines.append(line + "\n")
    return "".join(lines)


class PlannerService:
    def __init__(
        self,
        generator: TextGenerator,
        registry: ToolRegistry,
        prompt_loader: Optional[PromptLoader] = None,
        parser: Optional[PlanParser] = None,
        executor: Optional[PlanExecutor] = None,
        trace_recorder: Optional[TraceRecorder] = None,
    ) -> None:
        self.generator = generator
        self.registry = registry
        self.prompt_loader = prompt_loader or PromptLoader()
        self.parser = parser or PlanParser()
        self.executor = executor or PlanExecutor(trace_recorder=trace_recorder)
        self.trace_recorder = trace_recorder
        self.graph = self._build_graph()

    def plan(self, user_input: str) -> str:
        return self.run(user_input)["answer"]

    def run(self, user_input: str) -> PlannerState:
        logger.info("Starting planning workflow, user input: %s", user_input)
        initial_state: PlannerState = {
            "request_id": str(uuid.uuid4()),
            "user_input": user_input,
        }
        state = self.graph.invoke(initial_state)
        logger.info("Planning workflow completed")
        return state

    def _build_graph(self):
        graph = StateGraph(PlannerState)
        graph.add_node("discover", self._discover_step)
        graph.add_node("build_prompt", self._build_prompt_step)
        graph.add_node("request_plan", self._request_plan_step)
        graph.add_node("parse_plan", self._parse_plan_step)
        graph.add_node("execute_plan", self._execute_plan_step)
        graph.add_node("summarize", self._summarize_step)

        graph.set_entry_point("discover")
        graph.add_edge("discover", "build_prompt")
        graph.add_edge("build_prompt", "request_plan")
        graph.add_edge("request_plan", "parse_plan")
        graph.add_edge("parse_plan", "execute_plan")
        graph.add_edge("execute_plan", "summarize")
        graph.add_edge("summarize", END)
        return graph.compile()

    def _discover_step(self, state: PlannerState) -> PlannerState:
        logger.info("Discovering available tools")
        tools = self.registry.list_tools()
        logger.info("Discovered %d available tools", len(tools))
        for tool in tools:
            logger.debug("Tool: %s - %s", tool.name, tool.description)
        return {**state, "tools": tools}

    def _build_prompt_step(self, state: PlannerState) -> PlannerState:
        template = self.prompt_loader.load(PLAN_PROMPT)
        system_prompt = render(
            template,
            {
                "functions": format_tool_catalog(state["tools"]),
                "input": state["user_input"],
            },
        )
        logger.debug("System prompt prepared, containing %d tool descriptions", len(state["tools"]))
        return {**state, "system_prompt": system_prompt}

    def _request_plan_step(self, state: PlannerState) -> PlannerState:
        logger.info("Calling model to create execution plan")
        self._record_trace(state, "plan_request", {"user_input": state["user_input"]})
        response = self.generator.complete(state["system_prompt"], state["user_input"])
        logger.debug("Model response: %s", response)
        self._record_trace(state, "plan_response", {"response": response})
        return {**state, "response": response}

    def _parse_plan_step(self, state: PlannerState) -> PlannerState:
        plan = self.parser.parse(state["response"])
        logger.info("Model created %d execution steps", len(plan.steps))
        return {**state, "plan": plan}

    def _execute_plan_step(self, state: PlannerState) -> PlannerState:
        execution_result = self.executor.execute(
            state["plan"],
            self.registry,
            request_id=state.get("request_id"),
        )
        return {**state, "execution_result": execution_result}

    def _summarize_step(self, state: PlannerState) -> PlannerState:
        logger.info("Calling model to generate final result")
        template = self.prompt_loader.load(SUMMARY_PROMPT)
        execution_result = state.get("execution_result")
        system_prompt = render(
            template,
            {
                "userInput": state["user_input"],
                "executionPlan": format_plan_summary(state["plan"]),
                "executionResult": execution_result if execution_result is not None else NO_EXECUTION_RESULTS,
            },
        )
        self._record_trace(state, "summary_request", {"system_prompt": system_prompt})
        answer = self.generator.complete(system_prompt, SUMMARY_USER_PROMPT)
        logger.info("Final result generated, length: %d", len(answer))
        self._record_trace(state, "summary_response", {"answer": answer})
        return {**state, "answer": answer}

    def _record_trace(self, state: PlannerState, event: str, data: Dict[str, Any]) -> None:
        record_event(self.trace_recorder, state.get("request_id"), "planner", event, data=data)
