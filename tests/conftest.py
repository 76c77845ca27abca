from typing import List, Sequence, Tuple

import pytest
from langchain_core.tools import BaseTool, tool

from todo_planner.registry import ToolRegistry


@tool
def echo(text: str) -> str:
    """Echo the text back."""
    return f"echo: {text}"


@tool
def explode() -> str:
    """Always fails."""
    raise RuntimeError("boom")


@tool
def ping() -> str:
    """Answer with pong."""
    return "pong"


class StaticProvider:
    def __init__(self, tools: Sequence[BaseTool], name: str = "static") -> None:
        self.tools = list(tools)
        self.name = name

    def get_tools(self) -> List[BaseTool]:
        return self.tools


class RecordingGenerator:
    def __init__(self, responses: Sequence[str]) -> None:
        self.responses = list(responses)
        self.calls: List[Tuple[str, str]] = []

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.responses.pop(0)


@pytest.fixture
def echo_tool() -> BaseTool:
    return echo


@pytest.fixture
def explode_tool() -> BaseTool:
    return explode


@pytest.fixture
def ping_tool() -> BaseTool:
    return ping


@pytest.fixture
def provider_factory():
    return StaticProvider


@pytest.fixture
def make_registry():
    def _make(*tools: BaseTool) -> ToolRegistry:
        return ToolRegistry([StaticProvider(tools)])

    return _make


@pytest.fixture
def generator_factory():
    return RecordingGenerator
