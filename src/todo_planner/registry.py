from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from langchain_core.tools import BaseTool

logger = logging.getLogger(__name__)


class ToolProvider(Protocol):
    def get_tools(self) -> Sequence[BaseTool]:
        ...


@dataclass(frozen=True)
class ToolCallback:
    """A registered tool as the planner sees it: name, description, schema, call."""

    tool: BaseTool
    provider: str = "unknown"

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def description(self) -> str:
        return self.tool.description

    @property
    def input_schema(self) -> str:
        schema = self.tool.get_input_schema().model_json_schema()
        return json.dumps(schema, ensure_ascii=False, separators=(",", ":"))

    def call(self, tool_input: str) -> str:
        arguments = _parse_arguments(tool_input)
        result = self.tool.invoke(arguments)
        if isinstance(result, str):
            return result
        return json.dumps(result, ensure_ascii=False, default=str)


class ToolRegistry:
    """Tools collected from explicit providers, discovered once per process."""

    def __init__(self, providers: Iterable[ToolProvider]) -> None:
        self.providers = list(providers)
        self._tools: List[ToolCallback] = []
        self._by_name: Dict[str, ToolCallback] = {}
        self._loaded = False
        self._lock = threading.Lock()

    def list_tools(self) -> List[ToolCallback]:
        self._ensure_loaded()
        return list(self._tools)

    def tool_map(self) -> Dict[str, ToolCallback]:
        self._ensure_loaded()
        return dict(self._by_name)

    def get_tool(self, name: str) -> Optional[ToolCallback]:
        self._ensure_loaded()
        return self._by_name.get(name)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            tools, by_name = self._discover()
            self._tools = tools
            self._by_name = by_name
            self._loaded = True

    def _discover(self) -> tuple[List[ToolCallback], Dict[str, ToolCallback]]:
        logger.info("Discovering tools from %d providers", len(self.providers))
        tools: List[ToolCallback] = []
        by_name: Dict[str, ToolCallback] = {}
        for provider in self.providers:
            label = _provider_label(provider)
            try:
                provided = list(provider.get_tools())
            except Exception:
                logger.exception("Failed to load tools from provider %s, skipping it", label)
                continue
            for tool in provided:
                existing = by_name.get(tool.name)
                if existing is not None:
                    if existing.tool is not tool:
                        logger.warning(
                            "Tool name collision for '%s': %s already registered it, ignoring the one from %s",
                            tool.name,
                            existing.provider,
                            label,
                        )
                    continue
                callback = ToolCallback(tool=tool, provider=label)
                by_name[tool.name] = callback
                tools.append(callback)
                logger.debug("Registered tool %s from %s", tool.name, label)
        logger.info("Tool discovery completed: %d tools registered", len(tools))
        return tools, by_name


def _provider_label(provider: Any) -> str:
    return getattr(provider, "name", None) or provider.__class__.__name__


def _parse_arguments(tool_input: str) -> Dict[str, Any]:
    if not tool_input or not tool_input.strip():
        return {}
    arguments = json.loads(tool_input)
    if arguments is None:
        return {}
    if not isinstance(arguments, dict):
        raise ValueError("Tool input must be a JSON object.")
    return arguments
