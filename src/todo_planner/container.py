from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import AppConfig
from .llm import ChatModel, ModelSettings, TextGenerator, get_chat_model
from .planner import PlannerService
from .prompts import PromptLoader
from .registry import ToolRegistry
from .todos import TodoRepository, TodoService, TodoToolProvider
from .utils.trace_recorder import trace_recorder_from_config


@dataclass(frozen=True)
class Container:
    config: AppConfig
    todo_service: TodoService
    registry: ToolRegistry
    generator: TextGenerator
    planner: PlannerService


def build_container(config: AppConfig, llm: Optional[ChatModel] = None) -> Container:
    if llm is None:
        llm_settings = ModelSettings(
            provider=config.llm_provider,
            model=config.llm_model,
            temperature=config.llm_temperature,
            api_key=config.llm_api_key,
            base_url=config.llm_base_url,
            fake_responses=tuple(config.fake_llm_responses),
        )
        llm = get_chat_model(llm_settings)
    generator = TextGenerator(llm)

    todo_service = TodoService(TodoRepository())
    registry = ToolRegistry([TodoToolProvider(todo_service)])

    planner = PlannerService(
        generator=generator,
        registry=registry,
        prompt_loader=PromptLoader(config.prompt_dir),
        trace_recorder=trace_recorder_from_config(config.trace_recorder, config.trace_output_path),
    )
    return Container(
        config=config,
        todo_service=todo_service,
        registry=registry,
        generator=generator,
        planner=planner,
    )
