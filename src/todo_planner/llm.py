from __future__ import annotations

import inspect
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Protocol, Tuple

from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI


class ChatModel(Protocol):
    def invoke(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def stream(self, *args: Any, **kwargs: Any) -> Iterator[Any]:
        ...


@dataclass(frozen=True)
class ModelSettings:
    provider: str
    model: str
    temperature: float
    api_key: str | None = None
    base_url: str | None = None
    fake_responses: Tuple[str, ...] = field(default_factory=tuple)


class ModelProvider(Protocol):
    def get_chat_model(self, settings: ModelSettings) -> ChatModel:
        ...


class OpenAIProvider:
    def get_chat_model(self, settings: ModelSettings) -> ChatModel:
        api_key = settings.api_key or os.getenv("OPENAI_API_KEY")
        kwargs: Dict[str, Any] = {
            "model": settings.model,
            "temperature": settings.temperature,
        }
        if api_key:
            kwargs["api_key"] = api_key
        if settings.base_url:
            kwargs["base_url"] = settings.base_url
        return ChatOpenAI(**kwargs)


class OpenAICompatibleProvider(OpenAIProvider):
    def get_chat_model(self, settings: ModelSettings) -> ChatModel:
        if not settings.base_url:
            raise ValueError("LLM_BASE_URL is required for the openai_compatible provider.")
        return super().get_chat_model(settings)


class AnthropicProvider:
    def get_chat_model(self, settings: ModelSettings) -> ChatModel:
        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError as exc:
            raise RuntimeError(
                "langchain-anthropic is not installed. Install the 'anthropic' extra to use it."
            ) from exc
        kwargs: Dict[str, Any] = {
            "model": settings.model,
            "temperature": settings.temperature,
        }
        api_key = settings.api_key or os.getenv("ANTHROPIC_API_KEY")
        if api_key:
            key_param = _resolve_api_key_param(ChatAnthropic)
            if key_param:
                kwargs[key_param] = api_key
        return ChatAnthropic(**kwargs)


class FakeProvider:
    def get_chat_model(self, settings: ModelSettings) -> ChatModel:
        responses = list(settings.fake_responses) or ["fake-response"]
        return FakeListChatModel(responses=responses)


_PROVIDERS: Dict[str, ModelProvider] = {
    "openai": OpenAIProvider(),
    "openai_compatible": OpenAICompatibleProvider(),
    "anthropic": AnthropicProvider(),
    "fake": FakeProvider(),
}


def get_chat_model(settings: ModelSettings) -> ChatModel:
    provider = _PROVIDERS.get(settings.provider)
    if not provider:
        raise ValueError(f"Unknown LLM provider '{settings.provider}'.")
    return provider.get_chat_model(settings)


class TextGenerator:
    """Text-in, text-out access to a chat model."""

    def __init__(self, llm: ChatModel) -> None:
        self.llm = llm

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        messages: List[BaseMessage] = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]
        return message_text(self.llm.invoke(messages))

    def chat(self, user_prompt: str) -> str:
        return message_text(self.llm.invoke([HumanMessage(content=user_prompt)]))

    def complete_streaming(self, user_prompt: str) -> Iterator[str]:
        for chunk in self.llm.stream([HumanMessage(content=user_prompt)]):
            text = message_text(chunk)
            if text:
                yield text


def message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return "".join(parts)
    return str(content)


def _resolve_api_key_param(cls: type) -> str | None:
    try:
        params = inspect.signature(cls.__init__).parameters
    except (TypeError, ValueError):
        return None
    if "anthropic_api_key" in params:
        return "anthropic_api_key"
    if "api_key" in params:
        return "api_key"
    return None
