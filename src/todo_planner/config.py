from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


def _get_list(name: str, separator: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(separator) if item.strip()]


@dataclass(frozen=True)
class AppConfig:
    llm_provider: str
    llm_model: str
    llm_temperature: float
    llm_api_key: Optional[str]
    llm_base_url: Optional[str]
    fake_llm_responses: List[str]
    prompt_dir: Optional[str]
    log_level: str
    trace_recorder: str
    trace_output_path: str
    mcp_server_name: str
    mcp_transport: str

    @classmethod
    def from_env(cls) -> "AppConfig":
        llm_provider = os.getenv("LLM_PROVIDER", "openai").lower()
        llm_model = os.getenv("LLM_MODEL", os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
        llm_temperature = float(os.getenv("LLM_TEMPERATURE", "0"))
        llm_api_key = os.getenv("LLM_API_KEY")
        llm_base_url = os.getenv("LLM_BASE_URL")
        fake_llm_responses = _get_list("FAKE_LLM_RESPONSES", "||")

        prompt_dir = os.getenv("PROMPT_DIR") or None
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        trace_recorder = os.getenv("TRACE_RECORDER", "noop").lower()
        trace_output_path = os.getenv("TRACE_OUTPUT_PATH", "./traces/planner.jsonl")

        mcp_server_name = os.getenv("MCP_SERVER_NAME", "todo-mcp")
        mcp_transport = os.getenv("MCP_TRANSPORT", "stdio")

        return cls(
            llm_provider=llm_provider,
            llm_model=llm_model,
            llm_temperature=llm_temperature,
            llm_api_key=llm_api_key,
            llm_base_url=llm_base_url,
            fake_llm_responses=fake_llm_responses,
            prompt_dir=prompt_dir,
            log_level=log_level,
            trace_recorder=trace_recorder,
            trace_output_path=trace_output_path,
            mcp_server_name=mcp_server_name,
            mcp_transport=mcp_transport,
        )
