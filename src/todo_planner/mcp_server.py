from __future__ import annotations

import logging
import sys
from typing import Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from .config import AppConfig
from .todos import TodoRepository, TodoService, TodoToolProvider
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_mcp_server(service: TodoService, name: str = "todo-mcp") -> FastMCP:
    server = FastMCP(name=name, instructions="To-do list tools: list, create, update and delete todos.")
    for lc_tool in TodoToolProvider(service).get_tools():
        server.add_tool(lc_tool.func, name=lc_tool.name, description=lc_tool.description)
        logger.debug("Exposed MCP tool %s", lc_tool.name)
    return server


def main(config: Optional[AppConfig] = None) -> None:
    """Run a standalone MCP server with its own to-do list.

    The web app mounts the same tools at ``/mcp`` over its shared list.
    """
    load_dotenv()
    config = config or AppConfig.from_env()
    # stdout carries the protocol on the stdio transport
    setup_logging(config.log_level, stream=sys.stderr)
    server = build_mcp_server(TodoService(TodoRepository()), name=config.mcp_server_name)
    logger.info("Starting MCP server %s over %s", config.mcp_server_name, config.mcp_transport)
    server.run(transport=config.mcp_transport)


if __name__ == "__main__":
    main()
