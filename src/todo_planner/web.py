from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Iterable, Iterator, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field

from .config import AppConfig
from .container import Container, build_container
from .mcp_server import build_mcp_server
from .todos import Todo, TodoDraft, TodoNotFoundError, TodoUpdate
from .utils.logging import setup_logging

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="Todo Planner")


class PlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_input: str = Field(..., alias="userInput", min_length=1)


class TodoRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None
    done: Optional[bool] = None


@lru_cache(maxsize=1)
def get_container() -> Container:
    config = AppConfig.from_env()
    setup_logging(config.log_level)
    return build_container(config)


@app.exception_handler(TodoNotFoundError)
def todo_not_found(request: Request, exc: TodoNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/chat", response_class=PlainTextResponse)
def chat(
    user_input: str = Query(..., alias="userInput"),
    container: Container = Depends(get_container),
) -> str:
    return container.generator.chat(user_input)


@app.get("/stream")
def stream(
    user_input: str = Query(..., alias="userInput"),
    container: Container = Depends(get_container),
) -> StreamingResponse:
    chunks = container.generator.complete_streaming(user_input)
    return StreamingResponse(_sse_events(chunks), media_type="text/event-stream")


@app.post("/plan", response_class=PlainTextResponse)
def plan(payload: PlanRequest, container: Container = Depends(get_container)) -> str:
    try:
        return container.planner.plan(payload.user_input)
    except Exception as exc:
        logger.exception("Planning request failed")
        raise HTTPException(status_code=500, detail=f"Planner error: {exc}") from exc


@app.get("/todos", response_model=List[Todo])
def list_todos(container: Container = Depends(get_container)) -> List[Todo]:
    return container.todo_service.find_all()


@app.post("/todos", response_model=Todo, status_code=201)
def create_todo(payload: TodoRequest, container: Container = Depends(get_container)) -> Todo:
    if payload.text is None:
        raise HTTPException(status_code=422, detail="text is required")
    draft = TodoDraft(text=payload.text, done=bool(payload.done))
    return container.todo_service.create(draft)


@app.put("/todos/{todo_id}", response_model=Todo)
def update_todo(
    todo_id: int,
    payload: TodoRequest,
    container: Container = Depends(get_container),
) -> Todo:
    update = TodoUpdate(id=todo_id, text=payload.text, done=payload.done)
    return container.todo_service.update_by_id(todo_id, update)


@app.delete("/todos/{todo_id}", status_code=204)
def delete_todo(todo_id: int, container: Container = Depends(get_container)) -> Response:
    container.todo_service.delete_by_id(todo_id)
    return Response(status_code=204)


def _sse_events(chunks: Iterable[str]) -> Iterator[str]:
    for chunk in chunks:
        lines = chunk.split("\n")
        yield "".join(f"data: {line}\n" for line in lines) + "\n"


class McpMount:
    """ASGI app serving the todo tools over MCP (SSE) from the web container.

    The server is built on first use so MCP clients, ``/todos`` and ``/plan``
    all work on the same ``TodoService``.
    """

    def __init__(self, resolve_container: Callable[[], Container]) -> None:
        self.resolve_container = resolve_container
        self._container: Optional[Container] = None
        self._server: Optional[FastMCP] = None
        self._asgi: Any = None

    def load(self) -> FastMCP:
        container = self.resolve_container()
        if container is not self._container or self._server is None:
            self._server = build_mcp_server(container.todo_service, name=container.config.mcp_server_name)
            self._asgi = self._server.sse_app()
            self._container = container
            logger.info("MCP server %s mounted at /mcp", container.config.mcp_server_name)
        return self._server

    async def __call__(self, scope: Any, receive: Any, send: Any) -> None:
        self.load()
        await self._asgi(scope, receive, send)


def _resolve_container() -> Container:
    return app.dependency_overrides.get(get_container, get_container)()


mcp_mount = McpMount(_resolve_container)
app.mount("/mcp", mcp_mount)
