import asyncio

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from todo_planner.config import AppConfig
from todo_planner.container import build_container
from todo_planner.web import app, get_container, mcp_mount


@pytest.fixture
def make_client(monkeypatch):
    monkeypatch.delenv("PROMPT_DIR", raising=False)
    monkeypatch.setenv("TRACE_RECORDER", "noop")

    def _make(responses):
        container = build_container(AppConfig.from_env(), llm=FakeListChatModel(responses=list(responses)))
        app.dependency_overrides[get_container] = lambda: container
        return TestClient(app), container

    yield _make
    app.dependency_overrides.clear()


def test_todo_crud(make_client):
    client, _ = make_client(["unused"])

    created = client.post("/todos", json={"text": "buy milk"})
    assert created.status_code == 201
    assert created.json() == {"id": 1, "text": "buy milk", "done": False}

    updated = client.put("/todos/1", json={"done": True})
    assert updated.json() == {"id": 1, "text": "buy milk", "done": True}
    assert client.get("/todos").json() == [{"id": 1, "text": "buy milk", "done": True}]

    assert client.delete("/todos/1").status_code == 204
    assert client.get("/todos").json() == []


def test_missing_todo_is_404(make_client):
    client, _ = make_client(["unused"])
    assert client.put("/todos/7", json={"done": True}).status_code == 404
    response = client.delete("/todos/7")
    assert response.status_code == 404
    assert response.json() == {"detail": "Todo not found: 7"}


def test_create_todo_requires_text(make_client):
    client, _ = make_client(["unused"])
    assert client.post("/todos", json={"done": True}).status_code == 422


def test_chat_returns_plain_text(make_client):
    client, _ = make_client(["Hello from the model"])
    response = client.get("/chat", params={"userInput": "hi"})
    assert response.status_code == 200
    assert response.text == "Hello from the model"


def test_stream_emits_server_sent_events(make_client):
    client, _ = make_client(["hey"])
    response = client.get("/stream", params={"userInput": "hi"})
    assert response.headers["content-type"].startswith("text/event-stream")
    data = [line[len("data: "):] for line in response.text.splitlines() if line.startswith("data: ")]
    assert "".join(data) == "hey"


def test_plan_runs_tools_and_returns_summary(make_client):
    plan = '{"function": "create", "description": "add it", "input": {"text": "buy milk"}}'
    client, container = make_client([plan, "Added buy milk to your list."])
    response = client.post("/plan", json={"userInput": "add buy milk"})
    assert response.status_code == 200
    assert response.text == "Added buy milk to your list."
    assert [todo.text for todo in container.todo_service.find_all()] == ["buy milk"]


def test_plan_failure_is_500(make_client):
    client, _ = make_client(['{"function": "create", "input": '])
    response = client.post("/plan", json={"userInput": "add something"})
    assert response.status_code == 500
    assert "Unable to parse AI's JSON response" in response.json()["detail"]


def test_plan_requires_user_input(make_client):
    client, _ = make_client(["unused"])
    assert client.post("/plan", json={"userInput": ""}).status_code == 422


def test_mcp_tools_share_the_web_todo_list(make_client):
    client, container = make_client(["unused"])
    client.post("/todos", json={"text": "from rest"})

    server = mcp_mount.load()
    asyncio.run(server.call_tool("create", {"text": "from mcp"}))
    asyncio.run(server.call_tool("updateById", {"id": 1, "done": True}))

    assert client.get("/todos").json() == [
        {"id": 1, "text": "from rest", "done": True},
        {"id": 2, "text": "from mcp", "done": False},
    ]
    assert len(container.todo_service.find_all()) == 2


def test_mcp_mount_follows_the_active_container(make_client):
    make_client(["unused"])
    first = mcp_mount.load()
    assert mcp_mount.load() is first
    make_client(["unused"])
    assert mcp_mount.load() is not first


def test_mcp_is_mounted_on_the_web_app():
    assert any(getattr(route, "path", None) == "/mcp" for route in app.routes)
