from __future__ import annotations

import json
import threading
from typing import Any, Iterable, List, Optional

from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, ConfigDict, Field


class Todo(BaseModel):
    id: int
    text: str
    done: bool = False


class TodoDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = Field(..., description="What needs to be done.")
    done: bool = Field(default=False, description="Whether the todo is already finished.")


class TodoUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = Field(default=None, description="Id of the todo to update.")
    text: Optional[str] = Field(default=None, description="New text, unchanged when omitted.")
    done: Optional[bool] = Field(default=None, description="New status, unchanged when omitted.")


class TodoNotFoundError(RuntimeError):
    def __init__(self, todo_id: Optional[int]) -> None:
        super().__init__(f"Todo not found: {todo_id}")
        self.todo_id = todo_id


class TodoRepository:
    """In-memory list of todos with generated ids."""

    def __init__(self, todos: Optional[Iterable[Todo]] = None) -> None:
        self._todos: List[Todo] = [todo.model_copy() for todo in todos or []]
        self._next_id = max((todo.id for todo in self._todos), default=0) + 1
        self._lock = threading.RLock()

    def find_all(self) -> List[Todo]:
        with self._lock:
            return [todo.model_copy() for todo in self._todos]

    def find_by_id(self, todo_id: int) -> Optional[Todo]:
        with self._lock:
            for todo in self._todos:
                if todo.id == todo_id:
                    return todo.model_copy()
        return None

    def exists_by_id(self, todo_id: Optional[int]) -> bool:
        return todo_id is not None and self.find_by_id(todo_id) is not None

    def add(self, draft: TodoDraft) -> Todo:
        with self._lock:
            todo = Todo(id=self._next_id, text=draft.text, done=draft.done)
            self._next_id += 1
            self._todos.append(todo)
            return todo.model_copy()

    def save(self, todo: Todo) -> Todo:
        with self._lock:
            for position, existing in enumerate(self._todos):
                if existing.id == todo.id:
                    self._todos[position] = todo.model_copy()
                    return todo.model_copy()
            self._todos.append(todo.model_copy())
            self._next_id = max(self._next_id, todo.id + 1)
            return todo.model_copy()

    def delete_by_id(self, todo_id: int) -> None:
        self.delete_all_by_id([todo_id])

    def delete_all_by_id(self, todo_ids: Iterable[int]) -> None:
        doomed = set(todo_ids)
        with self._lock:
            self._todos = [todo for todo in self._todos if todo.id not in doomed]


class TodoService:
    def __init__(self, repository: TodoRepository) -> None:
        self.repository = repository

    def find_all(self) -> List[Todo]:
        return self.repository.find_all()

    def create(self, draft: TodoDraft) -> Todo:
        return self.repository.add(draft)

    def update_by_id(self, todo_id: int, update: TodoUpdate) -> Todo:
        todo = self.repository.find_by_id(todo_id)
        if todo is None:
            raise TodoNotFoundError(todo_id)
        if update.done is not None:
            todo.done = update.done
        if update.text is not None:
            todo.text = update.text
        return self.repository.save(todo)

    def delete_by_id(self, todo_id: int) -> None:
        if not self.repository.exists_by_id(todo_id):
            raise TodoNotFoundError(todo_id)
        self.repository.delete_by_id(todo_id)

    def create_multiple(self, drafts: Iterable[TodoDraft]) -> List[Todo]:
        return [self.repository.add(draft) for draft in drafts]

    def delete_multiple_by_ids(self, todo_ids: List[int]) -> None:
        for todo_id in todo_ids:
            if not self.repository.exists_by_id(todo_id):
                raise TodoNotFoundError(todo_id)
        self.repository.delete_all_by_id(todo_ids)

    def update_multiple_by_ids(self, updates: Iterable[TodoUpdate]) -> List[Todo]:
        updated: List[Todo] = []
        for update in updates:
            if not self.repository.exists_by_id(update.id):
                raise TodoNotFoundError(update.id)
            updated.append(self.update_by_id(update.id, update))
        return updated


def _as_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=True)


def _dump(todos: Iterable[Todo]) -> List[dict]:
    return [todo.model_dump() for todo in todos]


def create_todo_tools(service: TodoService) -> List[BaseTool]:
    @tool("findAll")
    def find_all() -> str:
        """Get all todos"""
        return _as_json(_dump(service.find_all()))

    @tool("create", args_schema=TodoDraft)
    def create(text: str, done: bool = False) -> str:
        """Create new todo. cannot set id, if set id, will be failed"""
        return _as_json(service.create(TodoDraft(text=text, done=done)).model_dump())

    @tool("updateById")
    def update_by_id(id: int, text: Optional[str] = None, done: Optional[bool] = None) -> str:
        """Update todo by id. Should set id, if not call findAll first."""
        todo = service.update_by_id(id, TodoUpdate(text=text, done=done))
        return _as_json(todo.model_dump())

    @tool("deleteById")
    def delete_by_id(id: int) -> str:
        """Delete todo by id"""
        service.delete_by_id(id)
        return _as_json({"deleted": [id]})

    @tool("createMultiple")
    def create_multiple(todos: List[TodoDraft]) -> str:
        """create Multiple todos,cannot set id, if set id, will be failed"""
        drafts = [TodoDraft.model_validate(item) for item in todos]
        return _as_json(_dump(service.create_multiple(drafts)))

    @tool("deleteMultipleByIds")
    def delete_multiple_by_ids(ids: List[int]) -> str:
        """delete Multiple todos by ids"""
        service.delete_multiple_by_ids(list(ids))
        return _as_json({"deleted": list(ids)})

    @tool("updateMultipleByIds")
    def update_multiple_by_ids(todos: List[TodoUpdate]) -> str:
        """update Multiple todos by ids. Should set id, if not call findAll first."""
        updates = [TodoUpdate.model_validate(item) for item in todos]
        return _as_json(_dump(service.update_multiple_by_ids(updates)))

    return [
        find_all,
        create,
        update_by_id,
        delete_by_id,
        create_multiple,
        delete_multiple_by_ids,
        update_multiple_by_ids,
    ]


class TodoToolProvider:
    name = "todos"

    def __init__(self, service: TodoService) -> None:
        self.service = service
        self._tools: Optional[List[BaseTool]] = None

    def get_tools(self) -> List[BaseTool]:
        if self._tools is None:
            self._tools = create_todo_tools(self.service)
        return self._tools
