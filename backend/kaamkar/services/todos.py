from __future__ import annotations

from ..persistence import DocumentStore
from ..repository import Repository
from ..schemas import TodoCreate, TodoRecord, TodoUpdate


class TodoService:
    def __init__(self, store: DocumentStore) -> None:
        self.todos = Repository(store, "todos", TodoRecord, label="todo")

    def create(self, user_id: str, payload: TodoCreate) -> TodoRecord:
        return self.todos.create(user_id, {**payload.model_dump(), "completed": False})

    def list(self, user_id: str) -> list[TodoRecord]:
        return self.todos.list_by_owner(user_id)

    def get(self, user_id: str, todo_id: str) -> TodoRecord:
        return self.todos.get_owned(user_id, todo_id)

    def update(self, user_id: str, todo_id: str, payload: TodoUpdate) -> TodoRecord:
        return self.todos.update(user_id, todo_id, payload)

    def toggle(self, user_id: str, todo_id: str) -> TodoRecord:
        todo = self.todos.get_owned(user_id, todo_id)
        return self.todos.update(user_id, todo_id, {"completed": not todo.completed})

    def delete(self, user_id: str, todo_id: str) -> None:
        self.todos.delete(user_id, todo_id)
