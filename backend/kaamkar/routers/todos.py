from fastapi import APIRouter, Depends, Response

from .. import deps
from ..auth import current_user_id
from ..schemas import TodoCreate, TodoRecord, TodoUpdate

router = APIRouter(prefix="/todos", tags=["todos"])


@router.post("", response_model=TodoRecord, status_code=201)
def create_todo(payload: TodoCreate, user_id: str = Depends(current_user_id)) -> TodoRecord:
    return deps.todos.create(user_id, payload)


@router.get("", response_model=list[TodoRecord])
def list_todos(user_id: str = Depends(current_user_id)) -> list[TodoRecord]:
    return deps.todos.list(user_id)


@router.get("/{todo_id}", response_model=TodoRecord)
def get_todo(todo_id: str, user_id: str = Depends(current_user_id)) -> TodoRecord:
    return deps.todos.get(user_id, todo_id)


@router.patch("/{todo_id}", response_model=TodoRecord)
def update_todo(todo_id: str, payload: TodoUpdate, user_id: str = Depends(current_user_id)) -> TodoRecord:
    return deps.todos.update(user_id, todo_id, payload)


@router.post("/{todo_id}/toggle", response_model=TodoRecord)
def toggle_todo(todo_id: str, user_id: str = Depends(current_user_id)) -> TodoRecord:
    return deps.todos.toggle(user_id, todo_id)


@router.delete("/{todo_id}", status_code=204)
def delete_todo(todo_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.todos.delete(user_id, todo_id)
    return Response(status_code=204)
