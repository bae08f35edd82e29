from fastapi import APIRouter, Depends, Response

from .. import deps
from ..auth import current_user_id
from ..schemas import NoteCategoryCreate, NoteCategoryRecord, NoteCreate, NoteRecord, NoteUpdate

router = APIRouter(tags=["notes"])


@router.post("/notes", response_model=NoteRecord, status_code=201)
def create_note(payload: NoteCreate, user_id: str = Depends(current_user_id)) -> NoteRecord:
    return deps.notes.create(user_id, payload)


@router.get("/notes", response_model=list[NoteRecord])
def list_notes(categoryId: str | None = None, user_id: str = Depends(current_user_id)) -> list[NoteRecord]:
    return deps.notes.list(user_id, categoryId)


@router.get("/notes/{note_id}", response_model=NoteRecord)
def get_note(note_id: str, user_id: str = Depends(current_user_id)) -> NoteRecord:
    return deps.notes.get(user_id, note_id)


@router.patch("/notes/{note_id}", response_model=NoteRecord)
def update_note(note_id: str, payload: NoteUpdate, user_id: str = Depends(current_user_id)) -> NoteRecord:
    return deps.notes.update(user_id, note_id, payload)


@router.delete("/notes/{note_id}", status_code=204)
def delete_note(note_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.notes.delete(user_id, note_id)
    return Response(status_code=204)


@router.post("/note-categories", response_model=NoteCategoryRecord, status_code=201)
def create_note_category(payload: NoteCategoryCreate, user_id: str = Depends(current_user_id)) -> NoteCategoryRecord:
    return deps.notes.create_category(user_id, payload)


@router.get("/note-categories", response_model=list[NoteCategoryRecord])
def list_note_categories(user_id: str = Depends(current_user_id)) -> list[NoteCategoryRecord]:
    return deps.notes.list_categories(user_id)


@router.delete("/note-categories/{category_id}", status_code=204)
def delete_note_category(category_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.notes.delete_category(user_id, category_id)
    return Response(status_code=204)
