from __future__ import annotations

from ..persistence import DocumentStore
from ..repository import Repository
from ..schemas import NoteCategoryCreate, NoteCategoryRecord, NoteCreate, NoteRecord, NoteUpdate


class NoteService:
    def __init__(self, store: DocumentStore) -> None:
        self.notes = Repository(store, "notes", NoteRecord, label="note")
        self.categories = Repository(
            store,
            "noteCategories",
            NoteCategoryRecord,
            detached=(("notes", "categoryId"), ("noteCategories", "parentId")),
            label="note category",
        )

    def create(self, user_id: str, payload: NoteCreate) -> NoteRecord:
        if payload.categoryId:
            self.categories.get_owned(user_id, payload.categoryId)
        return self.notes.create(user_id, payload)

    def list(self, user_id: str, category_id: str | None = None) -> list[NoteRecord]:
        if category_id:
            return self.notes.list_by_owner(user_id, {"categoryId": category_id})
        return self.notes.list_by_owner(user_id)

    def get(self, user_id: str, note_id: str) -> NoteRecord:
        return self.notes.get_owned(user_id, note_id)

    def update(self, user_id: str, note_id: str, payload: NoteUpdate) -> NoteRecord:
        if payload.categoryId:
            self.categories.get_owned(user_id, payload.categoryId)
        return self.notes.update(user_id, note_id, payload)

    def delete(self, user_id: str, note_id: str) -> None:
        self.notes.delete(user_id, note_id)

    def create_category(self, user_id: str, payload: NoteCategoryCreate) -> NoteCategoryRecord:
        if payload.parentId:
            self.categories.get_owned(user_id, payload.parentId)
        return self.categories.create(user_id, payload)

    def list_categories(self, user_id: str) -> list[NoteCategoryRecord]:
        return self.categories.list_by_owner(user_id, order_field="createdAt", direction="asc")

    def delete_category(self, user_id: str, category_id: str) -> None:
        """Remove a category; its notes and subcategories stay but lose the reference."""
        self.categories.delete(user_id, category_id)
