from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ReadError, StoreError, ValidationError, WriteError
from .persistence import DocumentStore
from .query import SERVER_TIMESTAMP, Increment, Query, Range, ServerTimestamp

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _as_data(payload: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    return dict(payload)


class Repository(Generic[RecordT]):
    """Owner-scoped CRUD over one collection.

    ``dependents`` lists ``(collection, foreign_key)`` pairs removed together
    with a parent document in the same write batch; ``detached`` pairs are
    kept but have the reference cleared in that batch.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        model: type[RecordT],
        dependents: tuple[tuple[str, str], ...] = (),
        detached: tuple[tuple[str, str], ...] = (),
        label: str | None = None,
    ) -> None:
        self.store = store
        self.collection = collection
        self.model = model
        self.dependents = dependents
        self.detached = detached
        self.label = label or collection

    @contextmanager
    def _classified(self, error_cls: type[StoreError], action: str) -> Iterator[None]:
        try:
            yield
        except (StoreError, ValidationError, HTTPException):
            raise
        except Exception as exc:
            logger.error("failed to %s %s: %s", action, self.collection, exc)
            raise error_cls(f"Failed to {action} {self.label}") from exc

    def _record(self, doc: dict[str, Any]) -> RecordT:
        return self.model.model_validate(doc)

    def create(self, owner_id: str | None, payload: BaseModel | dict[str, Any]) -> RecordT:
        data = _as_data(payload)
        data.update(userId=owner_id, createdAt=SERVER_TIMESTAMP, updatedAt=SERVER_TIMESTAMP)
        with self._classified(WriteError, "create"):
            doc = self.store.add(self.collection, data)
        logger.debug("created %s/%s", self.collection, doc["id"])
        return self._record(doc)

    def _query(
        self,
        filters: dict[str, Any],
        order_field: str | None,
        direction: str,
        value_range: Range | None,
        limit: int | None,
        tiebreak: str | None,
    ) -> list[RecordT]:
        order: list[tuple[str, str]] = []
        if order_field:
            order.append((order_field, direction))
        if tiebreak:
            order.append((tiebreak, direction))
        query = Query(filters=filters, range=value_range, order=order, limit=limit)
        with self._classified(ReadError, "load"):
            docs = self.store.query(self.collection, query)
        return [self._record(doc) for doc in docs]

    def list_by_owner(
        self,
        owner_id: str,
        filters: dict[str, Any] | None = None,
        order_field: str | None = "createdAt",
        direction: str = "desc",
        value_range: Range | None = None,
        limit: int | None = None,
        tiebreak: str | None = None,
    ) -> list[RecordT]:
        return self._query({"userId": owner_id, **(filters or {})}, order_field, direction, value_range, limit, tiebreak)

    def list_where(
        self,
        filters: dict[str, Any],
        order_field: str | None = "createdAt",
        direction: str = "desc",
        value_range: Range | None = None,
        limit: int | None = None,
        tiebreak: str | None = None,
    ) -> list[RecordT]:
        return self._query(dict(filters), order_field, direction, value_range, limit, tiebreak)

    def get_by_id(self, doc_id: str) -> RecordT | None:
        with self._classified(ReadError, "load"):
            doc = self.store.get(self.collection, doc_id)
        return self._record(doc) if doc is not None else None

    def get_owned(self, owner_id: str, doc_id: str) -> RecordT:
        record = self.get_by_id(doc_id)
        # foreign documents look exactly like missing ones
        if record is None or getattr(record, "userId", None) != owner_id:
            raise HTTPException(status_code=404, detail=f"{self.label} not found: {doc_id}")
        return record

    def _check_merged(self, current: RecordT, data: dict[str, Any]) -> None:
        """Reject changes that would leave a document its record model cannot load."""
        plain = {k: v for k, v in data.items() if not isinstance(v, (ServerTimestamp, Increment))}
        try:
            self.model.model_validate({**current.model_dump(), **plain})
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "body"
            raise ValidationError(f"{field}: {first.get('msg', 'invalid value')}", field=field) from exc

    def update(self, owner_id: str, doc_id: str, changes: BaseModel | dict[str, Any]) -> RecordT:
        current = self.get_owned(owner_id, doc_id)
        if isinstance(changes, BaseModel):
            data = changes.model_dump(exclude_unset=True)
        else:
            data = dict(changes)
        for protected in ("id", "userId", "createdAt"):
            data.pop(protected, None)
        self._check_merged(current, data)
        data["updatedAt"] = SERVER_TIMESTAMP
        with self._classified(WriteError, "update"):
            doc = self.store.update(self.collection, doc_id, data)
        return self._record(doc)

    def transform(
        self, owner_id: str, doc_id: str, compute: Callable[[RecordT], dict[str, Any]]
    ) -> RecordT:
        """Derive changes from the locked current document and write them in one atomic step."""
        self.get_owned(owner_id, doc_id)

        def locked(doc: dict[str, Any]) -> dict[str, Any]:
            changes = dict(compute(self._record(doc)))
            changes["updatedAt"] = SERVER_TIMESTAMP
            return changes

        with self._classified(WriteError, "update"):
            doc = self.store.transform(self.collection, doc_id, locked)
        return self._record(doc)

    def increment(self, owner_id: str, doc_id: str, field: str, delta: float) -> RecordT:
        self.get_owned(owner_id, doc_id)
        with self._classified(WriteError, "update"):
            doc = self.store.update(self.collection, doc_id, {field: Increment(delta), "updatedAt": SERVER_TIMESTAMP})
        return self._record(doc)

    def delete(self, owner_id: str, doc_id: str) -> int:
        """Delete a document and its dependents atomically; returns how many documents went away."""
        self.get_owned(owner_id, doc_id)
        batch = self.store.batch()
        removed = 1
        with self._classified(ReadError, "load"):
            for collection, foreign_key in self.dependents:
                for child in self.store.query(collection, Query(filters={"userId": owner_id, foreign_key: doc_id})):
                    batch.delete(collection, child["id"])
                    removed += 1
            for collection, foreign_key in self.detached:
                for child in self.store.query(collection, Query(filters={"userId": owner_id, foreign_key: doc_id})):
                    batch.update(collection, child["id"], {foreign_key: None, "updatedAt": SERVER_TIMESTAMP})
        batch.delete(self.collection, doc_id)
        with self._classified(WriteError, "delete"):
            batch.commit()
        logger.info("deleted %s/%s with %d dependents", self.collection, doc_id, removed - 1)
        return removed
