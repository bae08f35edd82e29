from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, MetaData, String, Table, create_engine, delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from .config import Settings, settings
from .errors import DocumentExistsError, DocumentNotFoundError, IndexRequiredError
from .indexes import DEFAULT_INDEXES, IndexSpec, index_link, required_fields
from .query import Query, apply_changes
from .store import InMemoryStore

logger = logging.getLogger(__name__)


@dataclass
class BatchOperation:
    kind: str  # "set" | "update" | "delete"
    collection: str
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)


class WriteBatch:
    """Collects writes that the store commits as one all-or-nothing unit."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self.operations: list[BatchOperation] = []

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> WriteBatch:
        self.operations.append(BatchOperation("set", collection, doc_id, data))
        return self

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> WriteBatch:
        self.operations.append(BatchOperation("update", collection, doc_id, changes))
        return self

    def delete(self, collection: str, doc_id: str) -> WriteBatch:
        self.operations.append(BatchOperation("delete", collection, doc_id))
        return self

    def commit(self) -> None:
        if self.operations:
            self._store.commit(self.operations)


class DocumentStore:
    def __init__(self, enforce_indexes: bool = True, index_url_template: str = settings.index_url_template) -> None:
        self.enforce_indexes = enforce_indexes
        self.index_url_template = index_url_template

    def add(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def transform(
        self, collection: str, doc_id: str, compute: Callable[[dict[str, Any]], dict[str, Any]]
    ) -> dict[str, Any]:
        """Apply the changes ``compute`` derives from the current document while it is locked."""
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def query(self, collection: str, query: Query) -> list[dict[str, Any]]:
        raise NotImplementedError

    def commit(self, operations: list[BatchOperation]) -> None:
        raise NotImplementedError

    def list_indexes(self) -> list[IndexSpec]:
        raise NotImplementedError

    def declare_index(self, spec: IndexSpec) -> None:
        raise NotImplementedError

    def counts(self) -> dict[str, int]:
        raise NotImplementedError

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def check_index(self, collection: str, query: Query) -> None:
        if not self.enforce_indexes:
            return
        eq, tail = query.shape()
        needed = required_fields(eq, tail)
        if needed is None:
            return
        if any(spec.satisfies(collection, eq, tail) for spec in self.list_indexes()):
            return
        link = index_link(self.index_url_template, collection, needed)
        logger.warning("missing composite index on %s%s; declare it at %s", collection, needed, link)
        raise IndexRequiredError(collection, needed, link)


class InMemoryDocumentStore(DocumentStore):
    def __init__(
        self,
        store: InMemoryStore | None = None,
        indexes: Iterable[IndexSpec] = DEFAULT_INDEXES,
        enforce_indexes: bool = True,
        index_url_template: str = settings.index_url_template,
    ) -> None:
        super().__init__(enforce_indexes, index_url_template)
        self.store = store or InMemoryStore()
        self.store.indexes.update(indexes)

    def add(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        doc_id = self.store.make_id()
        with self.store.lock:
            row = apply_changes({}, data, self.store.now())
            self.store.collection(collection)[doc_id] = row
            return {"id": doc_id, **copy.deepcopy(row)}

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self.store.lock:
            row = self.store.collection(collection).get(doc_id)
            if row is None:
                return None
            return {"id": doc_id, **copy.deepcopy(row)}

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        with self.store.lock:
            rows = self.store.collection(collection)
            if doc_id not in rows:
                raise DocumentNotFoundError(collection, doc_id)
            rows[doc_id] = apply_changes(rows[doc_id], changes, self.store.now())
            return {"id": doc_id, **copy.deepcopy(rows[doc_id])}

    def transform(
        self, collection: str, doc_id: str, compute: Callable[[dict[str, Any]], dict[str, Any]]
    ) -> dict[str, Any]:
        with self.store.lock:
            rows = self.store.collection(collection)
            if doc_id not in rows:
                raise DocumentNotFoundError(collection, doc_id)
            changes = compute({"id": doc_id, **copy.deepcopy(rows[doc_id])})
            rows[doc_id] = apply_changes(rows[doc_id], changes, self.store.now())
            return {"id": doc_id, **copy.deepcopy(rows[doc_id])}

    def delete(self, collection: str, doc_id: str) -> None:
        with self.store.lock:
            self.store.collection(collection).pop(doc_id, None)

    def query(self, collection: str, query: Query) -> list[dict[str, Any]]:
        self.check_index(collection, query)
        with self.store.lock:
            docs = [{"id": doc_id, **copy.deepcopy(row)} for doc_id, row in self.store.collection(collection).items()]
        return query.apply(docs)

    def commit(self, operations: list[BatchOperation]) -> None:
        with self.store.lock:
            now = self.store.now()
            staged = {op.collection: dict(self.store.collection(op.collection)) for op in operations}
            for op in operations:
                self._apply(staged, op, now)
            self.store.collections.update(staged)

    def _apply(self, staged: dict[str, dict[str, dict]], op: BatchOperation, now: datetime) -> None:
        rows = staged[op.collection]
        if op.kind == "delete":
            rows.pop(op.doc_id, None)
        elif op.kind == "set":
            if op.doc_id in rows:
                raise DocumentExistsError(op.collection, op.doc_id)
            rows[op.doc_id] = apply_changes({}, op.data, now)
        elif op.kind == "update":
            if op.doc_id not in rows:
                raise DocumentNotFoundError(op.collection, op.doc_id)
            rows[op.doc_id] = apply_changes(rows[op.doc_id], op.data, now)
        else:
            raise ValueError(f"unknown batch operation: {op.kind}")

    def list_indexes(self) -> list[IndexSpec]:
        with self.store.lock:
            return sorted(self.store.indexes, key=lambda s: (s.collection, s.fields))

    def declare_index(self, spec: IndexSpec) -> None:
        with self.store.lock:
            self.store.indexes.add(spec)

    def counts(self) -> dict[str, int]:
        with self.store.lock:
            return {name: len(rows) for name, rows in sorted(self.store.collections.items())}


metadata = MetaData()

documents_table = Table(
    "documents",
    metadata,
    Column("collection", String(64), primary_key=True),
    Column("id", String(64), primary_key=True),
    Column("owner_id", String(64), nullable=True, index=True),
    Column("data", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

document_indexes_table = Table(
    "document_indexes",
    metadata,
    Column("collection", String(64), primary_key=True),
    Column("fields", String(512), primary_key=True),
)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {"$datetime": value.isoformat()}
    if isinstance(value, date):
        return {"$date": value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {"$datetime"}:
            return datetime.fromisoformat(value["$datetime"])
        if set(value) == {"$date"}:
            return date.fromisoformat(value["$date"])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


class SqlDocumentStore(DocumentStore):
    """Documents stored as JSON rows; ``userId`` is mirrored into ``owner_id`` for filtering."""

    def __init__(
        self,
        database_url: str,
        enforce_indexes: bool = True,
        index_url_template: str = settings.index_url_template,
    ) -> None:
        super().__init__(enforce_indexes, index_url_template)
        self.engine: Engine = create_engine(database_url, future=True, pool_pre_ping=True)
        metadata.create_all(self.engine)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _row_to_doc(row: Any) -> dict[str, Any]:
        return {"id": row.id, **_decode(row.data)}

    def add(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        doc_id = uuid4().hex
        now = self._now()
        row = apply_changes({}, data, now)
        with self.engine.begin() as conn:
            conn.execute(
                documents_table.insert().values(
                    collection=collection,
                    id=doc_id,
                    owner_id=row.get("userId"),
                    data=_encode(row),
                    created_at=now,
                    updated_at=now,
                )
            )
        return {"id": doc_id, **row}

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(documents_table.c.id, documents_table.c.data).where(
                    documents_table.c.collection == collection, documents_table.c.id == doc_id
                )
            ).first()
        return self._row_to_doc(row) if row is not None else None

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        with self.engine.begin() as conn:
            merged = self._update_locked(conn, collection, doc_id, changes, self._now())
        return {"id": doc_id, **merged}

    def _update_locked(
        self,
        conn: Any,
        collection: str,
        doc_id: str,
        changes: dict[str, Any] | Callable[[dict[str, Any]], dict[str, Any]],
        now: datetime,
    ) -> dict[str, Any]:
        row = conn.execute(
            select(documents_table.c.data)
            .where(documents_table.c.collection == collection, documents_table.c.id == doc_id)
            .with_for_update()
        ).first()
        if row is None:
            raise DocumentNotFoundError(collection, doc_id)
        current = _decode(row.data)
        if callable(changes):
            changes = changes({"id": doc_id, **current})
        merged = apply_changes(current, changes, now)
        conn.execute(
            update(documents_table)
            .where(documents_table.c.collection == collection, documents_table.c.id == doc_id)
            .values(data=_encode(merged), owner_id=merged.get("userId"), updated_at=now)
        )
        return merged

    def transform(
        self, collection: str, doc_id: str, compute: Callable[[dict[str, Any]], dict[str, Any]]
    ) -> dict[str, Any]:
        with self.engine.begin() as conn:
            merged = self._update_locked(conn, collection, doc_id, compute, self._now())
        return {"id": doc_id, **merged}

    def delete(self, collection: str, doc_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                delete(documents_table).where(documents_table.c.collection == collection, documents_table.c.id == doc_id)
            )

    def query(self, collection: str, query: Query) -> list[dict[str, Any]]:
        self.check_index(collection, query)
        stmt = select(documents_table.c.id, documents_table.c.data).where(documents_table.c.collection == collection)
        owner = query.filters.get("userId")
        if owner is not None:
            stmt = stmt.where(documents_table.c.owner_id == owner)
        with self.engine.begin() as conn:
            rows = conn.execute(stmt).fetchall()
        return query.apply([self._row_to_doc(row) for row in rows])

    def commit(self, operations: list[BatchOperation]) -> None:
        now = self._now()
        with self.engine.begin() as conn:
            for op in operations:
                if op.kind == "delete":
                    conn.execute(
                        delete(documents_table).where(
                            documents_table.c.collection == op.collection, documents_table.c.id == op.doc_id
                        )
                    )
                elif op.kind == "set":
                    row = apply_changes({}, op.data, now)
                    try:
                        conn.execute(
                            documents_table.insert().values(
                                collection=op.collection,
                                id=op.doc_id,
                                owner_id=row.get("userId"),
                                data=_encode(row),
                                created_at=now,
                                updated_at=now,
                            )
                        )
                    except IntegrityError as exc:
                        raise DocumentExistsError(op.collection, op.doc_id) from exc
                elif op.kind == "update":
                    self._update_locked(conn, op.collection, op.doc_id, op.data, now)
                else:
                    raise ValueError(f"unknown batch operation: {op.kind}")

    def list_indexes(self) -> list[IndexSpec]:
        with self.engine.begin() as conn:
            rows = conn.execute(select(document_indexes_table)).fetchall()
        return sorted(
            (IndexSpec(row.collection, tuple(row.fields.split(","))) for row in rows),
            key=lambda s: (s.collection, s.fields),
        )

    def declare_index(self, spec: IndexSpec) -> None:
        if spec in self.list_indexes():
            return
        with self.engine.begin() as conn:
            conn.execute(document_indexes_table.insert().values(collection=spec.collection, fields=",".join(spec.fields)))

    def counts(self) -> dict[str, int]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(documents_table.c.collection, func.count()).group_by(documents_table.c.collection)
            ).fetchall()
        return {row[0]: row[1] for row in sorted(rows)}


def get_store(config: Settings = settings) -> DocumentStore:
    if config.storage_backend in {"sql", "postgres"}:
        return SqlDocumentStore(config.database_url, config.enforce_indexes, config.index_url_template)
    return InMemoryDocumentStore(enforce_indexes=config.enforce_indexes, index_url_template=config.index_url_template)
