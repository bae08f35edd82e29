from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from kaamkar import deps
from kaamkar.errors import DocumentExistsError, DocumentNotFoundError, IndexRequiredError
from kaamkar.indexes import IndexSpec, required_fields
from kaamkar.main import app
from kaamkar.persistence import InMemoryDocumentStore, SqlDocumentStore
from kaamkar.query import SERVER_TIMESTAMP, Increment, Query, Range
from kaamkar.services.todos import TodoService

client = TestClient(app)


def _seed(store) -> None:
    for title, priority, created in (
        ("b", "low", datetime(2024, 1, 2, tzinfo=timezone.utc)),
        ("a", "high", datetime(2024, 1, 3, tzinfo=timezone.utc)),
        ("c", "high", datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ):
        store.add("todos", {"userId": "u1", "title": title, "priority": priority, "createdAt": created})
    store.add("todos", {"userId": "u2", "title": "foreign", "priority": "high", "createdAt": datetime(2024, 1, 4, tzinfo=timezone.utc)})


def test_query_without_composite_index_names_the_fix() -> None:
    store = InMemoryDocumentStore(indexes=())
    _seed(store)
    query = Query(filters={"userId": "u1"}, order=[("createdAt", "desc")])

    with pytest.raises(IndexRequiredError) as excinfo:
        store.query("todos", query)
    assert excinfo.value.fields == ("userId", "createdAt")
    assert "collection=todos" in excinfo.value.link
    assert "userId%2CcreatedAt" in excinfo.value.link

    store.declare_index(IndexSpec("todos", ("userId", "createdAt")))
    assert [d["title"] for d in store.query("todos", query)] == ["a", "b", "c"]


def test_single_field_queries_need_no_index() -> None:
    store = InMemoryDocumentStore(indexes=())
    _seed(store)
    assert len(store.query("todos", Query(filters={"userId": "u1", "priority": "high"}))) == 2
    assert len(store.query("todos", Query(order=[("createdAt", "asc")]))) == 4
    assert required_fields(("userId",), ()) is None


def test_id_tiebreak_reuses_the_order_index() -> None:
    store = InMemoryDocumentStore(indexes=(IndexSpec("todos", ("userId", "createdAt")),))
    _seed(store)
    docs = store.query("todos", Query(filters={"userId": "u1"}, order=[("createdAt", "asc"), ("id", "asc")]))
    assert [d["title"] for d in docs] == ["c", "b", "a"]


def test_range_and_limit() -> None:
    store = InMemoryDocumentStore()
    _seed(store)
    query = Query(
        filters={"userId": "u1"},
        range=Range("createdAt", gte=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        order=[("createdAt", "desc")],
        limit=1,
    )
    assert [d["title"] for d in store.query("todos", query)] == ["a"]


def test_server_timestamp_and_increment() -> None:
    store = InMemoryDocumentStore()
    doc = store.add("goals", {"userId": "u1", "currentProgress": 0, "createdAt": SERVER_TIMESTAMP})
    assert isinstance(doc["createdAt"], datetime)

    store.update("goals", doc["id"], {"currentProgress": Increment(30)})
    updated = store.update("goals", doc["id"], {"currentProgress": Increment(40)})
    assert updated["currentProgress"] == 70

    with pytest.raises(DocumentNotFoundError):
        store.update("goals", "missing", {"currentProgress": Increment(1)})


def test_returned_documents_are_copies() -> None:
    store = InMemoryDocumentStore()
    doc = store.add("notes", {"userId": "u1", "tags": ["a"]})
    doc["tags"].append("mutated")
    assert store.get("notes", doc["id"])["tags"] == ["a"]


def test_batch_commit_is_applied_together() -> None:
    store = InMemoryDocumentStore()
    parent = store.add("workoutSessions", {"userId": "u1"})
    child = store.add("exerciseSets", {"userId": "u1", "workoutSessionId": parent["id"]})
    store.batch().delete("exerciseSets", child["id"]).delete("workoutSessions", parent["id"]).commit()
    assert store.get("workoutSessions", parent["id"]) is None
    assert store.get("exerciseSets", child["id"]) is None
    assert store.counts() == {"exerciseSets": 0, "workoutSessions": 0}


def test_missing_index_reaches_the_api_as_503(headers: dict[str, str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(deps, "todos", TodoService(InMemoryDocumentStore(indexes=())))
    res = client.get("/api/v1/todos", headers=headers)
    assert res.status_code == 503
    error = res.json()["error"]
    assert error["code"] == "INDEX_REQUIRED"
    assert error["link"].startswith("/api/v1/admin/indexes?collection=todos")
    assert {d["field"]: d["message"] for d in error["details"]} == {
        "collection": "todos",
        "fields": "userId,createdAt",
    }


def test_sql_store_round_trip(tmp_path) -> None:
    store = SqlDocumentStore(f"sqlite:///{tmp_path}/kaamkar.db")
    store.declare_index(IndexSpec("transactions", ("userId", "date")))
    store.declare_index(IndexSpec("transactions", ("userId", "date")))
    assert store.list_indexes() == [IndexSpec("transactions", ("userId", "date"))]

    first = store.add("transactions", {"userId": "u1", "amount": 10.0, "date": date(2024, 3, 1), "createdAt": SERVER_TIMESTAMP})
    store.add("transactions", {"userId": "u1", "amount": 20.0, "date": date(2024, 3, 9)})
    store.add("transactions", {"userId": "u2", "amount": 99.0, "date": date(2024, 3, 5)})

    fetched = store.get("transactions", first["id"])
    assert fetched["date"] == date(2024, 3, 1)
    assert isinstance(fetched["createdAt"], datetime)

    docs = store.query(
        "transactions",
        Query(
            filters={"userId": "u1"},
            range=Range("date", gte=date(2024, 3, 1), lt=date(2024, 4, 1)),
            order=[("date", "desc")],
        ),
    )
    assert [d["amount"] for d in docs] == [20.0, 10.0]

    store.update("transactions", first["id"], {"amount": Increment(5)})
    assert store.get("transactions", first["id"])["amount"] == 15.0

    with pytest.raises(IndexRequiredError):
        store.query("transactions", Query(filters={"userId": "u1"}, order=[("amount", "asc")]))

    store.batch().delete("transactions", first["id"]).commit()
    assert store.get("transactions", first["id"]) is None
    assert store.counts() == {"transactions": 2}


def test_sql_batch_rolls_back_on_failure(tmp_path) -> None:
    store = SqlDocumentStore(f"sqlite:///{tmp_path}/kaamkar.db")
    doc = store.add("notes", {"userId": "u1", "title": "keep"})
    batch = store.batch().delete("notes", doc["id"]).update("notes", "missing", {"title": "x"})
    with pytest.raises(DocumentNotFoundError):
        batch.commit()
    assert store.get("notes", doc["id"])["title"] == "keep"


def test_batch_set_refuses_to_overwrite_an_existing_document() -> None:
    store = InMemoryDocumentStore()
    doc = store.add("notes", {"userId": "u1", "title": "keep"})
    batch = store.batch().set("notes", "fresh", {"userId": "u1", "title": "new"}).set("notes", doc["id"], {"title": "clobber"})
    with pytest.raises(DocumentExistsError):
        batch.commit()
    assert store.get("notes", doc["id"])["title"] == "keep"
    assert store.get("notes", "fresh") is None


def test_sql_batch_set_refuses_to_overwrite_an_existing_document(tmp_path) -> None:
    store = SqlDocumentStore(f"sqlite:///{tmp_path}/kaamkar.db")
    doc = store.add("notes", {"userId": "u1", "title": "keep"})
    batch = store.batch().set("notes", "fresh", {"userId": "u1", "title": "new"}).set("notes", doc["id"], {"title": "clobber"})
    with pytest.raises(DocumentExistsError):
        batch.commit()
    assert store.get("notes", doc["id"])["title"] == "keep"
    assert store.get("notes", "fresh") is None


def test_transform_sees_the_current_document() -> None:
    store = InMemoryDocumentStore()
    doc = store.add("goals", {"userId": "u1", "currentProgress": 10})
    updated = store.transform("goals", doc["id"], lambda current: {"currentProgress": current["currentProgress"] * 3})
    assert updated["currentProgress"] == 30
    with pytest.raises(DocumentNotFoundError):
        store.transform("goals", "missing", lambda current: {})


def test_sql_transform_sees_the_current_document(tmp_path) -> None:
    store = SqlDocumentStore(f"sqlite:///{tmp_path}/kaamkar.db")
    doc = store.add("goals", {"userId": "u1", "currentProgress": 10})
    updated = store.transform(
        "goals", doc["id"], lambda current: {"currentProgress": current["currentProgress"] + 5, "updatedAt": SERVER_TIMESTAMP}
    )
    assert updated["currentProgress"] == 15
    assert isinstance(store.get("goals", doc["id"])["updatedAt"], datetime)
