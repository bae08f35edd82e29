from fastapi.testclient import TestClient

from kaamkar.main import app

client = TestClient(app)


def test_created_todo_shows_up_once_in_list(headers: dict[str, str]) -> None:
    before = client.get("/api/v1/todos", headers=headers).json()

    res = client.post("/api/v1/todos", json={"title": "Buy milk", "priority": "high"}, headers=headers)
    assert res.status_code == 201
    created = res.json()
    assert created["completed"] is False

    after = client.get("/api/v1/todos", headers=headers).json()
    assert len(after) == len(before) + 1
    matches = [t for t in after if t["title"] == "Buy milk" and t["priority"] == "high"]
    assert len(matches) == 1
    assert matches[0]["completed"] is False
    assert matches[0]["id"] == created["id"]


def test_todo_defaults_and_timestamps(headers: dict[str, str]) -> None:
    todo = client.post("/api/v1/todos", json={"title": "Call mom"}, headers=headers).json()
    assert todo["priority"] == "medium"
    assert todo["createdAt"] is not None
    assert todo["createdAt"] == todo["updatedAt"]


def test_toggle_todo_returns_server_record(headers: dict[str, str]) -> None:
    todo = client.post("/api/v1/todos", json={"title": "Toggle me"}, headers=headers).json()
    toggled = client.post(f"/api/v1/todos/{todo['id']}/toggle", headers=headers)
    assert toggled.status_code == 200
    assert toggled.json()["completed"] is True
    again = client.post(f"/api/v1/todos/{todo['id']}/toggle", headers=headers).json()
    assert again["completed"] is False


def test_blank_title_returns_422(headers: dict[str, str]) -> None:
    res = client.post("/api/v1/todos", json={"title": "   "}, headers=headers)
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_payload_cannot_choose_owner(headers: dict[str, str], other_headers: dict[str, str]) -> None:
    other_id = client.get("/api/v1/auth/me", headers=other_headers).json()["userId"]
    todo = client.post("/api/v1/todos", json={"title": "Mine", "userId": other_id}, headers=headers).json()
    assert todo["userId"] != other_id
    assert all(t["id"] != todo["id"] for t in client.get("/api/v1/todos", headers=other_headers).json())


def test_foreign_documents_are_not_found(headers: dict[str, str], other_headers: dict[str, str]) -> None:
    note = client.post("/api/v1/notes", json={"title": "Private", "content": "secret"}, headers=headers).json()

    assert client.get(f"/api/v1/notes/{note['id']}", headers=other_headers).status_code == 404
    assert client.patch(f"/api/v1/notes/{note['id']}", json={"title": "Hacked"}, headers=other_headers).status_code == 404
    assert client.delete(f"/api/v1/notes/{note['id']}", headers=other_headers).status_code == 404
    assert client.get(f"/api/v1/notes/{note['id']}", headers=headers).json()["title"] == "Private"
    assert client.get("/api/v1/notes/does-not-exist", headers=headers).status_code == 404


def test_get_note_fetches_the_document(headers: dict[str, str]) -> None:
    payload = {
        "title": "Formatted",
        "content": "Body",
        "tags": ["work"],
        "formatting": {"isBold": True, "alignment": "center"},
    }
    note = client.post("/api/v1/notes", json=payload, headers=headers).json()
    fetched = client.get(f"/api/v1/notes/{note['id']}", headers=headers).json()
    assert fetched["content"] == "Body"
    assert fetched["tags"] == ["work"]
    assert fetched["formatting"]["isBold"] is True
    assert fetched["formatting"]["alignment"] == "center"


def test_update_note_restamps_updated_at(headers: dict[str, str]) -> None:
    note = client.post("/api/v1/notes", json={"title": "Draft"}, headers=headers).json()
    updated = client.patch(f"/api/v1/notes/{note['id']}", json={"content": "More"}, headers=headers).json()
    assert updated["title"] == "Draft"
    assert updated["content"] == "More"
    assert updated["createdAt"] == note["createdAt"]
    assert updated["updatedAt"] >= note["updatedAt"]


def test_notes_by_category_and_category_delete_detaches(headers: dict[str, str]) -> None:
    category = client.post("/api/v1/note-categories", json={"name": "Work"}, headers=headers).json()
    in_cat = client.post(
        "/api/v1/notes", json={"title": "Standup", "categoryId": category["id"]}, headers=headers
    ).json()
    client.post("/api/v1/notes", json={"title": "Loose"}, headers=headers)

    listed = client.get("/api/v1/notes", params={"categoryId": category["id"]}, headers=headers).json()
    assert [n["id"] for n in listed] == [in_cat["id"]]

    assert client.delete(f"/api/v1/note-categories/{category['id']}", headers=headers).status_code == 204
    assert client.get("/api/v1/note-categories", headers=headers).json() == []
    note = client.get(f"/api/v1/notes/{in_cat['id']}", headers=headers).json()
    assert note["categoryId"] is None


def test_note_with_foreign_category_is_rejected(headers: dict[str, str], other_headers: dict[str, str]) -> None:
    category = client.post("/api/v1/note-categories", json={"name": "Theirs"}, headers=other_headers).json()
    res = client.post("/api/v1/notes", json={"title": "Sneaky", "categoryId": category["id"]}, headers=headers)
    assert res.status_code == 404


def test_patch_with_null_title_leaves_todo_readable(headers: dict[str, str]) -> None:
    todo = client.post("/api/v1/todos", json={"title": "Water plants"}, headers=headers).json()
    res = client.patch(f"/api/v1/todos/{todo['id']}", json={"title": None}, headers=headers)
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["field"] == "title"

    listed = client.get("/api/v1/todos", headers=headers)
    assert listed.status_code == 200
    assert [t["title"] for t in listed.json() if t["id"] == todo["id"]] == ["Water plants"]


def test_patch_can_clear_due_date(headers: dict[str, str]) -> None:
    todo = client.post("/api/v1/todos", json={"title": "Taxes", "dueDate": "2024-04-15"}, headers=headers).json()
    res = client.patch(f"/api/v1/todos/{todo['id']}", json={"dueDate": None}, headers=headers)
    assert res.status_code == 200
    assert res.json()["dueDate"] is None
