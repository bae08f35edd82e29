import threading

import pytest
from fastapi.testclient import TestClient

from kaamkar import deps
from kaamkar.main import app
from kaamkar.persistence import InMemoryDocumentStore
from kaamkar.schemas import GoalCreate, ProgressUpdateCreate
from kaamkar.services.goals import GoalService, next_status

client = TestClient(app)


def _create_goal(headers: dict[str, str], **fields: object) -> dict:
    payload = {"title": "Run 50 km", "targetValue": 50, "unit": "km", **fields}
    res = client.post("/api/v1/goals", json=payload, headers=headers)
    assert res.status_code == 201
    return res.json()


def _progress(headers: dict[str, str], goal_id: str, value: float) -> dict:
    res = client.post(f"/api/v1/goals/{goal_id}/progress", json={"value": value}, headers=headers)
    assert res.status_code == 201
    return res.json()


def test_progress_accumulates_and_completes_goal(headers: dict[str, str]) -> None:
    goal = _create_goal(headers)
    assert goal["status"] == "not-started"

    first = _progress(headers, goal["id"], 30)
    assert first["goal"]["currentProgress"] == 30
    assert first["goal"]["status"] == "in-progress"
    assert first["update"]["goalId"] == goal["id"]

    second = _progress(headers, goal["id"], 40)
    assert second["goal"]["currentProgress"] == 70
    assert second["goal"]["status"] == "completed"

    updates = client.get(f"/api/v1/goals/{goal['id']}/progress", headers=headers).json()
    assert [u["value"] for u in updates] == [30, 40]


def test_single_small_update_moves_goal_in_progress(headers: dict[str, str]) -> None:
    goal = _create_goal(headers)
    result = _progress(headers, goal["id"], 10)
    assert result["goal"]["currentProgress"] == 10
    assert result["goal"]["status"] == "in-progress"


def test_completed_goal_stays_completed(headers: dict[str, str]) -> None:
    goal = _create_goal(headers)
    _progress(headers, goal["id"], 60)
    result = _progress(headers, goal["id"], -30)
    assert result["goal"]["currentProgress"] == 30
    assert result["goal"]["status"] == "completed"


def test_abandoned_goal_stays_abandoned_below_target(headers: dict[str, str]) -> None:
    goal = _create_goal(headers, status="abandoned")
    result = _progress(headers, goal["id"], 10)
    assert result["goal"]["status"] == "abandoned"


def test_goal_created_at_target_is_completed(headers: dict[str, str]) -> None:
    goal = _create_goal(headers, currentProgress=50)
    assert goal["status"] == "completed"


def test_milestones_are_marked_when_reached(headers: dict[str, str]) -> None:
    goal = _create_goal(
        headers,
        milestones=[{"title": "Quarter", "targetValue": 12.5}, {"title": "Half", "targetValue": 25}],
    )
    result = _progress(headers, goal["id"], 20)
    milestones = result["goal"]["milestones"]
    assert milestones[0]["completed"] is True
    assert milestones[0]["completedAt"] is not None
    assert milestones[1]["completed"] is False


def test_zero_progress_is_rejected(headers: dict[str, str]) -> None:
    goal = _create_goal(headers)
    res = client.post(f"/api/v1/goals/{goal['id']}/progress", json={"value": 0}, headers=headers)
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_deleting_goal_removes_its_progress_updates(headers: dict[str, str]) -> None:
    goal = _create_goal(headers)
    for value in (5, 10, 15):
        _progress(headers, goal["id"], value)
    assert len(client.get(f"/api/v1/goals/{goal['id']}/progress", headers=headers).json()) == 3

    assert client.delete(f"/api/v1/goals/{goal['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/goals/{goal['id']}", headers=headers).status_code == 404
    assert client.get(f"/api/v1/goals/{goal['id']}/progress", headers=headers).status_code == 404

    remaining = deps.goals.updates.list_where({"goalId": goal["id"]}, order_field=None)
    assert remaining == []


def test_goals_filter_by_category(headers: dict[str, str]) -> None:
    _create_goal(headers, title="Read", category="learning")
    _create_goal(headers, title="Lift", category="fitness")
    listed = client.get("/api/v1/goals", params={"category": "learning"}, headers=headers).json()
    assert [g["title"] for g in listed] == ["Read"]


def test_next_status_transitions() -> None:
    assert next_status("not-started", 10, 50, had_progress=False) == "in-progress"
    assert next_status("in-progress", 50, 50, had_progress=True) == "completed"
    assert next_status("completed", 0, 50, had_progress=True) == "completed"
    assert next_status("abandoned", 10, 50, had_progress=True) == "abandoned"
    assert next_status("abandoned", 50, 50, had_progress=True) == "completed"


def test_patch_with_null_target_is_rejected_and_goal_still_loads(headers: dict[str, str]) -> None:
    goal = _create_goal(headers)
    res = client.patch(f"/api/v1/goals/{goal['id']}", json={"targetValue": None}, headers=headers)
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["field"] == "targetValue"

    fetched = client.get(f"/api/v1/goals/{goal['id']}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["targetValue"] == 50
    assert client.get("/api/v1/goals", headers=headers).status_code == 200


def test_patch_can_clear_optional_goal_fields(headers: dict[str, str]) -> None:
    goal = _create_goal(headers, category="fitness")
    res = client.patch(f"/api/v1/goals/{goal['id']}", json={"category": None}, headers=headers)
    assert res.status_code == 200
    assert res.json()["category"] is None


def test_interleaved_progress_cannot_undo_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    svc = GoalService(InMemoryDocumentStore())
    goal = svc.create("user-1", GoalCreate(title="Run", targetValue=50, unit="km"))
    original_transform = svc.goals.transform
    interleaved = {"done": False}

    def transform_after_other_submission(owner_id, doc_id, compute):
        if not interleaved["done"]:
            interleaved["done"] = True
            svc.record_progress("user-1", goal.id, ProgressUpdateCreate(value=50))
        return original_transform(owner_id, doc_id, compute)

    monkeypatch.setattr(svc.goals, "transform", transform_after_other_submission)

    result = svc.record_progress("user-1", goal.id, ProgressUpdateCreate(value=10))
    assert result.goal.currentProgress == 60
    assert result.goal.status == "completed"
    assert svc.get("user-1", goal.id).status == "completed"


def test_concurrent_progress_adds_up_and_completes() -> None:
    svc = GoalService(InMemoryDocumentStore())
    goal = svc.create("user-1", GoalCreate(title="Read", targetValue=50, unit="pages"))

    def submit() -> None:
        svc.record_progress("user-1", goal.id, ProgressUpdateCreate(value=10))

    threads = [threading.Thread(target=submit) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    final = svc.get("user-1", goal.id)
    assert final.currentProgress == 80
    assert final.status == "completed"
    assert len(svc.list_progress("user-1", goal.id)) == 8


def test_repository_increment_bumps_a_counter() -> None:
    svc = GoalService(InMemoryDocumentStore())
    goal = svc.create("user-1", GoalCreate(title="Swim", targetValue=10, unit="km"))
    bumped = svc.goals.increment("user-1", goal.id, "currentProgress", 4)
    assert bumped.currentProgress == 4
    assert bumped.updatedAt >= goal.updatedAt
