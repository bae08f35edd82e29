from fastapi import APIRouter, Depends, Response

from .. import deps
from ..auth import current_user_id
from ..schemas import GoalCreate, GoalProgressResponse, GoalRecord, GoalUpdate, ProgressUpdateCreate, ProgressUpdateRecord

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalRecord, status_code=201)
def create_goal(payload: GoalCreate, user_id: str = Depends(current_user_id)) -> GoalRecord:
    return deps.goals.create(user_id, payload)


@router.get("", response_model=list[GoalRecord])
def list_goals(category: str | None = None, user_id: str = Depends(current_user_id)) -> list[GoalRecord]:
    return deps.goals.list(user_id, category)


@router.get("/{goal_id}", response_model=GoalRecord)
def get_goal(goal_id: str, user_id: str = Depends(current_user_id)) -> GoalRecord:
    return deps.goals.get(user_id, goal_id)


@router.patch("/{goal_id}", response_model=GoalRecord)
def update_goal(goal_id: str, payload: GoalUpdate, user_id: str = Depends(current_user_id)) -> GoalRecord:
    return deps.goals.update(user_id, goal_id, payload)


@router.delete("/{goal_id}", status_code=204)
def delete_goal(goal_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.goals.delete(user_id, goal_id)
    return Response(status_code=204)


@router.post("/{goal_id}/progress", response_model=GoalProgressResponse, status_code=201)
def record_progress(
    goal_id: str, payload: ProgressUpdateCreate, user_id: str = Depends(current_user_id)
) -> GoalProgressResponse:
    return deps.goals.record_progress(user_id, goal_id, payload)


@router.get("/{goal_id}/progress", response_model=list[ProgressUpdateRecord])
def list_progress(goal_id: str, user_id: str = Depends(current_user_id)) -> list[ProgressUpdateRecord]:
    return deps.goals.list_progress(user_id, goal_id)
