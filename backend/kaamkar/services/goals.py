from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..persistence import DocumentStore
from ..repository import Repository
from ..schemas import (
    GoalCreate,
    GoalProgressResponse,
    GoalRecord,
    GoalStatus,
    GoalUpdate,
    Milestone,
    ProgressUpdateCreate,
    ProgressUpdateRecord,
)

logger = logging.getLogger(__name__)


def next_status(status: str, current_progress: float, target_value: float, had_progress: bool) -> str:
    """Status a goal moves to after a progress update.

    ``completed`` never moves back, ``abandoned`` only leaves when the target
    is reached, and the first progress on an untouched goal starts it.
    """
    if status == GoalStatus.completed.value:
        return status
    if current_progress >= target_value:
        return GoalStatus.completed.value
    if status == GoalStatus.not_started.value and not had_progress:
        return GoalStatus.in_progress.value
    return status


def mark_milestones(milestones: list[Milestone], current_progress: float, now: datetime) -> list[Milestone]:
    marked = []
    for milestone in milestones:
        if not milestone.completed and milestone.targetValue <= current_progress:
            milestone = milestone.model_copy(update={"completed": True, "completedAt": now})
        marked.append(milestone)
    return marked


class GoalService:
    def __init__(self, store: DocumentStore) -> None:
        self.goals = Repository(
            store,
            "goals",
            GoalRecord,
            dependents=(("progressUpdates", "goalId"),),
            label="goal",
        )
        self.updates = Repository(store, "progressUpdates", ProgressUpdateRecord, label="progress update")

    def create(self, user_id: str, payload: GoalCreate) -> GoalRecord:
        data = payload.model_dump()
        if payload.currentProgress >= payload.targetValue:
            data["status"] = GoalStatus.completed.value
        return self.goals.create(user_id, data)

    def list(self, user_id: str, category: str | None = None) -> list[GoalRecord]:
        if category:
            return self.goals.list_by_owner(user_id, {"category": category})
        return self.goals.list_by_owner(user_id)

    def get(self, user_id: str, goal_id: str) -> GoalRecord:
        return self.goals.get_owned(user_id, goal_id)

    def update(self, user_id: str, goal_id: str, payload: GoalUpdate) -> GoalRecord:
        return self.goals.update(user_id, goal_id, payload)

    def delete(self, user_id: str, goal_id: str) -> int:
        return self.goals.delete(user_id, goal_id)

    def list_progress(self, user_id: str, goal_id: str) -> list[ProgressUpdateRecord]:
        self.goals.get_owned(user_id, goal_id)
        return self.updates.list_by_owner(user_id, {"goalId": goal_id}, direction="asc")

    def record_progress(self, user_id: str, goal_id: str, payload: ProgressUpdateCreate) -> GoalProgressResponse:
        """Append a progress update, then move progress, status and milestones in one locked write."""
        self.goals.get_owned(user_id, goal_id)
        update = self.updates.create(user_id, {"goalId": goal_id, "value": payload.value, "notes": payload.notes})

        def settle(goal: GoalRecord) -> dict[str, object]:
            progress = goal.currentProgress + payload.value
            changes: dict[str, object] = {"currentProgress": progress}
            status = next_status(goal.status, progress, goal.targetValue, goal.currentProgress != 0)
            if status != goal.status:
                changes["status"] = status
                logger.info("goal %s status %s -> %s", goal_id, goal.status, status)
            milestones = mark_milestones(goal.milestones, progress, datetime.now(timezone.utc))
            if milestones != goal.milestones:
                changes["milestones"] = [m.model_dump() for m in milestones]
            return changes

        goal = self.goals.transform(user_id, goal_id, settle)
        return GoalProgressResponse(goal=goal, update=update)
