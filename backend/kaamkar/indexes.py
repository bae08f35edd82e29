from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote


@dataclass(frozen=True)
class IndexSpec:
    """Composite index: equality fields first, then the range/order fields."""

    collection: str
    fields: tuple[str, ...]

    def satisfies(self, collection: str, eq: tuple[str, ...], tail: tuple[str, ...]) -> bool:
        if collection != self.collection:
            return False
        if set(self.fields) != set(eq) | set(tail) or len(self.fields) != len(set(eq) | set(tail)):
            return False
        return self.fields[len(self.fields) - len(tail):] == tail


def required_fields(eq: tuple[str, ...], tail: tuple[str, ...]) -> tuple[str, ...] | None:
    """Fields of the composite index a query needs, or None when single-field indexes suffice."""
    if not tail:
        return None
    if not eq and len(tail) == 1:
        return None
    return eq + tail


def index_link(template: str, collection: str, fields: tuple[str, ...]) -> str:
    return template.format(collection=quote(collection), fields=quote(",".join(fields)))


DEFAULT_INDEXES: tuple[IndexSpec, ...] = (
    IndexSpec("notes", ("userId", "createdAt")),
    IndexSpec("notes", ("userId", "categoryId", "createdAt")),
    IndexSpec("notes", ("userId", "updatedAt")),
    IndexSpec("noteCategories", ("userId", "createdAt")),
    IndexSpec("todos", ("userId", "createdAt")),
    IndexSpec("events", ("userId", "start")),
    IndexSpec("transactions", ("userId", "date")),
    IndexSpec("transactions", ("userId", "category", "date")),
    IndexSpec("transactions", ("userId", "type", "date")),
    IndexSpec("transactions", ("userId", "category", "type", "date")),
    IndexSpec("budgets", ("userId", "month")),
    IndexSpec("goals", ("userId", "createdAt")),
    IndexSpec("goals", ("userId", "category", "createdAt")),
    IndexSpec("progressUpdates", ("userId", "goalId", "createdAt")),
    IndexSpec("workoutRoutines", ("userId", "createdAt")),
    IndexSpec("workoutSessions", ("userId", "date")),
    IndexSpec("exerciseSets", ("userId", "workoutSessionId", "setNumber")),
    IndexSpec("exerciseSets", ("userId", "exerciseId", "createdAt")),
    IndexSpec("exerciseSets", ("userId", "exerciseId", "isPersonalRecord", "createdAt")),
    IndexSpec("exercises", ("isCustom", "name")),
    IndexSpec("exercises", ("isCustom", "userId", "name")),
    IndexSpec("workoutTemplates", ("userId", "name")),
    IndexSpec("equipment", ("userId", "name")),
)
