from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class ServerTimestamp:
    """Placeholder replaced by the store's clock when a write is applied."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    delta: float


@dataclass(frozen=True)
class Range:
    field: str
    gte: Any = None
    gt: Any = None
    lte: Any = None
    lt: Any = None

    def contains(self, value: Any) -> bool:
        if value is None:
            return False
        if self.gte is not None and value < self.gte:
            return False
        if self.gt is not None and value <= self.gt:
            return False
        if self.lte is not None and value > self.lte:
            return False
        if self.lt is not None and value >= self.lt:
            return False
        return True


@dataclass
class Query:
    filters: dict[str, Any] = field(default_factory=dict)
    range: Range | None = None
    order: list[tuple[str, str]] = field(default_factory=list)
    limit: int | None = None

    def shape(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Return (equality fields, range/order fields) as the index sees them."""
        eq = tuple(self.filters.keys())
        tail: list[str] = []
        if self.range is not None:
            tail.append(self.range.field)
        for name, _ in self.order:
            # document id ordering is implicit in every index
            if name == "id":
                continue
            if name not in tail and name not in eq:
                tail.append(name)
        return eq, tuple(tail)

    def matches(self, doc: dict[str, Any]) -> bool:
        for name, expected in self.filters.items():
            if doc.get(name) != expected:
                return False
        if self.range is not None and not self.range.contains(doc.get(self.range.field)):
            return False
        return True

    def apply(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        hits = [d for d in docs if self.matches(d)]
        # stable sorts applied from the least significant key up
        for name, direction in reversed(self.order):
            present = [d for d in hits if d.get(name) is not None]
            missing = [d for d in hits if d.get(name) is None]
            present.sort(key=lambda d: d[name], reverse=direction == "desc")
            hits = present + missing
        if self.limit is not None:
            hits = hits[: self.limit]
        return hits


def apply_changes(current: dict[str, Any], changes: dict[str, Any], now: datetime) -> dict[str, Any]:
    merged = dict(current)
    for key, value in changes.items():
        if isinstance(value, ServerTimestamp):
            merged[key] = now
        elif isinstance(value, Increment):
            merged[key] = (merged.get(key) or 0) + value.delta
        else:
            merged[key] = value
    return merged
