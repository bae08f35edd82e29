from __future__ import annotations

from datetime import datetime

from ..errors import ValidationError
from ..persistence import DocumentStore
from ..query import Range
from ..repository import Repository
from ..schemas import EventCreate, EventRecord, EventUpdate, as_utc


class PlannerService:
    def __init__(self, store: DocumentStore) -> None:
        self.events = Repository(store, "events", EventRecord, label="event")

    def create(self, user_id: str, payload: EventCreate) -> EventRecord:
        return self.events.create(user_id, payload)

    def list(self, user_id: str, start: datetime | None = None, end: datetime | None = None) -> list[EventRecord]:
        """Events ordered by start; ``start``/``end`` bound the event start inclusively."""
        start = as_utc(start) if start is not None else None
        end = as_utc(end) if end is not None else None
        if start is not None and end is not None and end < start:
            raise ValidationError("end must be >= start", field="end")
        value_range = None
        if start is not None or end is not None:
            value_range = Range("start", gte=start, lte=end)
        return self.events.list_by_owner(user_id, order_field="start", direction="asc", value_range=value_range)

    def get(self, user_id: str, event_id: str) -> EventRecord:
        return self.events.get_owned(user_id, event_id)

    def update(self, user_id: str, event_id: str, payload: EventUpdate) -> EventRecord:
        current = self.events.get_owned(user_id, event_id)
        start = payload.start or current.start
        end = payload.end or current.end
        if end < start:
            raise ValidationError("end must be >= start", field="end")
        return self.events.update(user_id, event_id, payload)

    def delete(self, user_id: str, event_id: str) -> None:
        self.events.delete(user_id, event_id)
