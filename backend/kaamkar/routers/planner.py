from datetime import datetime

from fastapi import APIRouter, Depends, Response

from .. import deps
from ..auth import current_user_id
from ..schemas import EventCreate, EventRecord, EventUpdate

router = APIRouter(prefix="/events", tags=["planner"])


@router.post("", response_model=EventRecord, status_code=201)
def create_event(payload: EventCreate, user_id: str = Depends(current_user_id)) -> EventRecord:
    return deps.planner.create(user_id, payload)


@router.get("", response_model=list[EventRecord])
def list_events(
    start: datetime | None = None,
    end: datetime | None = None,
    user_id: str = Depends(current_user_id),
) -> list[EventRecord]:
    return deps.planner.list(user_id, start, end)


@router.get("/{event_id}", response_model=EventRecord)
def get_event(event_id: str, user_id: str = Depends(current_user_id)) -> EventRecord:
    return deps.planner.get(user_id, event_id)


@router.patch("/{event_id}", response_model=EventRecord)
def update_event(event_id: str, payload: EventUpdate, user_id: str = Depends(current_user_id)) -> EventRecord:
    return deps.planner.update(user_id, event_id, payload)


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: str, user_id: str = Depends(current_user_id)) -> Response:
    deps.planner.delete(user_id, event_id)
    return Response(status_code=204)
