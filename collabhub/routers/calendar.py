import uuid
from datetime import date

from fastapi import APIRouter, Depends, Path, Query, status

from collabhub.dependencies import get_store
from collabhub.schemas.calendar import EventCreate, EventResponse, EventUpdate
from collabhub.services import calendar_service
from collabhub.store import EntityStore

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/events", response_model=list[EventResponse])
async def list_events(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    store: EntityStore = Depends(get_store),
):
    return await calendar_service.list_events(store, start, end)


@router.get("/month/{year}/{month}", response_model=list[EventResponse])
async def list_month(
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=1, le=12),
    store: EntityStore = Depends(get_store),
):
    return await calendar_service.list_month(store, year, month)


@router.get("/day/{day}", response_model=list[EventResponse])
async def events_on(day: date, store: EntityStore = Depends(get_store)):
    """Events on one day, high priority first."""
    return await calendar_service.events_on(store, day)


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(data: EventCreate, store: EntityStore = Depends(get_store)):
    return await calendar_service.create_event(store, data.model_dump())


@router.patch("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: uuid.UUID,
    data: EventUpdate,
    store: EntityStore = Depends(get_store),
):
    return await calendar_service.update_event(store, event_id, data.model_dump(exclude_unset=True))


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await calendar_service.delete_event(store, event_id)
