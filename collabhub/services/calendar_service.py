import calendar
import logging
import uuid
from datetime import date

from collabhub.models.calendar_event import CalendarEvent
from collabhub.store import EntityStore, Eq, Gte, Lte, Order

logger = logging.getLogger(__name__)

PRIORITY_RANK = {"high": 0, "moderate": 1, "low": 2}


def sort_by_priority(events: list[CalendarEvent]) -> list[CalendarEvent]:
    """High before moderate before low; stable within a priority."""
    return sorted(events, key=lambda e: PRIORITY_RANK.get(e.priority, len(PRIORITY_RANK)))


async def list_events(
    store: EntityStore, start: date | None = None, end: date | None = None
) -> list[CalendarEvent]:
    filters = [Eq("user_id", store.user_id)]
    if start is not None:
        filters.append(Gte("date", start))
    if end is not None:
        filters.append(Lte("date", end))
    return await store.query(
        "calendar_events", *filters, order=[Order("date"), Order("created_at")]
    )


async def list_month(store: EntityStore, year: int, month: int) -> list[CalendarEvent]:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return await list_events(store, date(year, month, 1), date(year, month, last_day))


async def events_on(store: EntityStore, day: date) -> list[CalendarEvent]:
    return sort_by_priority(await list_events(store, day, day))


async def get_event(store: EntityStore, event_id: uuid.UUID) -> CalendarEvent:
    return await store.single("calendar_events", Eq("id", event_id))


async def create_event(store: EntityStore, data: dict) -> CalendarEvent:
    event = await store.insert("calendar_events", {**data, "user_id": store.user_id})
    logger.info("Calendar event %s created for %s", event.id, event.date)
    return event


async def update_event(store: EntityStore, event_id: uuid.UUID, data: dict) -> CalendarEvent:
    event = await get_event(store, event_id)
    patch = {k: v for k, v in data.items() if v is not None}
    if not patch:
        return event
    rows = await store.update("calendar_events", Eq("id", event_id), patch=patch)
    return rows[0]


async def delete_event(store: EntityStore, event_id: uuid.UUID) -> None:
    await get_event(store, event_id)
    await store.delete("calendar_events", Eq("id", event_id))
