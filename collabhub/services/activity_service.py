import logging
from datetime import date

from collabhub.services import friend_service
from collabhub.services.aggregation import ActivityItem, bucket_activity, summarize_dashboard
from collabhub.store import EntityStore, Eq, In, Order

logger = logging.getLogger(__name__)

TABS = ("completed", "current", "upcoming")


async def get_activity(store: EntityStore, tab: str, today: date | None = None) -> list[ActivityItem]:
    if tab not in TABS:
        raise ValueError(f"Unknown activity tab: {tab}")
    today = today or date.today()

    tasks = await store.query(
        "tasks", Eq("user_id", store.user_id), order=[Order("created_at", desc=True)]
    )
    events = await store.query(
        "calendar_events", Eq("user_id", store.user_id), order=[Order("date")]
    )
    project_ids = list({t.project_id for t in tasks if t.project_id is not None})
    names = {}
    if project_ids:
        projects = await store.query("projects", In("id", project_ids))
        names = {p.id: p.name for p in projects}

    return bucket_activity(tasks, events, today, project_names=names)[tab]


async def get_dashboard(store: EntityStore) -> dict:
    user_id = store.user_id
    projects = await store.query(
        "projects", Eq("creator_id", user_id), order=[Order("created_at", desc=True)]
    )
    tasks = await store.query("tasks", Eq("user_id", user_id), order=[Order("created_at", desc=True)])
    friends = await friend_service.list_friends(store)
    return summarize_dashboard(projects, tasks, friends)
