import logging
import uuid

from collabhub.feedback import ToastSink
from collabhub.models.task import TASK_STATUSES, Task
from collabhub.services.notification_service import notify_task_assigned
from collabhub.services.project_service import get_project, recompute_progress
from collabhub.store import EntityStore, Eq, Or, Order

logger = logging.getLogger(__name__)


async def list_tasks(
    store: EntityStore,
    status: str | None = None,
    project_id: uuid.UUID | None = None,
) -> list[Task]:
    """Tasks the caller owns or is assigned to, newest first."""
    user_id = store.user_id
    filters = [Or(Eq("user_id", user_id), Eq("assigned_to", user_id))]
    if status is not None:
        filters.append(Eq("status", status))
    if project_id is not None:
        filters.append(Eq("project_id", project_id))
    return await store.query("tasks", *filters, order=[Order("created_at", desc=True)])


async def get_task(store: EntityStore, task_id: uuid.UUID) -> Task:
    return await store.single("tasks", Eq("id", task_id))


async def create_task(store: EntityStore, data: dict, sink: ToastSink | None = None) -> Task:
    values = dict(data)
    values["user_id"] = store.user_id
    values["assigned_to"] = values.get("assigned_to") or store.user_id
    values.setdefault("status", "pending")
    if values.get("project_id") is not None:
        # Visible project required; read rules hide everything else
        await get_project(store, values["project_id"])

    task = await store.insert("tasks", values)
    logger.info("Task %s created by %s", task.id, store.user_id)

    if task.project_id is not None:
        await recompute_progress(store, task.project_id)
    await notify_task_assigned(store, task.assigned_to, task.title, sink=sink)
    return task


async def create_project_task(
    store: EntityStore, project_id: uuid.UUID, data: dict, sink: ToastSink | None = None
) -> Task:
    return await create_task(store, {**data, "project_id": project_id}, sink=sink)


async def update_task(store: EntityStore, task_id: uuid.UUID, data: dict) -> Task:
    task = await get_task(store, task_id)
    patch = {k: v for k, v in data.items() if v is not None}
    if not patch:
        return task
    if patch.get("project_id") is not None:
        await get_project(store, patch["project_id"])

    old_project = task.project_id
    previous_assignee = task.assigned_to
    rows = await store.update("tasks", Eq("id", task_id), patch=patch)
    task = rows[0]

    # Both sides of a move between projects need a recount
    for project_id in {old_project, task.project_id} - {None}:
        await recompute_progress(store, project_id)
    if task.assigned_to != previous_assignee:
        await notify_task_assigned(store, task.assigned_to, task.title)
    return task


async def set_task_status(store: EntityStore, task_id: uuid.UUID, status: str) -> Task:
    if status not in TASK_STATUSES:
        raise ValueError(f"Invalid task status: {status}")
    await get_task(store, task_id)
    rows = await store.update("tasks", Eq("id", task_id), patch={"status": status})
    task = rows[0]
    if task.project_id is not None:
        await recompute_progress(store, task.project_id)
    return task


async def delete_task(store: EntityStore, task_id: uuid.UUID) -> None:
    task = await get_task(store, task_id)
    project_id = task.project_id
    await store.delete("tasks", Eq("id", task_id))
    if project_id is not None:
        await recompute_progress(store, project_id)
