import logging
import uuid

from collabhub.feedback import ToastSink
from collabhub.models.message import Message
from collabhub.models.profile import Profile
from collabhub.models.project import Project
from collabhub.models.task import Task
from collabhub.services.aggregation import compute_project_progress
from collabhub.services.notification_service import notify_new_message
from collabhub.store import ConstraintViolation, Contains, EntityStore, Eq, In, Or, Order

logger = logging.getLogger(__name__)


def message_prefix(project: Project) -> str:
    return f"[Project: {project.name}] "


def strip_message_prefix(content: str, project: Project) -> str:
    prefix = message_prefix(project)
    return content[len(prefix):] if content.startswith(prefix) else content


def project_member_ids(project: Project) -> list[uuid.UUID]:
    """Creator first, then team members, without duplicates."""
    ids = [project.creator_id, *(uuid.UUID(str(m)) for m in project.team_members)]
    return list(dict.fromkeys(ids))


async def _clean_team(store: EntityStore, members: list[uuid.UUID]) -> list[str]:
    team = [m for m in dict.fromkeys(members) if m != store.user_id]
    if not team:
        return []
    found = await store.query("profiles", In("id", team))
    missing = set(team) - {p.id for p in found}
    if missing:
        raise ConstraintViolation(
            f"Unknown team member(s): {', '.join(sorted(str(m) for m in missing))}", "projects"
        )
    return [str(m) for m in team]


async def list_projects(store: EntityStore) -> list[Project]:
    """Projects the caller created or is a member of, newest first."""
    user_id = store.user_id
    return await store.query(
        "projects",
        Or(Eq("creator_id", user_id), Contains("team_members", user_id)),
        order=[Order("created_at", desc=True)],
    )


async def get_project(store: EntityStore, project_id: uuid.UUID) -> Project:
    return await store.single("projects", Eq("id", project_id))


async def create_project(store: EntityStore, data: dict) -> Project:
    values = dict(data)
    values["team_members"] = await _clean_team(store, values.pop("team_members", None) or [])
    values["creator_id"] = store.user_id
    values["progress"] = 0
    project = await store.insert("projects", values)
    logger.info("Project %s created by %s", project.id, store.user_id)
    return project


async def update_project(store: EntityStore, project_id: uuid.UUID, data: dict) -> Project:
    # progress is derived; it never comes in through here
    patch = {k: v for k, v in data.items() if v is not None and k != "progress"}
    if "team_members" in patch:
        patch["team_members"] = await _clean_team(store, patch["team_members"])
    project = await get_project(store, project_id)
    if not patch:
        return project
    rows = await store.update("projects", Eq("id", project_id), patch=patch)
    return rows[0]


async def delete_project(store: EntityStore, project_id: uuid.UUID) -> None:
    await get_project(store, project_id)
    await store.delete("projects", Eq("id", project_id))
    logger.info("Project %s deleted by %s", project_id, store.user_id)


async def list_project_tasks(store: EntityStore, project_id: uuid.UUID) -> list[Task]:
    await get_project(store, project_id)
    return await store.query(
        "tasks", Eq("project_id", project_id), order=[Order("created_at", desc=True)]
    )


async def list_team_members(store: EntityStore, project_id: uuid.UUID) -> list[Profile]:
    project = await get_project(store, project_id)
    if not project.team_members:
        return []
    return await store.query(
        "profiles", In("id", [uuid.UUID(str(m)) for m in project.team_members]), order=[Order("username")]
    )


async def recompute_progress(store: EntityStore, project_id: uuid.UUID) -> int | None:
    """Recount the project's tasks and persist the percentage.

    Counts through the service store: the caller's read rules may hide tasks
    owned by other members. Returns None when the project no longer exists.
    """
    service = store.as_service()
    project = await service.maybe_single("projects", Eq("id", project_id))
    if project is None:
        return None
    tasks = await service.query("tasks", Eq("project_id", project_id))
    progress = compute_project_progress(tasks)
    if progress != project.progress:
        await service.update("projects", Eq("id", project_id), patch={"progress": progress})
        logger.info("Project %s progress %s -> %s", project_id, project.progress, progress)
    return progress


async def send_project_message(
    store: EntityStore,
    project_id: uuid.UUID,
    content: str,
    sink: ToastSink | None = None,
) -> list[Message]:
    """Send one prefixed direct message to every other project member."""
    text = content.strip()
    if not text:
        raise ConstraintViolation("Message content cannot be blank", "messages")
    project = await get_project(store, project_id)
    receivers = [m for m in project_member_ids(project) if m != store.user_id]
    sender = await store.maybe_single("profiles", Eq("id", store.user_id))
    sender_name = sender.username if sender else "a teammate"

    sent = []
    for receiver_id in receivers:
        message = await store.insert(
            "messages",
            {
                "sender_id": store.user_id,
                "receiver_id": receiver_id,
                "content": message_prefix(project) + text,
            },
        )
        sent.append(message)
        await notify_new_message(store, receiver_id, sender_name, sink=sink)
    if sink is not None:
        sink.success("Message sent to team!")
    return sent


async def list_project_messages(store: EntityStore, project_id: uuid.UUID) -> list[Message]:
    """Prefixed messages exchanged between project members, oldest first."""
    project = await get_project(store, project_id)
    members = project_member_ids(project)
    rows = await store.query(
        "messages",
        In("sender_id", members),
        In("receiver_id", members),
        order=[Order("created_at")],
    )
    prefix = message_prefix(project)
    return [m for m in rows if m.content.startswith(prefix)]
