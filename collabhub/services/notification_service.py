import logging
import uuid

from collabhub.feedback import ToastSink
from collabhub.models.notification import Notification
from collabhub.store import EntityStore, Eq, Order, StoreError

logger = logging.getLogger(__name__)


async def dispatch(
    store: EntityStore,
    to_user_id: uuid.UUID,
    title: str,
    message: str,
    notification_type: str,
    sink: ToastSink | None = None,
) -> Notification | None:
    """Insert a notification for ``to_user_id``.

    Best effort: called after the triggering write has committed, so a
    failure here is logged and reported but never propagates. Returns the
    created row, or None when delivery failed.
    """
    try:
        return await store.insert(
            "notifications",
            {
                "user_id": to_user_id,
                "title": title,
                "message": message,
                "type": notification_type,
            },
        )
    except StoreError as e:
        logger.warning(
            "Notification %r for %s not delivered: %s", notification_type, to_user_id, e.message
        )
        if sink is not None:
            sink.error("Notification could not be delivered")
        return None


async def notify_new_message(
    store: EntityStore, to_user_id: uuid.UUID, sender_name: str, sink: ToastSink | None = None
) -> Notification | None:
    return await dispatch(
        store,
        to_user_id,
        title="New Message",
        message=f"You have a new message from {sender_name}",
        notification_type="chat",
        sink=sink,
    )


async def notify_friend_request(
    store: EntityStore, to_user_id: uuid.UUID, sink: ToastSink | None = None
) -> Notification | None:
    return await dispatch(
        store,
        to_user_id,
        title="Friend Request",
        message="You have received a new friend request",
        notification_type="friend_request",
        sink=sink,
    )


async def notify_task_assigned(
    store: EntityStore,
    to_user_id: uuid.UUID,
    task_title: str,
    sink: ToastSink | None = None,
) -> Notification | None:
    """Tell an assignee about a new task. Self-assignment sends nothing."""
    if to_user_id == store.user_id:
        return None
    return await dispatch(
        store,
        to_user_id,
        title="New Task Assigned",
        message=f"You have been assigned a new task: {task_title}",
        notification_type="project",
        sink=sink,
    )


# ── recipient side ────────────────────────────────────────────────────


async def list_notifications(store: EntityStore, unread_only: bool = False) -> list[Notification]:
    filters = [Eq("user_id", store.user_id)]
    if unread_only:
        filters.append(Eq("read", False))
    return await store.query(
        "notifications", *filters, order=[Order("created_at", desc=True)]
    )


async def unread_count(store: EntityStore) -> int:
    return await store.count("notifications", Eq("user_id", store.user_id), Eq("read", False))


async def mark_read(store: EntityStore, notification_id: uuid.UUID) -> Notification:
    await store.single("notifications", Eq("id", notification_id))
    rows = await store.update("notifications", Eq("id", notification_id), patch={"read": True})
    return rows[0]


async def mark_all_read(store: EntityStore) -> int:
    rows = await store.update(
        "notifications",
        Eq("user_id", store.user_id),
        Eq("read", False),
        patch={"read": True},
    )
    return len(rows)


async def delete_notification(store: EntityStore, notification_id: uuid.UUID) -> None:
    await store.single("notifications", Eq("id", notification_id))
    await store.delete("notifications", Eq("id", notification_id))
