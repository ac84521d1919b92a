import logging
import uuid

from collabhub.feedback import ToastSink
from collabhub.models.message import Message
from collabhub.services.notification_service import notify_new_message
from collabhub.store import And, ConstraintViolation, EntityStore, Eq, Or, Order

logger = logging.getLogger(__name__)


def _conversation(a: uuid.UUID, b: uuid.UUID) -> Or:
    return Or(
        And(Eq("sender_id", a), Eq("receiver_id", b)),
        And(Eq("sender_id", b), Eq("receiver_id", a)),
    )


async def list_conversation(store: EntityStore, friend_id: uuid.UUID) -> list[Message]:
    """Messages between the caller and ``friend_id`` in both directions, oldest first."""
    return await store.query(
        "messages", _conversation(store.user_id, friend_id), order=[Order("created_at")]
    )


async def send_message(
    store: EntityStore,
    receiver_id: uuid.UUID,
    content: str,
    sink: ToastSink | None = None,
) -> Message:
    # Rejected here so no write is attempted at all
    if receiver_id == store.user_id:
        raise ConstraintViolation("Cannot send a message to yourself", "messages")
    text = content.strip()
    if not text:
        raise ConstraintViolation("Message content cannot be blank", "messages")

    message = await store.insert(
        "messages", {"sender_id": store.user_id, "receiver_id": receiver_id, "content": text}
    )
    logger.debug("Message %s sent from %s to %s", message.id, store.user_id, receiver_id)

    context = store.context
    sender_name = context.email or context.username or str(context.user_id)
    await notify_new_message(store, receiver_id, sender_name, sink=sink)
    return message


async def mark_conversation_read(store: EntityStore, friend_id: uuid.UUID) -> int:
    """Mark every unread message from ``friend_id`` to the caller as read."""
    rows = await store.update(
        "messages",
        Eq("sender_id", friend_id),
        Eq("receiver_id", store.user_id),
        Eq("read", False),
        patch={"read": True},
    )
    return len(rows)


async def unread_count(store: EntityStore, friend_id: uuid.UUID | None = None) -> int:
    filters = [Eq("receiver_id", store.user_id), Eq("read", False)]
    if friend_id is not None:
        filters.append(Eq("sender_id", friend_id))
    return await store.count("messages", *filters)
