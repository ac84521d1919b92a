"""Friend view over directed friendship rows.

A row is a request from ``requester_id`` to ``addressee_id``. At most one row
exists per unordered pair, so "friends" means an accepted row in either
orientation.
"""

import logging
import uuid

from collabhub.feedback import ToastSink
from collabhub.models.friendship import Friendship
from collabhub.models.profile import Profile
from collabhub.services.notification_service import notify_friend_request
from collabhub.store import (
    And,
    ConstraintViolation,
    EntityStore,
    Eq,
    ILike,
    In,
    NotFound,
    Or,
    Order,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def _other(friendship: Friendship, user_id: uuid.UUID) -> uuid.UUID:
    if friendship.requester_id == user_id:
        return friendship.addressee_id
    return friendship.requester_id


def _pair(a: uuid.UUID, b: uuid.UUID) -> Or:
    return Or(
        And(Eq("requester_id", a), Eq("addressee_id", b)),
        And(Eq("requester_id", b), Eq("addressee_id", a)),
    )


def _involving(user_id: uuid.UUID) -> Or:
    return Or(Eq("requester_id", user_id), Eq("addressee_id", user_id))


async def _profiles_by_id(store: EntityStore, ids) -> dict[uuid.UUID, Profile]:
    ids = list(dict.fromkeys(ids))
    if not ids:
        return {}
    rows = await store.query("profiles", In("id", ids))
    return {p.id: p for p in rows}


async def list_friends(store: EntityStore, user_id: uuid.UUID | None = None) -> list[Profile]:
    """Profiles on the other end of every accepted row involving the user."""
    user_id = user_id or store.user_id
    rows = await store.query(
        "friendships",
        _involving(user_id),
        Eq("status", "accepted"),
        order=[Order("created_at")],
    )
    friend_ids = [_other(f, user_id) for f in rows]
    profiles = await _profiles_by_id(store, friend_ids)
    return [profiles[fid] for fid in dict.fromkeys(friend_ids) if fid in profiles]


async def _requests(store: EntityStore, column: str, user_id: uuid.UUID) -> list[dict]:
    rows = await store.query(
        "friendships",
        Eq(column, user_id),
        Eq("status", "pending"),
        order=[Order("created_at", desc=True)],
    )
    profiles = await _profiles_by_id(store, [_other(f, user_id) for f in rows])
    return [
        {
            "id": f.id,
            "requester_id": f.requester_id,
            "addressee_id": f.addressee_id,
            "status": f.status,
            "created_at": f.created_at,
            "counterpart": profiles.get(_other(f, user_id)),
        }
        for f in rows
    ]


async def list_incoming_requests(store: EntityStore, user_id: uuid.UUID | None = None) -> list[dict]:
    """Pending requests addressed to the user, with the requester's profile."""
    return await _requests(store, "addressee_id", user_id or store.user_id)


async def list_outgoing_requests(store: EntityStore, user_id: uuid.UUID | None = None) -> list[dict]:
    """Pending requests the user sent, with the addressee's profile."""
    return await _requests(store, "requester_id", user_id or store.user_id)


async def _excluded_ids(store: EntityStore, user_id: uuid.UUID) -> set[uuid.UUID]:
    # Friends plus anyone with a pending request in either direction
    rows = await store.query(
        "friendships", _involving(user_id), In("status", ["accepted", "pending"])
    )
    return {_other(f, user_id) for f in rows}


async def search_candidates(
    store: EntityStore, query: str, exclude: set[uuid.UUID] | None = None
) -> list[Profile]:
    text = query.strip()
    if not text:
        return []
    user_id = store.user_id
    if exclude is None:
        exclude = await _excluded_ids(store, user_id)
    skip = set(exclude) | {user_id}

    # Over-fetch so exclusions do not starve the result page
    rows = await store.query(
        "profiles",
        ILike("username", text),
        order=[Order("username")],
        limit=SEARCH_LIMIT + len(skip),
    )
    return [p for p in rows if p.id not in skip][:SEARCH_LIMIT]


async def are_friends(store: EntityStore, a: uuid.UUID, b: uuid.UUID) -> bool:
    count = await store.count("friendships", _pair(a, b), Eq("status", "accepted"))
    return count > 0


async def send_request(
    store: EntityStore, addressee_id: uuid.UUID, sink: ToastSink | None = None
) -> Friendship:
    user_id = store.user_id
    if addressee_id == user_id:
        raise ConstraintViolation("Cannot send a friend request to yourself", "friendships")

    await store.single("profiles", Eq("id", addressee_id))
    existing = await store.count("friendships", _pair(user_id, addressee_id))
    if existing:
        raise ConstraintViolation("A friendship or request already exists", "friendships")

    friendship = await store.insert(
        "friendships",
        {"requester_id": user_id, "addressee_id": addressee_id, "status": "pending"},
    )
    logger.info("Friend request %s sent from %s to %s", friendship.id, user_id, addressee_id)

    await notify_friend_request(store, addressee_id, sink=sink)
    if sink is not None:
        sink.success("Friend request sent")
    return friendship


async def respond(store: EntityStore, request_id: uuid.UUID, status: str) -> Friendship:
    """Accept or decline a pending request addressed to the caller."""
    if status not in ("accepted", "declined"):
        raise ValueError(f"Invalid response: {status}")

    friendship = await store.single("friendships", Eq("id", request_id))
    if friendship.addressee_id != store.user_id:
        raise PermissionDenied("Only the addressee can respond to a request", "friendships")
    if friendship.status != "pending":
        raise ConstraintViolation("Request is no longer pending", "friendships")

    rows = await store.update("friendships", Eq("id", request_id), patch={"status": status})
    logger.info("Friend request %s %s", request_id, status)
    return rows[0]


async def cancel_request(store: EntityStore, request_id: uuid.UUID) -> None:
    friendship = await store.single("friendships", Eq("id", request_id))
    if friendship.requester_id != store.user_id:
        raise PermissionDenied("Only the requester can cancel a request", "friendships")
    if friendship.status != "pending":
        raise ConstraintViolation("Request is no longer pending", "friendships")
    await store.delete("friendships", Eq("id", request_id))


async def remove_friend(store: EntityStore, friend_id: uuid.UUID) -> None:
    deleted = await store.delete(
        "friendships", _pair(store.user_id, friend_id), Eq("status", "accepted")
    )
    if not deleted:
        raise NotFound("Not friends with this user", "friendships")
