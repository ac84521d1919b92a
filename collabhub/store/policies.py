"""Row-level authorization rules, one entry per table.

Each rule is a function of the acting user id returning a filter. Read rules
are appended to every query so invisible rows simply do not exist for the
caller. Write rules are evaluated against rows before the statement is sent;
for updates both the current row and the patched row must pass. ``None``
means the operation is never allowed for regular users.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass

from collabhub.store.filters import Always, Contains, Eq, Filter, Or

Rule = Callable[[uuid.UUID], Filter]


@dataclass(frozen=True)
class TablePolicy:
    read: Rule
    insert: Rule | None
    update: Rule | None
    delete: Rule | None
    mutable_columns: frozenset[str]


def _owner(column: str) -> Rule:
    return lambda uid: Eq(column, uid)


def _either(*columns: str) -> Rule:
    return lambda uid: Or(*(Eq(c, uid) for c in columns))


def _anyone(uid: uuid.UUID) -> Filter:
    return Always


POLICIES: dict[str, TablePolicy] = {
    "profiles": TablePolicy(
        read=_anyone,
        insert=_owner("id"),
        update=_owner("id"),
        delete=None,
        mutable_columns=frozenset(
            {"username", "bio", "skills", "experience", "resume_url", "avatar_url", "linkedin", "github"}
        ),
    ),
    "projects": TablePolicy(
        read=lambda uid: Or(Eq("creator_id", uid), Contains("team_members", uid)),
        insert=_owner("creator_id"),
        update=_owner("creator_id"),
        delete=_owner("creator_id"),
        mutable_columns=frozenset(
            {"name", "description", "priority", "deadline", "progress", "team_members"}
        ),
    ),
    "tasks": TablePolicy(
        read=_either("user_id", "assigned_to"),
        insert=_owner("user_id"),
        update=_either("user_id", "assigned_to"),
        delete=_owner("user_id"),
        mutable_columns=frozenset(
            {"title", "description", "priority", "status", "deadline", "assigned_to", "project_id"}
        ),
    ),
    "friendships": TablePolicy(
        read=_either("requester_id", "addressee_id"),
        insert=_owner("requester_id"),
        update=_either("requester_id", "addressee_id"),
        delete=_either("requester_id", "addressee_id"),
        mutable_columns=frozenset({"status"}),
    ),
    "messages": TablePolicy(
        read=_either("sender_id", "receiver_id"),
        insert=_owner("sender_id"),
        update=_owner("receiver_id"),
        delete=None,
        mutable_columns=frozenset({"read"}),
    ),
    # Any authenticated identity may notify any user
    "notifications": TablePolicy(
        read=_owner("user_id"),
        insert=_anyone,
        update=_owner("user_id"),
        delete=_owner("user_id"),
        mutable_columns=frozenset({"read"}),
    ),
    "calendar_events": TablePolicy(
        read=_owner("user_id"),
        insert=_owner("user_id"),
        update=_owner("user_id"),
        delete=_owner("user_id"),
        mutable_columns=frozenset({"title", "description", "priority", "date", "deadline"}),
    ),
}
