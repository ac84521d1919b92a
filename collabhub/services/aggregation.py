"""Derived values: project progress, activity classes and date labels.

Pure functions over rows already fetched; nothing here touches the store.
Rows may be ORM objects or plain dicts.
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

UPCOMING_WINDOW_DAYS = 7

ActivityClass = Literal["completed", "overdue", "upcoming", "normal"]


@dataclass(frozen=True)
class ActivityItem:
    """A task or a calendar event in an activity list; ``kind`` tells which."""

    kind: Literal["task", "event"]
    id: uuid.UUID
    title: str
    priority: str
    deadline: date
    classification: ActivityClass
    label: str
    description: str = ""
    status: str | None = None  # events carry no status
    project_name: str | None = None


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def days_until(target: date | datetime | str, now: date | datetime) -> int:
    """Whole calendar days from ``now`` to ``target`` (negative when past)."""
    return (as_date(target) - as_date(now)).days


def compute_project_progress(tasks: Iterable[Any]) -> int:
    """Percentage of completed tasks, rounded half up; 0 for no tasks."""
    statuses = [_field(t, "status") for t in tasks]
    total = len(statuses)
    if total == 0:
        return 0
    completed = sum(1 for s in statuses if s == "completed")
    # floor(100 * c / n + 0.5) in integer arithmetic
    return (200 * completed + total) // (2 * total)


def classify_activity(item: Any, now: date | datetime) -> str:
    if _field(item, "status") == "completed":
        return "completed"
    deadline = _field(item, "deadline")
    if deadline is None:
        return "normal"
    delta = days_until(deadline, now)
    if delta < 0:
        return "overdue"
    if 0 < delta <= UPCOMING_WINDOW_DAYS:
        return "upcoming"
    return "normal"


def format_relative_date(value: date | datetime | str, now: date | datetime) -> str:
    target = as_date(value)
    delta = days_until(target, now)
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Tomorrow"
    if delta == -1:
        return "Yesterday"
    if 1 < delta <= UPCOMING_WINDOW_DAYS:
        return f"In {delta} days"
    if -UPCOMING_WINDOW_DAYS <= delta < -1:
        return f"{-delta} days ago"
    label = f"{target:%b} {target.day}"
    if target.year != as_date(now).year:
        label += f", {target.year}"
    return label


def task_item(task: Any, now: date | datetime, project_name: str | None = None) -> ActivityItem:
    return ActivityItem(
        kind="task",
        id=_field(task, "id"),
        title=_field(task, "title"),
        description=_field(task, "description") or "",
        priority=_field(task, "priority"),
        status=_field(task, "status"),
        deadline=as_date(_field(task, "deadline")),
        project_name=project_name,
        classification=classify_activity(task, now),
        label=format_relative_date(_field(task, "deadline"), now),
    )


def event_item(event: Any, now: date | datetime) -> ActivityItem:
    # An event is due on its own date
    when = as_date(_field(event, "date"))
    return ActivityItem(
        kind="event",
        id=_field(event, "id"),
        title=_field(event, "title"),
        description=_field(event, "description") or "",
        priority=_field(event, "priority"),
        deadline=when,
        classification=classify_activity({"deadline": when}, now),
        label=format_relative_date(when, now),
    )


def bucket_activity(
    tasks: Iterable[Any],
    events: Iterable[Any],
    now: date | datetime,
    project_names: dict | None = None,
) -> dict[str, list[ActivityItem]]:
    """Split tasks and events into the completed / current / upcoming tabs."""
    project_names = project_names or {}
    buckets: dict[str, list[ActivityItem]] = {"completed": [], "current": [], "upcoming": []}

    for task in tasks:
        status = _field(task, "status")
        item = task_item(task, now, project_names.get(_field(task, "project_id")))
        if status == "completed":
            buckets["completed"].append(item)
        elif status == "in_progress":
            buckets["current"].append(item)
        elif status == "pending" and 0 < days_until(item.deadline, now) <= UPCOMING_WINDOW_DAYS:
            buckets["upcoming"].append(item)

    for event in events:
        item = event_item(event, now)
        if 0 < days_until(item.deadline, now) <= UPCOMING_WINDOW_DAYS:
            buckets["upcoming"].append(item)

    buckets["upcoming"].sort(key=lambda i: (i.deadline, i.kind))
    return buckets


DASHBOARD_PROJECTS = 4
DASHBOARD_TASKS = 5
DASHBOARD_FRIENDS = 6


def summarize_dashboard(projects: list, tasks: list, friends: list) -> dict:
    """Task counts over everything passed in, plus the first few of each list."""
    completed = sum(1 for t in tasks if _field(t, "status") == "completed")
    return {
        "open_tasks": len(tasks) - completed,
        "completed_tasks": completed,
        "projects": list(projects)[:DASHBOARD_PROJECTS],
        "tasks": list(tasks)[:DASHBOARD_TASKS],
        "friends": list(friends)[:DASHBOARD_FRIENDS],
    }
