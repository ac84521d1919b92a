from collabhub.models.base import Base
from collabhub.models.calendar_event import CalendarEvent
from collabhub.models.friendship import Friendship
from collabhub.models.message import Message
from collabhub.models.notification import Notification
from collabhub.models.profile import Profile
from collabhub.models.project import Project
from collabhub.models.task import Task

__all__ = [
    "Base",
    "CalendarEvent",
    "Friendship",
    "Message",
    "Notification",
    "Profile",
    "Project",
    "Task",
]
