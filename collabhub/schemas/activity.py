import uuid
from datetime import date
from typing import Literal

from pydantic import BaseModel

from collabhub.schemas.profile import ProfileSummary
from collabhub.schemas.project import ProjectResponse
from collabhub.schemas.task import TaskResponse
from collabhub.services.aggregation import ActivityClass


class ActivityItemResponse(BaseModel):
    kind: Literal["task", "event"]
    id: uuid.UUID
    title: str
    description: str = ""
    priority: str
    status: str | None = None  # events carry no status
    deadline: date
    project_name: str | None = None
    classification: ActivityClass
    label: str

    model_config = {"from_attributes": True}


class ActivityResponse(BaseModel):
    tab: Literal["completed", "current", "upcoming"]
    items: list[ActivityItemResponse]


class DashboardResponse(BaseModel):
    open_tasks: int
    completed_tasks: int
    projects: list[ProjectResponse]
    tasks: list[TaskResponse]
    friends: list[ProfileSummary]
