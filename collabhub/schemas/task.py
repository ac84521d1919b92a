import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from collabhub.schemas.project import Priority

TaskStatus = Literal["pending", "in_progress", "completed"]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str = ""
    priority: Priority = "moderate"
    status: TaskStatus = "pending"
    deadline: date
    assigned_to: uuid.UUID | None = None  # defaults to the creator
    project_id: uuid.UUID | None = None


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    priority: Priority | None = None
    status: TaskStatus | None = None
    deadline: date | None = None
    assigned_to: uuid.UUID | None = None
    project_id: uuid.UUID | None = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    priority: Priority
    status: TaskStatus
    deadline: date
    assigned_to: uuid.UUID
    project_id: uuid.UUID | None
    user_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}
