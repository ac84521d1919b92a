import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

Priority = Literal["high", "moderate", "low"]


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    priority: Priority = "moderate"
    deadline: date
    team_members: list[uuid.UUID] = []


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: Priority | None = None
    deadline: date | None = None
    team_members: list[uuid.UUID] | None = None


class ProjectResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    priority: Priority
    deadline: date
    progress: int
    creator_id: uuid.UUID
    team_members: list[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectMessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
