import datetime
import uuid

from pydantic import BaseModel, Field

from collabhub.schemas.project import Priority


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    priority: Priority = "moderate"
    date: datetime.date
    deadline: datetime.date | None = None


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: Priority | None = None
    date: datetime.date | None = None
    deadline: datetime.date | None = None


class EventResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str
    priority: Priority
    date: datetime.date
    deadline: datetime.date | None
    created_at: datetime.datetime

    model_config = {"from_attributes": True}
