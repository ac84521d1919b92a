import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    receiver_id: uuid.UUID
    content: str = Field(min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    content: str
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CountResponse(BaseModel):
    count: int
