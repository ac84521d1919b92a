import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from collabhub.schemas.profile import ProfileSummary


class FriendRequestCreate(BaseModel):
    addressee_id: uuid.UUID


class FriendRequestRespond(BaseModel):
    status: Literal["accepted", "declined"]


class FriendRequestResponse(BaseModel):
    id: uuid.UUID
    requester_id: uuid.UUID
    addressee_id: uuid.UUID
    status: str
    created_at: datetime
    counterpart: ProfileSummary | None = None

    model_config = {"from_attributes": True}
