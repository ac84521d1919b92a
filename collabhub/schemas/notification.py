import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

NotificationType = Literal["friend_request", "task_deadline", "chat", "project"]


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    message: str
    type: NotificationType
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
