import uuid
from typing import Literal

from pydantic import BaseModel

from collabhub.schemas.profile import ProfileResponse


class AuthEventRequest(BaseModel):
    event: Literal["signed_in", "signed_out", "initial_session"]


class SessionResponse(BaseModel):
    status: Literal["signed_out", "signed_in", "profile_loading", "profile_ready"]
    user_id: uuid.UUID | None = None
    profile: ProfileResponse | None = None
