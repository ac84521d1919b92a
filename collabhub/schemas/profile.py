import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ProfileSummary(BaseModel):
    id: uuid.UUID
    username: str
    bio: str | None = None
    avatar_url: str | None = None

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    id: uuid.UUID
    username: str
    bio: str | None
    skills: list[str]
    experience: str | None
    resume_url: str | None
    avatar_url: str | None
    linkedin: str | None
    github: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=255)
    bio: str | None = Field(default=None, max_length=2000)
    skills: list[str] | None = None
    experience: str | None = Field(default=None, max_length=5000)
    linkedin: str | None = Field(default=None, max_length=1024)
    github: str | None = Field(default=None, max_length=1024)
