"""Pydantic schemas for completed training sessions."""
from datetime import datetime

from pydantic import BaseModel, Field

from teachsim.schemas.profile import AchievementSchema, ProgressSchema, SkillsSchema


# one day, in milliseconds
MAX_SESSION_DURATION = 24 * 60 * 60 * 1000


class SessionSubmitSchema(BaseModel):
    # range is checked by the aggregator (422 on violation)
    score: int
    duration: int = Field(ge=0, le=MAX_SESSION_DURATION)  # milliseconds
    skills_gained: dict[str, float] = Field(default_factory=dict)
    scenario_id: str | None = Field(default=None, max_length=128)


class SessionOutSchema(BaseModel):
    id: int
    scenario_id: str | None = None
    score: int
    duration: int
    skills_gained: dict[str, float]
    completed_at: datetime


class SessionSavedSchema(BaseModel):
    session_id: int
    progress: ProgressSchema
    skills: SkillsSchema
    newly_unlocked: list[AchievementSchema]


class SessionDeletedSchema(BaseModel):
    deleted: int
    progress: ProgressSchema
