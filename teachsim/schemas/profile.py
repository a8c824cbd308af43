"""Pydantic schemas for profile, progress, skills and achievements."""
from datetime import datetime

from pydantic import BaseModel, Field


class ProgressSchema(BaseModel):
    total_sessions: int
    completed_scenarios: int
    average_score: int
    total_time_spent: int
    streak: int
    last_session_date: datetime | None = None

    class Config:
        from_attributes = True


class SkillsSchema(BaseModel):
    empathy: int | None = None
    conflict_resolution: int | None = None
    boundary_keeping: int | None = None
    patience: int | None = None

    class Config:
        from_attributes = True


class AchievementSchema(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    unlocked_at: datetime


class AchievementStatusSchema(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    unlocked: bool
    unlocked_at: datetime | None = None


class ProfileOutSchema(BaseModel):
    id: int
    email: str
    display_name: str
    photo_url: str | None = None
    role: str
    created_at: datetime | None = None
    last_login_at: datetime | None = None
    updated_at: datetime | None = None
    progress: ProgressSchema
    skills: SkillsSchema
    achievements: list[AchievementSchema]


class ProfileUpdateSchema(BaseModel):
    display_name: str = Field(min_length=1, max_length=255)
