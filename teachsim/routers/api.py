"""API routes: JSON for profile, completed sessions and achievements."""
import json
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from teachsim.core.config import get_settings
from teachsim.db.session import get_db
from teachsim.models.user import User
from teachsim.routers.auth import get_current_user
from teachsim.schemas.profile import (
    AchievementSchema,
    AchievementStatusSchema,
    ProfileOutSchema,
    ProfileUpdateSchema,
    ProgressSchema,
    SkillsSchema,
)
from teachsim.schemas.session import (
    SessionDeletedSchema,
    SessionOutSchema,
    SessionSavedSchema,
    SessionSubmitSchema,
)
from teachsim.services import profile_store
from teachsim.services.progress import ACHIEVEMENTS, SessionResult, utc_now

router = APIRouter(prefix="/api", tags=["api"])
settings = get_settings()
logger = logging.getLogger(__name__)


def get_clock() -> Callable[[], datetime]:
    """Clock used for streaks and timestamps; overridden in tests."""
    return utc_now


def _achievement_list(achievements: dict) -> list[AchievementSchema]:
    return [
        AchievementSchema(id=achievement_id, **entry.model_dump())
        for achievement_id, entry in achievements.items()
    ]


@router.get("/profile", response_model=ProfileOutSchema)
async def get_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    """Profile with progress, skills and unlocked achievements."""
    snapshot = await profile_store.load_snapshot(db, user.id)
    return ProfileOutSchema(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        photo_url=user.photo_url,
        role=user.role,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
        updated_at=user.updated_at,
        progress=ProgressSchema(**snapshot.progress.model_dump()),
        skills=SkillsSchema(**snapshot.skills.model_dump()),
        achievements=_achievement_list(snapshot.achievements),
    )


@router.patch("/profile", response_model=ProfileOutSchema)
async def update_profile(
    body: ProfileUpdateSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    await profile_store.update_display_name(db, user, body.display_name.strip())
    return await get_profile(db, user)


@router.post("/sessions", response_model=SessionSavedSchema, status_code=201)
async def submit_session(
    body: SessionSubmitSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    clock: Annotated[Callable[[], datetime], Depends(get_clock)],
):
    """Save a completed session; return updated progress and newly unlocked achievements."""
    session = SessionResult(score=body.score, duration=body.duration, skills_gained=body.skills_gained)
    session_id, result = await profile_store.save_session_results(
        db, user.id, session, clock=clock, scenario_id=body.scenario_id
    )

    newly = {a: result.achievements[a] for a in result.newly_unlocked}
    return SessionSavedSchema(
        session_id=session_id,
        progress=ProgressSchema(**result.progress.model_dump()),
        skills=SkillsSchema(**result.skills.model_dump()),
        newly_unlocked=_achievement_list(newly),
    )


@router.get("/sessions", response_model=list[SessionOutSchema])
async def session_history(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
):
    """Most recent sessions first."""
    rows = await profile_store.get_session_history(db, user.id, limit or settings.session_history_limit)
    return [
        SessionOutSchema(
            id=row.id,
            scenario_id=row.scenario_id,
            score=row.score,
            duration=row.duration,
            skills_gained=json.loads(row.skills_gained_json or "{}"),
            completed_at=row.completed_at,
        )
        for row in rows
    ]


@router.delete("/sessions/{session_id}", response_model=SessionDeletedSchema)
async def delete_session(
    session_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    """Delete a session and recompute session count, average score and total time."""
    try:
        progress = await profile_store.delete_session(db, user.id, session_id)
    except profile_store.SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionDeletedSchema(deleted=session_id, progress=ProgressSchema(**progress.model_dump()))


@router.get("/achievements", response_model=list[AchievementStatusSchema])
async def list_achievements(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    """Full achievement catalogue with unlocked flags."""
    snapshot = await profile_store.load_snapshot(db, user.id)
    result = []
    for definition in ACHIEVEMENTS:
        entry = snapshot.achievements.get(definition.id)
        result.append(AchievementStatusSchema(
            id=definition.id,
            title=definition.title,
            description=definition.description,
            icon=definition.icon,
            unlocked=entry is not None,
            unlocked_at=entry.unlocked_at if entry else None,
        ))
    return result
