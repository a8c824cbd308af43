"""Profile and session storage around the aggregator: load snapshot, fold, commit."""
import asyncio
import json
import logging
import weakref
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from teachsim.models.achievement import Achievement
from teachsim.models.progress import Progress
from teachsim.models.training_session import TrainingSession
from teachsim.models.user import User
from teachsim.services.progress import (
    SKILL_NAMES,
    AchievementEntry,
    FoldResult,
    ProfileContext,
    ProfileSnapshot,
    SessionResult,
    UserProgress,
    UserSkills,
    as_utc,
    recompute_from_sessions,
    round_half_up,
    utc_now,
)

logger = logging.getLogger(__name__)

PROGRESS_FIELDS = (
    "total_sessions",
    "completed_scenarios",
    "average_score",
    "total_time_spent",
    "streak",
    "last_session_date",
)


class SessionNotFound(LookupError):
    pass


# One lock per user: a session fold is a read-modify-write of the progress row.
# Entries live only while some coroutine holds a reference to the lock.
_user_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def get_user_lock(user_id: int) -> asyncio.Lock:
    return _user_locks.setdefault(user_id, asyncio.Lock())


def default_display_name(email: str | None, user_id: int | None = None) -> str:
    if email:
        return email.split("@")[0]
    return f"User_{user_id}"


def progress_from_row(row: Progress) -> UserProgress:
    last = row.last_session_date
    return UserProgress(
        total_sessions=row.total_sessions,
        completed_scenarios=row.completed_scenarios,
        average_score=row.average_score,
        total_time_spent=row.total_time_spent,
        streak=row.streak,
        last_session_date=as_utc(last) if last is not None else None,
    )


def skills_from_row(row: Progress) -> UserSkills:
    return UserSkills(**{name: getattr(row, name) for name in SKILL_NAMES})


def achievements_from_rows(rows: list[Achievement]) -> dict[str, AchievementEntry]:
    return {
        a.achievement_id: AchievementEntry(
            unlocked_at=as_utc(a.unlocked_at),
            title=a.title,
            description=a.description,
            icon=a.icon,
        )
        for a in rows
    }


def session_from_row(row: TrainingSession) -> SessionResult:
    return SessionResult(
        score=row.score,
        duration=row.duration,
        skills_gained=json.loads(row.skills_gained_json or "{}"),
    )


def add_profile(db: AsyncSession, user_id: int) -> Progress:
    """Add the all-zero progress/skills row for a user; the caller commits."""
    progress = Progress(
        user_id=user_id,
        total_sessions=0,
        completed_scenarios=0,
        average_score=0,
        total_time_spent=0,
        streak=0,
        last_session_date=None,
        **dict.fromkeys(SKILL_NAMES, 0),
    )
    db.add(progress)
    logger.info("Profile created for user %s", user_id)
    return progress


async def _get_or_create_progress_row(db: AsyncSession, user_id: int, for_update: bool = False) -> Progress:
    stmt = select(Progress).where(Progress.user_id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    progress = result.scalar_one_or_none()
    if progress is None:
        logger.warning("Progress row missing for user %s, recreating", user_id)
        progress = add_profile(db, user_id)
        await db.commit()
    return progress


async def _get_achievement_rows(db: AsyncSession, user_id: int) -> list[Achievement]:
    result = await db.execute(
        select(Achievement).where(Achievement.user_id == user_id).order_by(Achievement.id)
    )
    return list(result.scalars().all())


async def load_snapshot(db: AsyncSession, user_id: int) -> ProfileSnapshot:
    """Return the user's current progress, skills and achievements."""
    async with get_user_lock(user_id):
        row = await _get_or_create_progress_row(db, user_id)
        achievements = await _get_achievement_rows(db, user_id)
    return ProfileSnapshot(
        progress=progress_from_row(row),
        skills=skills_from_row(row),
        achievements=achievements_from_rows(achievements),
    )


async def save_session_results(
    db: AsyncSession,
    user_id: int,
    session: SessionResult,
    clock: Callable[[], datetime] = utc_now,
    scenario_id: str | None = None,
) -> tuple[int, FoldResult]:
    """Append a completed session and fold it into the user's profile.

    Returns (session id, fold result). InvalidInput propagates before anything
    is written.
    """
    lock = get_user_lock(user_id)
    async with lock:
        row = await _get_or_create_progress_row(db, user_id, for_update=True)
        context = ProfileContext(
            user_id=user_id,
            snapshot=ProfileSnapshot(
                progress=progress_from_row(row),
                skills=skills_from_row(row),
                achievements=achievements_from_rows(await _get_achievement_rows(db, user_id)),
            ),
            clock=clock,
        )
        result = context.fold(session)
        completed_at = result.progress.last_session_date

        record = TrainingSession(
            user_id=user_id,
            scenario_id=scenario_id,
            score=round_half_up(session.score),
            duration=session.duration,
            skills_gained_json=json.dumps(session.skills_gained),
            completed_at=completed_at,
        )
        db.add(record)

        for field in PROGRESS_FIELDS:
            setattr(row, field, getattr(result.progress, field))
        for name in SKILL_NAMES:
            setattr(row, name, getattr(result.skills, name))

        for achievement_id in result.newly_unlocked:
            entry = result.achievements[achievement_id]
            db.add(
                Achievement(
                    user_id=user_id,
                    achievement_id=achievement_id,
                    unlocked_at=entry.unlocked_at,
                    title=entry.title,
                    description=entry.description,
                    icon=entry.icon,
                )
            )

        await db.flush()
        await db.commit()

    logger.info(
        "Session %s saved for user %s: score=%s total_sessions=%s streak=%s",
        record.id, user_id, session.score, result.progress.total_sessions, result.progress.streak,
    )
    for achievement_id in result.newly_unlocked:
        logger.info("Achievement unlocked for user %s: %s", user_id, achievement_id)
    return record.id, result


async def get_session_history(db: AsyncSession, user_id: int, limit: int = 10) -> list[TrainingSession]:
    """Most recent sessions first."""
    result = await db.execute(
        select(TrainingSession)
        .where(TrainingSession.user_id == user_id)
        .order_by(TrainingSession.completed_at.desc(), TrainingSession.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def delete_session(db: AsyncSession, user_id: int, session_id: int) -> UserProgress:
    """Delete one of the user's sessions and recompute stats from the rest."""
    lock = get_user_lock(user_id)
    async with lock:
        result = await db.execute(
            select(TrainingSession).where(
                TrainingSession.id == session_id,
                TrainingSession.user_id == user_id,
            )
        )
        if result.scalar_one_or_none() is None:
            raise SessionNotFound(f"session {session_id} not found")

        await db.execute(delete(TrainingSession).where(TrainingSession.id == session_id))
        row = await _get_or_create_progress_row(db, user_id, for_update=True)

        remaining = await db.execute(
            select(TrainingSession).where(TrainingSession.user_id == user_id).order_by(TrainingSession.id)
        )
        progress = recompute_from_sessions(
            progress_from_row(row),
            [session_from_row(s) for s in remaining.scalars().all()],
        )
        row.total_sessions = progress.total_sessions
        row.average_score = progress.average_score
        row.total_time_spent = progress.total_time_spent
        await db.commit()

    logger.info("Session %s deleted for user %s", session_id, user_id)
    return progress


async def update_display_name(db: AsyncSession, user: User, display_name: str) -> User:
    user.display_name = display_name
    user.updated_at = utc_now()
    await db.commit()
    await db.refresh(user)
    logger.info("Profile updated for user %s", user.id)
    return user
