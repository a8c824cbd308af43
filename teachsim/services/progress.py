"""Profile aggregation: fold one completed session into progress, skills and achievements.

Everything here is a pure function of its arguments. Loading the current
snapshot and committing the result belongs to the profile store, which must
serialize updates per user.
"""
import math
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field

# Skills: exponential moving average, history 0.7 / latest session 0.3
HISTORY_WEIGHT = 0.7
RECENT_WEIGHT = 0.3
DEFAULT_CURRENT_SKILL = 50  # uninitialized skill counts as average
DEFAULT_GAINED_SKILL = 0  # no signal this session
MIN_SKILL = 0
MAX_SKILL = 100

MIN_SCORE = 0
MAX_SCORE = 100

DAY = timedelta(days=1)

SKILL_NAMES = ("empathy", "conflict_resolution", "boundary_keeping", "patience")

# camelCase keys sent by the browser client
SKILL_ALIASES = {
    "conflictResolution": "conflict_resolution",
    "boundaryKeeping": "boundary_keeping",
}


class InvalidInput(ValueError):
    """Session data that cannot be folded into a profile. Not retryable."""


class StreakMode(str, Enum):
    NONE = "none"
    INCREMENT = "increment"
    RESET_TO_ONE = "reset-to-one"


class UserProgress(BaseModel):
    total_sessions: int = 0
    completed_scenarios: int = 0
    average_score: int = 0
    total_time_spent: int = 0
    streak: int = 0
    last_session_date: datetime | None = None


class UserSkills(BaseModel):
    # None = never initialized
    empathy: int | None = None
    conflict_resolution: int | None = None
    boundary_keeping: int | None = None
    patience: int | None = None


class SessionResult(BaseModel):
    score: float
    duration: int = 0
    skills_gained: dict[str, float] = Field(default_factory=dict)


class AchievementEntry(BaseModel):
    unlocked_at: datetime
    title: str
    description: str
    icon: str


AchievementRecord = dict[str, AchievementEntry]


class ProfileState(NamedTuple):
    """Post-update progress and skills, as seen by achievement requirements."""

    progress: UserProgress
    skills: UserSkills


class AchievementDefinition(NamedTuple):
    id: str
    title: str
    description: str
    icon: str
    requirement: Callable[[ProfileState, SessionResult], bool]


class FoldResult(BaseModel):
    progress: UserProgress
    skills: UserSkills
    achievements: AchievementRecord
    newly_unlocked: list[str]


# Ids are stored in user records; never rename them.
ACHIEVEMENTS = [
    AchievementDefinition(
        "first_session", "Первый шаг", "Завершите первую тренировку", "🎓",
        lambda state, session: state.progress.total_sessions >= 1,
    ),
    AchievementDefinition(
        "empathy_master", "Мастер эмпатии", "Достигните 80+ баллов в эмпатии", "❤️",
        lambda state, session: state.skills.empathy >= 80,
    ),
    AchievementDefinition(
        "patient_teacher", "Терпеливый педагог", "Достигните 90+ баллов в терпении", "🧘",
        lambda state, session: state.skills.patience >= 90,
    ),
    AchievementDefinition(
        "perfectionist", "Перфекционист", "Получите 95+ баллов в сценарии", "⭐",
        lambda state, session: session.score >= 95,
    ),
    AchievementDefinition(
        "week_streak", "Неделя подряд", "Тренируйтесь 7 дней подряд", "🔥",
        lambda state, session: state.progress.streak >= 7,
    ),
]

ACHIEVEMENTS_BY_ID = {a.id: a for a in ACHIEVEMENTS}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def round_half_up(value: float) -> int:
    """Round .5 up, like the browser client's Math.round (Python's round() is banker's)."""
    return math.floor(value + 0.5)


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _clamp_skill(value: int) -> int:
    return max(MIN_SKILL, min(MAX_SKILL, value))


def normalize_skills(current: UserSkills) -> dict[str, float]:
    """Current skill values with missing or invalid entries replaced by 50."""
    values = {}
    for name in SKILL_NAMES:
        value = getattr(current, name)
        values[name] = value if _is_finite_number(value) else DEFAULT_CURRENT_SKILL
    return values


def normalize_gains(gained: Mapping[str, float]) -> dict[str, float]:
    """Full skill -> gain mapping; absent skills gain 0.

    Accepts snake_case and camelCase skill names. Raises InvalidInput for an
    unknown skill or a value that is not a finite number.
    """
    values = dict.fromkeys(SKILL_NAMES, DEFAULT_GAINED_SKILL)
    for key, value in gained.items():
        name = SKILL_ALIASES.get(key, key)
        if name not in values:
            raise InvalidInput(f"unknown skill {key!r}")
        if not _is_finite_number(value):
            raise InvalidInput(f"skills_gained[{key!r}] must be a finite number, got {value!r}")
        values[name] = value
    return values


def validate_session(session: SessionResult) -> dict[str, float]:
    """Check a session before folding; return its normalized skill gains."""
    score = session.score
    if not _is_finite_number(score) or not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidInput(f"score must be a finite number in [{MIN_SCORE}, {MAX_SCORE}], got {score!r}")
    return normalize_gains(session.skills_gained)


def update_skills(current: UserSkills, gained: Mapping[str, float]) -> UserSkills:
    """Blend each skill with this session's gain; result clamped to 0..100."""
    base = normalize_skills(current)
    gains = normalize_gains(gained)
    return UserSkills(**{
        name: _clamp_skill(round_half_up(base[name] * HISTORY_WEIGHT + gains[name] * RECENT_WEIGHT))
        for name in SKILL_NAMES
    })


def compute_streak(last_session_date: datetime | None, now: datetime) -> StreakMode:
    """Streak transition from elapsed whole days (not calendar dates) since the last session."""
    if last_session_date is None:
        return StreakMode.RESET_TO_ONE
    days = (as_utc(now) - as_utc(last_session_date)) // DAY
    if days == 0:
        return StreakMode.NONE
    if days == 1:
        return StreakMode.INCREMENT
    return StreakMode.RESET_TO_ONE


def apply_streak(streak: int, mode: StreakMode) -> int:
    if mode is StreakMode.NONE:
        return streak
    if mode is StreakMode.INCREMENT:
        return streak + 1
    return 1


def fold_session(
    progress: UserProgress,
    skills: UserSkills,
    achievements: AchievementRecord,
    session: SessionResult,
    now: datetime,
) -> FoldResult:
    """Fold one completed session into a profile snapshot.

    Inputs are not modified. The average is recomputed from the stored
    (already rounded) average and count, so over many sessions it can drift
    from the exact mean of all raw scores; existing records depend on this
    recurrence. Achievements already in the record are never re-evaluated.
    """
    gains = validate_session(session)

    total_sessions = progress.total_sessions + 1
    new_progress = progress.model_copy(update={
        "total_sessions": total_sessions,
        "average_score": round_half_up(
            (progress.average_score * progress.total_sessions + session.score) / total_sessions
        ),
        "completed_scenarios": progress.completed_scenarios + 1,
        "total_time_spent": progress.total_time_spent + session.duration,
        "streak": apply_streak(progress.streak, compute_streak(progress.last_session_date, now)),
        "last_session_date": now,
    })
    new_skills = update_skills(skills, gains)

    state = ProfileState(new_progress, new_skills)
    new_achievements = dict(achievements)
    newly_unlocked = []
    for definition in ACHIEVEMENTS:
        if definition.id in new_achievements:
            continue
        if definition.requirement(state, session):
            new_achievements[definition.id] = AchievementEntry(
                unlocked_at=now,
                title=definition.title,
                description=definition.description,
                icon=definition.icon,
            )
            newly_unlocked.append(definition.id)

    return FoldResult(
        progress=new_progress,
        skills=new_skills,
        achievements=new_achievements,
        newly_unlocked=newly_unlocked,
    )


def recompute_from_sessions(progress: UserProgress, sessions: Iterable[SessionResult]) -> UserProgress:
    """Rebuild session count, average and total time from the remaining session log.

    Used after a session is deleted. Streak and completed_scenarios are kept.
    """
    sessions = list(sessions)
    total = len(sessions)
    total_score = sum(s.score for s in sessions)
    return progress.model_copy(update={
        "total_sessions": total,
        "average_score": round_half_up(total_score / total) if total else 0,
        "total_time_spent": sum(s.duration for s in sessions),
    })


class ProfileSnapshot(BaseModel):
    progress: UserProgress = Field(default_factory=UserProgress)
    skills: UserSkills = Field(default_factory=UserSkills)
    achievements: AchievementRecord = Field(default_factory=dict)


class ProfileContext(BaseModel):
    """A user's loaded snapshot plus the clock used to fold sessions into it."""

    user_id: int
    snapshot: ProfileSnapshot
    clock: Callable[[], datetime] = utc_now

    def fold(self, session: SessionResult) -> FoldResult:
        snap = self.snapshot
        return fold_session(snap.progress, snap.skills, snap.achievements, session, self.clock())
