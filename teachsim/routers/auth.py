"""Auth routes: register, login, logout. Session-based auth via secure cookie."""
from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teachsim.core.config import get_settings
from teachsim.core.security import (
    create_session_token,
    hash_password,
    verify_password,
    verify_session_token,
)
from teachsim.db.session import get_db
from teachsim.models.user import User
from teachsim.schemas.auth import LoginSchema, RegisterSchema, UserOutSchema
from teachsim.services.profile_store import add_profile, default_display_name
from teachsim.services.progress import utc_now

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()
logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _set_auth_cookie(response: Response, user_id: int) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=create_session_token(user_id),
        max_age=settings.auth_cookie_max_age,
        httponly=True,
        samesite="lax",
        path="/",
    )


async def get_current_user_optional(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Return current user if auth cookie is valid; else None."""
    user_id = verify_session_token(request.cookies.get(settings.auth_cookie_name))
    if user_id is None:
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    current_user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    if current_user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return current_user


@router.post("/register", response_model=UserOutSchema, status_code=201)
async def register(
    body: RegisterSchema,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create user with an all-zero profile and log them in."""
    email_norm = _normalize_email(body.email)
    pwd = body.password or ""

    if not email_norm or not EMAIL_RE.match(email_norm):
        raise HTTPException(status_code=400, detail="email")
    if len(pwd) < 8:
        raise HTTPException(status_code=400, detail="short")
    # bcrypt hard limit: 72 bytes (UTF-8)
    if len(pwd.encode("utf-8")) > 72:
        raise HTTPException(status_code=400, detail="toolong")

    existing = await db.execute(select(User).where(User.email == email_norm))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail="exists")

    display_name = (body.display_name or "").strip() or default_display_name(email_norm)
    now = utc_now()
    user = User(
        email=email_norm,
        hashed_password=hash_password(pwd),
        display_name=display_name,
        role="student",
        created_at=now,
        last_login_at=now,
    )
    db.add(user)
    await db.flush()
    add_profile(db, user.id)
    await db.commit()
    await db.refresh(user)

    logger.info("User registered: %s (id=%s)", email_norm, user.id)
    _set_auth_cookie(response, user.id)
    return user


@router.post("/login", response_model=UserOutSchema)
async def login(
    body: LoginSchema,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Authenticate, stamp last login and set auth cookie."""
    email_norm = _normalize_email(body.email)
    result = await db.execute(select(User).where(User.email == email_norm))
    user = result.scalar_one_or_none()
    if not user or not verify_password(body.password, user.hashed_password):
        logger.info("Failed login for %s", email_norm)
        raise HTTPException(status_code=401, detail="invalid")

    user.last_login_at = utc_now()
    await db.commit()
    await db.refresh(user)

    logger.info("User logged in: %s", email_norm)
    _set_auth_cookie(response, user.id)
    return user


@router.post("/logout", status_code=204)
async def logout(response: Response):
    """Clear auth cookie."""
    # path must match the one used in set_cookie()
    response.delete_cookie(settings.auth_cookie_name, path="/")
    logger.info("User logged out")
