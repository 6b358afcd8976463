"""Request dependencies: store access, configuration and the current user.

The current user is named by the ``X-User-Id`` header and must exist in the
store. Role-specific dependencies narrow it to a teacher or to a student with a
linked profile.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Header, HTTPException, Request, status
from pydantic import BaseModel

from hifz.config.app_config import AppConfig
from hifz.core.models import Student, User, UserRole
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore


def get_store(request: Request) -> HifzStore:
    return request.app.state.store


def get_stats(request: Request) -> StatsEngine:
    return request.app.state.stats


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_current_user(
    x_user_id: int | None = Header(default=None),
    store: HifzStore = Depends(get_store),
) -> User:
    """Resolve the calling user from the X-User-Id header."""
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = store.get_user(x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


def require_teacher(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.TEACHER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher access required",
        )
    return user


def require_student_profile(
    user: User = Depends(get_current_user),
    store: HifzStore = Depends(get_store),
) -> Student:
    """Student profile linked to the calling student user."""
    if user.role != UserRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required",
        )

    student = store.get_student_by_user(user.id)
    if student is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No student profile linked to user {user.id}",
        )
    return student


def resolve_days(days: int | None, config: AppConfig) -> int:
    """Requested day window, defaulted and capped by configuration."""
    if days is None:
        return config.stats.default_days
    return min(days, config.stats.max_days)


def resolve_limit(limit: int | None, config: AppConfig) -> int:
    if limit is None:
        return config.stats.recent_limit
    return limit


def patch_changes(payload: BaseModel, nullable: tuple[str, ...] = ()) -> dict[str, Any]:
    """Fields the client actually sent, minus nulls on non-nullable fields."""
    changes = payload.model_dump(exclude_unset=True)
    return {
        key: value
        for key, value in changes.items()
        if value is not None or key in nullable
    }
