"""Endpoints for the calling student (a student user with a linked profile)."""

from fastapi import APIRouter, Depends, Query

from hifz.config.app_config import AppConfig
from hifz.core.models import Student
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.deps import (
    get_config,
    get_stats,
    get_store,
    require_student_profile,
    resolve_days,
    resolve_limit,
)
from hifz.web.schemas import (
    LessonProgressPoint,
    LessonWithDetailsResponse,
    ProgressPoint,
    SessionWithDetailsResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/student", tags=["student"])


@router.get("/teacher", response_model=UserResponse | None)
async def my_teacher(
    student: Student = Depends(require_student_profile),
    store: HifzStore = Depends(get_store),
) -> UserResponse | None:
    """First teacher the student is linked to, or null."""
    teachers = store.get_student_teachers(student.id)
    if not teachers:
        return None
    return UserResponse.from_entity(teachers[0])


@router.get("/lessons", response_model=list[LessonWithDetailsResponse])
async def my_lessons(
    student: Student = Depends(require_student_profile),
    store: HifzStore = Depends(get_store),
    stats: StatsEngine = Depends(get_stats),
) -> list[LessonWithDetailsResponse]:
    """All lessons of the student, newest first."""
    total = len(store.get_lessons_by_student(student.id))
    lessons = stats.get_recent_lessons(total, student_id=student.id)
    return [LessonWithDetailsResponse.from_entity(lesson) for lesson in lessons]


@router.get("/sessions/recent", response_model=list[SessionWithDetailsResponse])
async def my_recent_sessions(
    limit: int | None = Query(default=None, ge=1),
    student: Student = Depends(require_student_profile),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[SessionWithDetailsResponse]:
    sessions = stats.get_recent_sessions(resolve_limit(limit, config), student_id=student.id)
    return [SessionWithDetailsResponse.from_entity(s) for s in sessions]


@router.get("/progress", response_model=list[ProgressPoint])
async def my_progress(
    days: int | None = Query(default=None, ge=1),
    student: Student = Depends(require_student_profile),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[ProgressPoint]:
    """Seven-day smoothed mistake counts from peer sessions."""
    points = stats.get_student_progress(student.id, resolve_days(days, config))
    return [ProgressPoint.from_entity(p) for p in points]


@router.get("/lesson-progress", response_model=list[LessonProgressPoint])
async def my_lesson_progress(
    days: int | None = Query(default=None, ge=1),
    student: Student = Depends(require_student_profile),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[LessonProgressPoint]:
    """Raw per-day lesson and lesson-mistake counts."""
    points = stats.get_student_lesson_progress(student.id, resolve_days(days, config))
    return [LessonProgressPoint.from_entity(p) for p in points]
