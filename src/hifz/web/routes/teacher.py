"""Endpoints for the calling teacher."""

from fastapi import APIRouter, Depends, Query, status

from hifz.config.app_config import AppConfig
from hifz.core.models import User
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.deps import get_config, get_stats, get_store, require_teacher, resolve_limit
from hifz.web.schemas import (
    AssignStudentRequest,
    LessonCreate,
    LessonResponse,
    LessonWithDetailsResponse,
    StudentResponse,
    TeacherStatsResponse,
)

router = APIRouter(prefix="/api/teacher", tags=["teacher"])


@router.get("/stats", response_model=TeacherStatsResponse)
async def teacher_stats(
    teacher: User = Depends(require_teacher),
    stats: StatsEngine = Depends(get_stats),
) -> TeacherStatsResponse:
    """Lesson totals, completed lessons, distinct students and mistakes per lesson."""
    return TeacherStatsResponse.from_entity(stats.get_teacher_stats(teacher.id))


@router.get("/students", response_model=list[StudentResponse])
async def teacher_students(
    teacher: User = Depends(require_teacher),
    store: HifzStore = Depends(get_store),
) -> list[StudentResponse]:
    """Students linked to the teacher."""
    return [StudentResponse.from_entity(s) for s in store.get_teacher_students(teacher.id)]


@router.post("/students/assign", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def assign_student(
    payload: AssignStudentRequest,
    teacher: User = Depends(require_teacher),
    store: HifzStore = Depends(get_store),
) -> StudentResponse:
    """Link a student to the teacher. Assigning twice is harmless."""
    link = store.assign_student(teacher.id, payload.student_id)
    return StudentResponse.from_entity(store.get_student(link.student_id))


@router.post("/lessons", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    payload: LessonCreate,
    teacher: User = Depends(require_teacher),
    store: HifzStore = Depends(get_store),
) -> LessonResponse:
    lesson = store.create_lesson(teacher_id=teacher.id, **payload.model_dump())
    return LessonResponse.from_entity(lesson)


@router.get("/lessons/recent", response_model=list[LessonWithDetailsResponse])
async def recent_lessons(
    limit: int | None = Query(default=None, ge=1),
    teacher: User = Depends(require_teacher),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[LessonWithDetailsResponse]:
    """The teacher's most recent lessons, newest first."""
    lessons = stats.get_recent_lessons(resolve_limit(limit, config), teacher_id=teacher.id)
    return [LessonWithDetailsResponse.from_entity(lesson) for lesson in lessons]
