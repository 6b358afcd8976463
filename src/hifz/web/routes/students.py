"""Student endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hifz.config.app_config import AppConfig
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.deps import get_config, get_stats, get_store, patch_changes, resolve_days
from hifz.web.schemas import (
    LessonProgressPoint,
    ProgressPoint,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    StudentWithStatsResponse,
)

router = APIRouter(prefix="/api/students", tags=["students"])


def _not_found(student_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Student {student_id} not found",
    )


@router.get("", response_model=list[StudentResponse])
async def list_students(store: HifzStore = Depends(get_store)) -> list[StudentResponse]:
    """List all students."""
    return [StudentResponse.from_entity(s) for s in store.list_students()]


@router.get("/stats", response_model=list[StudentWithStatsResponse])
async def list_students_with_stats(
    stats: StatsEngine = Depends(get_stats),
) -> list[StudentWithStatsResponse]:
    """Every student with session count, average mistakes and top mistake type."""
    return [StudentWithStatsResponse.from_entity(s) for s in stats.get_all_students_with_stats()]


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    store: HifzStore = Depends(get_store),
) -> StudentResponse:
    """Create a new student."""
    student = store.create_student(**payload.model_dump())
    return StudentResponse.from_entity(student)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(student_id: int, store: HifzStore = Depends(get_store)) -> StudentResponse:
    """Get a specific student by ID."""
    student = store.get_student(student_id)
    if student is None:
        raise _not_found(student_id)
    return StudentResponse.from_entity(student)


@router.put("/{student_id}", response_model=StudentResponse)
@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: int,
    payload: StudentUpdate,
    store: HifzStore = Depends(get_store),
) -> StudentResponse:
    """Partially update a student."""
    changes = patch_changes(
        payload,
        nullable=("user_id", "current_surah", "current_ayah", "notes"),
    )
    student = store.update_student(student_id, changes)
    if student is None:
        raise _not_found(student_id)
    return StudentResponse.from_entity(student)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(student_id: int, store: HifzStore = Depends(get_store)) -> None:
    """Delete a student along with its sessions, mistakes, lessons and links."""
    if not store.delete_student(student_id):
        raise _not_found(student_id)


@router.get("/{student_id}/stats", response_model=StudentWithStatsResponse)
async def get_student_stats(
    student_id: int,
    stats: StatsEngine = Depends(get_stats),
) -> StudentWithStatsResponse:
    result = stats.get_student_with_stats(student_id)
    if result is None:
        raise _not_found(student_id)
    return StudentWithStatsResponse.from_entity(result)


@router.get("/{student_id}/progress", response_model=list[ProgressPoint])
async def get_student_progress(
    student_id: int,
    days: int | None = Query(default=None, ge=1),
    store: HifzStore = Depends(get_store),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[ProgressPoint]:
    """Seven-day smoothed mistake counts of a student."""
    if store.get_student(student_id) is None:
        raise _not_found(student_id)
    points = stats.get_student_progress(student_id, resolve_days(days, config))
    return [ProgressPoint.from_entity(p) for p in points]


@router.get("/{student_id}/lesson-progress", response_model=list[LessonProgressPoint])
async def get_student_lesson_progress(
    student_id: int,
    days: int | None = Query(default=None, ge=1),
    store: HifzStore = Depends(get_store),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[LessonProgressPoint]:
    """Per-day lesson and lesson-mistake counts of a student."""
    if store.get_student(student_id) is None:
        raise _not_found(student_id)
    points = stats.get_student_lesson_progress(student_id, resolve_days(days, config))
    return [LessonProgressPoint.from_entity(p) for p in points]
