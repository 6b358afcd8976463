"""Lesson and lesson-mistake endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.deps import get_stats, get_store, patch_changes
from hifz.web.schemas import (
    LessonMistakeCreate,
    LessonMistakeResponse,
    LessonResponse,
    LessonUpdate,
    LessonWithDetailsResponse,
)

router = APIRouter(prefix="/api", tags=["lessons"])


def _lesson_not_found(lesson_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Lesson {lesson_id} not found",
    )


@router.get("/lessons/{lesson_id}", response_model=LessonWithDetailsResponse)
async def get_lesson(
    lesson_id: int,
    stats: StatsEngine = Depends(get_stats),
) -> LessonWithDetailsResponse:
    details = stats.get_lesson_with_details(lesson_id)
    if details is None:
        raise _lesson_not_found(lesson_id)
    return LessonWithDetailsResponse.from_entity(details)


@router.patch("/lessons/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: int,
    payload: LessonUpdate,
    store: HifzStore = Depends(get_store),
) -> LessonResponse:
    lesson = store.update_lesson(lesson_id, patch_changes(payload, nullable=("notes",)))
    if lesson is None:
        raise _lesson_not_found(lesson_id)
    return LessonResponse.from_entity(lesson)


@router.patch("/lessons/{lesson_id}/complete", response_model=LessonResponse)
async def complete_lesson(lesson_id: int, store: HifzStore = Depends(get_store)) -> LessonResponse:
    lesson = store.complete_lesson(lesson_id)
    if lesson is None:
        raise _lesson_not_found(lesson_id)
    return LessonResponse.from_entity(lesson)


@router.delete("/lessons/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson(lesson_id: int, store: HifzStore = Depends(get_store)) -> None:
    """Delete a lesson and its mistakes."""
    if not store.delete_lesson(lesson_id):
        raise _lesson_not_found(lesson_id)


@router.get("/lessons/{lesson_id}/mistakes", response_model=list[LessonMistakeResponse])
async def lesson_mistakes(
    lesson_id: int,
    store: HifzStore = Depends(get_store),
) -> list[LessonMistakeResponse]:
    return [LessonMistakeResponse.from_entity(m) for m in store.get_mistakes_by_lesson(lesson_id)]


@router.post("/lesson-mistakes", response_model=LessonMistakeResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson_mistake(
    payload: LessonMistakeCreate,
    store: HifzStore = Depends(get_store),
) -> LessonMistakeResponse:
    """Record a mistake. The referenced lesson must exist."""
    mistake = store.create_lesson_mistake(**payload.model_dump())
    return LessonMistakeResponse.from_entity(mistake)


@router.delete("/lesson-mistakes/{mistake_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson_mistake(mistake_id: int, store: HifzStore = Depends(get_store)) -> None:
    if not store.delete_lesson_mistake(mistake_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Lesson mistake {mistake_id} not found",
        )
