"""Pydantic schemas for the Web API.

Field names are snake_case in Python and camelCase on the wire. Request bodies
accept either spelling.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hifz import __version__
from hifz.core.models import MAX_JUZ, MIN_JUZ, LessonProgress, MistakeType, UserRole


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, entity: Any) -> "CamelModel":
        """Build from a core dataclass (or its ``to_dict`` output)."""
        data = entity if isinstance(entity, dict) else entity.to_dict()
        return cls.model_validate(data)


# =============================================================================
# USER SCHEMAS
# =============================================================================


class UserCreate(CamelModel):
    """Request body for creating a user."""

    username: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.STUDENT


class UserResponse(CamelModel):
    """Response for a user."""

    id: int
    username: str
    name: str
    role: UserRole
    created_at: datetime


# =============================================================================
# STUDENT SCHEMAS
# =============================================================================


class StudentCreate(CamelModel):
    """Request body for creating a student."""

    name: str = Field(..., min_length=1, max_length=100)
    grade: str = Field(default="adult", max_length=20)
    current_juz: int = Field(..., ge=MIN_JUZ, le=MAX_JUZ)
    user_id: int | None = None
    completed_juz: list[int] | None = None
    current_surah: str | None = None
    current_ayah: int | None = Field(default=None, ge=1)
    notes: str | None = None


class StudentUpdate(CamelModel):
    """Partial update of a student. Only fields that are sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    grade: str | None = Field(default=None, max_length=20)
    current_juz: int | None = Field(default=None, ge=MIN_JUZ, le=MAX_JUZ)
    user_id: int | None = None
    completed_juz: list[int] | None = None
    current_surah: str | None = None
    current_ayah: int | None = Field(default=None, ge=1)
    notes: str | None = None


class StudentResponse(CamelModel):
    """Response for a student."""

    id: int
    user_id: int | None = None
    name: str
    grade: str
    current_juz: int
    completed_juz: list[int] = Field(default_factory=list)
    current_surah: str | None = None
    current_ayah: int | None = None
    notes: str | None = None
    created_at: datetime


class StudentWithStatsResponse(StudentResponse):
    """A student with its session statistics."""

    session_count: int
    average_mistakes: float
    most_common_mistake_type: MistakeType | None = None
    juz_progress: int = 0


# =============================================================================
# SESSION SCHEMAS
# =============================================================================


class SessionCreate(CamelModel):
    """Request body for recording a peer revision session."""

    date: datetime | None = None
    student1_id: int
    student2_id: int
    surah_start: str = Field(..., min_length=1)
    ayah_start: int = Field(..., ge=1)
    surah_end: str = Field(..., min_length=1)
    ayah_end: int = Field(..., ge=1)
    completed: bool = False


class SessionUpdate(CamelModel):
    """Partial update of a session."""

    date: datetime | None = None
    student1_id: int | None = None
    student2_id: int | None = None
    surah_start: str | None = Field(default=None, min_length=1)
    ayah_start: int | None = Field(default=None, ge=1)
    surah_end: str | None = Field(default=None, min_length=1)
    ayah_end: int | None = Field(default=None, ge=1)
    completed: bool | None = None


class SessionResponse(CamelModel):
    """Response for a session."""

    id: int
    date: datetime
    student1_id: int
    student2_id: int
    surah_start: str
    ayah_start: int
    surah_end: str
    ayah_end: int
    completed: bool
    created_at: datetime


class SessionWithDetailsResponse(SessionResponse):
    """A session with both participants and its mistake count."""

    student1: StudentResponse
    student2: StudentResponse
    mistake_count: int


# =============================================================================
# MISTAKE SCHEMAS
# =============================================================================


class MistakeCreate(CamelModel):
    """Request body for recording a session mistake."""

    session_id: int
    student_id: int
    type: MistakeType
    surah: str = Field(..., min_length=1)
    ayah: int = Field(..., ge=1)
    description: str = ""


class MistakeUpdate(CamelModel):
    """Partial update of a mistake."""

    session_id: int | None = None
    student_id: int | None = None
    type: MistakeType | None = None
    surah: str | None = Field(default=None, min_length=1)
    ayah: int | None = Field(default=None, ge=1)
    description: str | None = None


class MistakeResponse(CamelModel):
    """Response for a session mistake."""

    id: int
    session_id: int
    student_id: int
    type: MistakeType
    surah: str
    ayah: int
    description: str
    created_at: datetime


# =============================================================================
# LESSON SCHEMAS
# =============================================================================


class LessonCreate(CamelModel):
    """Request body for a teacher creating a lesson."""

    student_id: int
    date: datetime | None = None
    surah_start: str = Field(..., min_length=1)
    ayah_start: int = Field(..., ge=1)
    surah_end: str = Field(..., min_length=1)
    ayah_end: int = Field(..., ge=1)
    notes: str | None = None
    progress: LessonProgress = LessonProgress.NOT_STARTED


class LessonUpdate(CamelModel):
    """Partial update of a lesson."""

    date: datetime | None = None
    surah_start: str | None = Field(default=None, min_length=1)
    ayah_start: int | None = Field(default=None, ge=1)
    surah_end: str | None = Field(default=None, min_length=1)
    ayah_end: int | None = Field(default=None, ge=1)
    notes: str | None = None
    progress: LessonProgress | None = None


class LessonResponse(CamelModel):
    """Response for a lesson."""

    id: int
    date: datetime
    teacher_id: int
    student_id: int
    surah_start: str
    ayah_start: int
    surah_end: str
    ayah_end: int
    notes: str | None = None
    progress: LessonProgress
    created_at: datetime


class LessonWithDetailsResponse(LessonResponse):
    """A lesson with its student, teacher and mistake count."""

    student: StudentResponse | None = None
    teacher: UserResponse | None = None
    mistake_count: int


class LessonMistakeCreate(CamelModel):
    """Request body for recording a lesson mistake."""

    lesson_id: int
    student_id: int
    type: MistakeType
    surah: str = Field(..., min_length=1)
    ayah: int = Field(..., ge=1)
    description: str = ""


class LessonMistakeResponse(CamelModel):
    """Response for a lesson mistake."""

    id: int
    lesson_id: int
    student_id: int
    type: MistakeType
    surah: str
    ayah: int
    description: str
    created_at: datetime


# =============================================================================
# TEACHER SCHEMAS
# =============================================================================


class AssignStudentRequest(CamelModel):
    """Request to link a student to the current teacher."""

    student_id: int


class TeacherStatsResponse(CamelModel):
    """Lesson statistics of a teacher."""

    total_lessons: int
    completed_lessons: int
    students_count: int
    average_mistakes: float


# =============================================================================
# STATISTICS SCHEMAS
# =============================================================================


class AverageMistakesResponse(CamelModel):
    """Average number of mistakes per peer session."""

    average: float


class TrendPoint(CamelModel):
    """Mistake count for one calendar day."""

    date: str
    count: int


class ProgressPoint(CamelModel):
    """Smoothed mistake count and last mistake type for one day."""

    date: str
    count: float
    mistake_type: MistakeType | None = None


class LessonProgressPoint(CamelModel):
    """Lesson and lesson-mistake counts for one day."""

    date: str
    lesson_count: int
    mistake_count: int


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = __version__
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
