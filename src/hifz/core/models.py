"""Domain entities for the Hifz tracker.

Every entity is identified by an integer assigned by the store and carries a
UTC ``created_at`` timestamp. Foreign keys are plain integers; the store
enforces them on insert and cascades them on delete.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# =============================================================================
# FIXED TAGS
# =============================================================================


class UserRole(str, Enum):
    """Role of an application user."""

    STUDENT = "student"
    TEACHER = "teacher"


class MistakeType(str, Enum):
    """Recitation mistake categories.

    Declaration order is the canonical order used for tie-breaks.
    """

    TAJWEED = "tajweed"  # pronunciation-rule error
    WORD = "word"  # incorrect word
    STUCK = "stuck"  # hesitation / pause


class LessonProgress(str, Enum):
    """Progress tag of a teacher-led lesson."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


MISTAKE_TYPES: tuple[MistakeType, ...] = tuple(MistakeType)

MIN_JUZ = 1
MAX_JUZ = 30


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENTITIES
# =============================================================================


@dataclass
class User:
    """An application account (teacher or student)."""

    id: int
    username: str
    name: str
    role: UserRole = UserRole.STUDENT
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class Student:
    """Memorization profile of a student."""

    id: int
    name: str
    current_juz: int
    grade: str = "adult"
    user_id: int | None = None
    completed_juz: list[int] = field(default_factory=list)
    current_surah: str | None = None
    current_ayah: int | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class TeacherStudent:
    """Link between a teacher user and a student profile."""

    teacher_id: int
    student_id: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Session:
    """A peer revision session between two students."""

    id: int
    student1_id: int
    student2_id: int
    surah_start: str
    ayah_start: int
    surah_end: str
    ayah_end: int
    date: datetime = field(default_factory=utcnow)
    completed: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def involves(self, student_id: int) -> bool:
        """True if the student took part in this session."""
        return student_id in (self.student1_id, self.student2_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class Mistake:
    """A recitation mistake recorded during a peer session."""

    id: int
    session_id: int
    student_id: int
    type: MistakeType
    surah: str
    ayah: int
    description: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class Lesson:
    """A teacher-led recitation lesson with one student."""

    id: int
    teacher_id: int
    student_id: int
    surah_start: str
    ayah_start: int
    surah_end: str
    ayah_end: int
    date: datetime = field(default_factory=utcnow)
    notes: str | None = None
    progress: LessonProgress = LessonProgress.NOT_STARTED
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class LessonMistake:
    """A recitation mistake recorded during a lesson."""

    id: int
    lesson_id: int
    student_id: int
    type: MistakeType
    surah: str
    ayah: int
    description: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
