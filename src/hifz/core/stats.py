"""Statistics computed over the in-memory store.

Nothing is cached: every call walks the current collections. Calendar days are
UTC dates compared as ISO ``YYYY-MM-DD`` strings. For ids without matching rows
the operations return zero-valued or empty results; checking that the root
entity exists is left to the caller.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable

from hifz.core.juz import calculate_juz_progress
from hifz.core.models import (
    MISTAKE_TYPES,
    Lesson,
    LessonProgress,
    MistakeType,
    Session,
    Student,
)
from hifz.core.store import HifzStore

WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# Trailing window of the smoothed student progress
MOVING_AVERAGE_WINDOW = 7


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves away from zero for positive values (12.5 -> 13)."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def iso_day(value: datetime) -> str:
    """UTC calendar day of a timestamp as ``YYYY-MM-DD``."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date().isoformat()


def weekday_abbr(value: datetime) -> str:
    """English weekday abbreviation of a timestamp's UTC day."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    # date.weekday() is Monday=0; WEEKDAYS starts on Sunday
    return WEEKDAYS[(value.weekday() + 1) % 7]


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class StudentWithStats:
    """A student together with its derived session statistics."""

    student: Student
    session_count: int
    average_mistakes: float
    most_common_mistake_type: MistakeType | None
    juz_progress: int

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the student's fields plus the statistics."""
        result = self.student.to_dict()
        result.update(
            {
                "session_count": self.session_count,
                "average_mistakes": self.average_mistakes,
                "most_common_mistake_type": self.most_common_mistake_type,
                "juz_progress": self.juz_progress,
            }
        )
        return result


@dataclass
class TeacherStats:
    """Lesson statistics for one teacher."""

    total_lessons: int = 0
    completed_lessons: int = 0
    students_count: int = 0
    average_mistakes: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lessons": self.total_lessons,
            "completed_lessons": self.completed_lessons,
            "students_count": self.students_count,
            "average_mistakes": self.average_mistakes,
        }


def most_common_type(types: list[MistakeType]) -> MistakeType | None:
    """Most frequent mistake type; ties go to the earlier canonical type."""
    if not types:
        return None
    counts = Counter(types)
    best: MistakeType | None = None
    best_count = 0
    for mistake_type in MISTAKE_TYPES:
        if counts[mistake_type] > best_count:
            best = mistake_type
            best_count = counts[mistake_type]
    return best


def moving_average(counts: list[float], window: int = MOVING_AVERAGE_WINDOW) -> list[float]:
    """Trailing simple moving average.

    Positions with fewer than ``window`` points available keep their raw
    value; the rest become the mean of the last ``window`` raw values,
    rounded to two decimals.
    """
    smoothed: list[float] = []
    for index, count in enumerate(counts):
        if index < window - 1:
            smoothed.append(count)
            continue
        chunk = counts[index - window + 1 : index + 1]
        smoothed.append(round_half_up(sum(chunk) / window, 2))
    return smoothed


class StatsEngine:
    """Derived views over a ``HifzStore``.

    Args:
        store: The store to read from.
        today: Callable returning the current UTC date; tests pin it.
    """

    def __init__(self, store: HifzStore, today: Callable[[], date] | None = None):
        self.store = store
        self._today = today or _utc_today

    def day_window(self, days: int) -> list[str]:
        """ISO dates of the ``days`` calendar days before today, oldest first.

        The window starts ``days`` days ago and stops at yesterday; today is
        not part of it.
        """
        if days <= 0:
            return []
        start = self._today() - timedelta(days=days)
        return [(start + timedelta(days=offset)).isoformat() for offset in range(days)]

    # -------------------------------------------------------------------------
    # Peer sessions
    # -------------------------------------------------------------------------

    def get_student_with_stats(self, student_id: int) -> StudentWithStats | None:
        student = self.store.get_student(student_id)
        if student is None:
            return None

        sessions = self.store.get_sessions_by_student(student_id)
        mistakes = self.store.get_mistakes_by_student(student_id)

        session_count = len(sessions)
        average = len(mistakes) / session_count if session_count > 0 else 0

        return StudentWithStats(
            student=student,
            session_count=session_count,
            average_mistakes=average,
            most_common_mistake_type=most_common_type([m.type for m in mistakes]),
            juz_progress=calculate_juz_progress(student.completed_juz),
        )

    def get_all_students_with_stats(self) -> list[StudentWithStats]:
        results = []
        for student in self.store.list_students():
            stats = self.get_student_with_stats(student.id)
            if stats is not None:
                results.append(stats)
        return results

    def get_mistake_type_distribution(self) -> dict[str, int]:
        """Share of each mistake type in percent.

        Each percentage is rounded on its own, so the three values can add up
        to 99 or 101.
        """
        mistakes = self.store.list_mistakes()
        counts = Counter(m.type for m in mistakes)
        total = len(mistakes)

        distribution: dict[str, int] = {}
        for mistake_type in MISTAKE_TYPES:
            if total == 0:
                distribution[mistake_type.value] = 0
            else:
                distribution[mistake_type.value] = int(
                    round_half_up(counts[mistake_type] / total * 100)
                )
        return distribution

    def get_session_count_by_day(self) -> dict[str, int]:
        counts = {day: 0 for day in WEEKDAYS}
        for session in self.store.list_sessions():
            counts[weekday_abbr(session.date)] += 1
        return counts

    def get_average_mistakes_per_session(self) -> float:
        sessions = self.store.list_sessions()
        if not sessions:
            return 0
        return round_half_up(len(self.store.list_mistakes()) / len(sessions), 1)

    def get_mistake_trend(self, days: int) -> list[dict[str, Any]]:
        """Mistakes per day over the ``days`` days before today, zero-filled."""
        results = [{"date": day, "count": 0} for day in self.day_window(days)]
        by_date = {item["date"]: item for item in results}

        for mistake in self.store.list_mistakes():
            item = by_date.get(iso_day(mistake.created_at))
            if item is not None:
                item["count"] += 1

        return results

    def get_student_progress(self, student_id: int, days: int) -> list[dict[str, Any]]:
        """Smoothed per-day mistake counts for one student.

        ``mistake_type`` is the type of the last mistake recorded that day. The
        count is replaced by a trailing seven-day moving average; the type is
        left as is.
        """
        results: list[dict[str, Any]] = [
            {"date": day, "count": 0, "mistake_type": None} for day in self.day_window(days)
        ]
        by_date = {item["date"]: item for item in results}

        for mistake in self.store.get_mistakes_by_student(student_id):
            item = by_date.get(iso_day(mistake.created_at))
            if item is not None:
                item["count"] += 1
                item["mistake_type"] = mistake.type

        smoothed = moving_average([item["count"] for item in results])
        for item, count in zip(results, smoothed):
            item["count"] = count
        return results

    def get_session_with_details(self, session_id: int) -> dict[str, Any] | None:
        """Session plus both participants and its mistake count.

        Returns None when the session or either participant is missing.
        """
        session = self.store.get_session(session_id)
        if session is None:
            return None
        return self._session_details(session)

    def _session_details(self, session: Session) -> dict[str, Any] | None:
        student1 = self.store.get_student(session.student1_id)
        student2 = self.store.get_student(session.student2_id)
        if student1 is None or student2 is None:
            return None

        result = session.to_dict()
        result.update(
            {
                "student1": student1.to_dict(),
                "student2": student2.to_dict(),
                "mistake_count": len(self.store.get_mistakes_by_session(session.id)),
            }
        )
        return result

    def get_recent_sessions(self, limit: int, student_id: int | None = None) -> list[dict[str, Any]]:
        """Newest sessions first, optionally only those of one student."""
        if student_id is None:
            sessions = sorted(self.store.list_sessions(), key=lambda s: s.date, reverse=True)
        else:
            sessions = self.store.get_sessions_by_student(student_id)

        results = []
        for session in sessions[: max(limit, 0)]:
            details = self._session_details(session)
            if details is not None:
                results.append(details)
        return results

    # -------------------------------------------------------------------------
    # Lessons
    # -------------------------------------------------------------------------

    def get_teacher_stats(self, teacher_id: int) -> TeacherStats:
        lessons = self.store.get_lessons_by_teacher(teacher_id)
        completed = sum(1 for lesson in lessons if lesson.progress == LessonProgress.COMPLETED)

        student_ids = {lesson.student_id for lesson in lessons}
        student_ids.update(s.id for s in self.store.get_teacher_students(teacher_id))

        total_mistakes = sum(len(self.store.get_mistakes_by_lesson(lesson.id)) for lesson in lessons)
        average = round_half_up(total_mistakes / len(lessons), 1) if lessons else 0.0

        return TeacherStats(
            total_lessons=len(lessons),
            completed_lessons=completed,
            students_count=len(student_ids),
            average_mistakes=average,
        )

    def get_student_lesson_progress(self, student_id: int, days: int) -> list[dict[str, Any]]:
        """Per-day lesson and lesson-mistake counts for one student.

        Unlike ``get_student_progress`` the counts are raw, not smoothed.
        """
        results: list[dict[str, Any]] = [
            {"date": day, "lesson_count": 0, "mistake_count": 0} for day in self.day_window(days)
        ]
        by_date = {item["date"]: item for item in results}

        for lesson in self.store.get_lessons_by_student(student_id):
            item = by_date.get(iso_day(lesson.date))
            if item is not None:
                item["lesson_count"] += 1
                item["mistake_count"] += len(self.store.get_mistakes_by_lesson(lesson.id))

        return results

    def get_lesson_with_details(self, lesson_id: int) -> dict[str, Any] | None:
        lesson = self.store.get_lesson(lesson_id)
        if lesson is None:
            return None
        return self._lesson_details(lesson)

    def _lesson_details(self, lesson: Lesson) -> dict[str, Any]:
        student = self.store.get_student(lesson.student_id)
        teacher = self.store.get_user(lesson.teacher_id)

        result = lesson.to_dict()
        result.update(
            {
                "student": student.to_dict() if student else None,
                "teacher": teacher.to_dict() if teacher else None,
                "mistake_count": len(self.store.get_mistakes_by_lesson(lesson.id)),
            }
        )
        return result

    def get_recent_lessons(
        self,
        limit: int,
        teacher_id: int | None = None,
        student_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """Newest lessons first, filtered by teacher and/or student."""
        lessons = sorted(self.store.list_lessons(), key=lambda lesson: lesson.date, reverse=True)
        if teacher_id is not None:
            lessons = [lesson for lesson in lessons if lesson.teacher_id == teacher_id]
        if student_id is not None:
            lessons = [lesson for lesson in lessons if lesson.student_id == student_id]
        return [self._lesson_details(lesson) for lesson in lessons[: max(limit, 0)]]
