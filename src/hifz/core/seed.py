"""Sample data for demos, the CLI and manual API testing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog

from hifz.core.models import LessonProgress, UserRole
from hifz.core.store import HifzStore

logger = structlog.get_logger(__name__)

SAMPLE_STUDENTS = [
    {"name": "Ahmad Hassan", "grade": "3", "current_juz": 5, "current_surah": "Al-Baqarah"},
    {"name": "Zaynab Khan", "grade": "4", "current_juz": 10, "current_surah": "Yunus"},
    {"name": "Ibrahim Omar", "grade": "3", "current_juz": 7, "current_surah": "Al-A'raf"},
    {"name": "Yusuf Ali", "grade": "2", "current_juz": 3, "current_surah": "Al-Baqarah"},
    {"name": "Aisha Patel", "grade": "4", "current_juz": 12, "current_surah": "Hud"},
    {"name": "Mohammed Siddiq", "grade": "2", "current_juz": 2, "current_surah": "Al-Baqarah"},
]

# (days ago, hour, minute, student1 index, student2 index, surah, ayah start, ayah end)
SAMPLE_SESSIONS = [
    (0, 10, 30, 0, 3, "Al-Baqarah", 5, 20),
    (0, 9, 15, 1, 4, "Yunus", 1, 15),
    (1, 14, 45, 2, 0, "Al-A'raf", 10, 30),
    (1, 11, 20, 3, 2, "Al-Baqarah", 40, 60),
]

# (session index, student index, type, surah, ayah, description)
SAMPLE_MISTAKES = [
    (0, 0, "tajweed", "Al-Baqarah", 7, "Missed the Ghunnah in 'min ba'dihi'"),
    (0, 0, "word", "Al-Baqarah", 10, "Used 'qulna' instead of 'qala'"),
    (0, 0, "stuck", "Al-Baqarah", 15, "Paused too long before 'wa-qafayna'"),
    (1, 1, "tajweed", "Yunus", 3, "Incorrect pronunciation of 'dhaalika'"),
    (1, 1, "word", "Yunus", 7, "Skipped a word"),
    (2, 2, "tajweed", "Al-A'raf", 12, "Incorrect madd"),
    (2, 2, "tajweed", "Al-A'raf", 15, "Incorrect idgham"),
    (3, 3, "stuck", "Al-Baqarah", 46, "Repeated words unnecessarily"),
    (3, 3, "word", "Al-Baqarah", 52, "Incorrect word order"),
]


def seed_sample_data(store: HifzStore, now: datetime | None = None) -> HifzStore:
    """Fill a store with a teacher, six students, sessions, mistakes and lessons.

    Args:
        store: Store to fill (normally empty)
        now: Reference time for relative dates. Defaults to current UTC time.

    Returns:
        The same store, for chaining
    """
    now = now or datetime.now(timezone.utc)

    teacher = store.create_user("ustadh.yahya", "Ustadh Yahya", UserRole.TEACHER)
    student_user = store.create_user("ahmad", "Ahmad Hassan", UserRole.STUDENT)

    students = []
    for index, data in enumerate(SAMPLE_STUDENTS):
        user_id = student_user.id if index == 0 else None
        students.append(store.create_student(user_id=user_id, notes="", **data))

    sessions = []
    for days_ago, hour, minute, first, second, surah, ayah_start, ayah_end in SAMPLE_SESSIONS:
        day = now - timedelta(days=days_ago)
        sessions.append(
            store.create_session(
                student1_id=students[first].id,
                student2_id=students[second].id,
                surah_start=surah,
                ayah_start=ayah_start,
                surah_end=surah,
                ayah_end=ayah_end,
                date=day.replace(hour=hour, minute=minute, second=0, microsecond=0),
                completed=True,
            )
        )

    for session_index, student_index, mistake_type, surah, ayah, description in SAMPLE_MISTAKES:
        store.create_mistake(
            session_id=sessions[session_index].id,
            student_id=students[student_index].id,
            type=mistake_type,
            surah=surah,
            ayah=ayah,
            description=description,
            created_at=sessions[session_index].date,
        )

    for student in students[:3]:
        store.assign_student(teacher.id, student.id)

    first_lesson = store.create_lesson(
        teacher_id=teacher.id,
        student_id=students[0].id,
        surah_start="Al-Baqarah",
        ayah_start=1,
        surah_end="Al-Baqarah",
        ayah_end=25,
        date=now - timedelta(days=2),
        notes="Focus on madd lengths",
        progress=LessonProgress.COMPLETED,
    )
    store.create_lesson_mistake(
        lesson_id=first_lesson.id,
        student_id=students[0].id,
        type="tajweed",
        surah="Al-Baqarah",
        ayah=4,
        description="Shortened a madd muttasil",
    )
    store.create_lesson(
        teacher_id=teacher.id,
        student_id=students[1].id,
        surah_start="Yunus",
        ayah_start=16,
        surah_end="Yunus",
        ayah_end=30,
        date=now,
        progress=LessonProgress.IN_PROGRESS,
    )

    logger.info(
        "store_seeded",
        users=len(store.list_users()),
        students=len(students),
        sessions=len(sessions),
        mistakes=len(store.list_mistakes()),
        lessons=len(store.list_lessons()),
    )
    return store
