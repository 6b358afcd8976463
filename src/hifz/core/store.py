"""In-memory store for the Hifz tracker.

Responsibilities:
- Hold the seven entity collections (users, students, teacher links, sessions,
  mistakes, lessons, lesson mistakes) in insertion-ordered dicts
- Assign ids from one ``IdSequence`` per collection
- Enforce references on insert and patch
- Cascade deletes to dependent rows

The store is constructed explicitly (app lifespan, CLI command or test
fixture); nothing here is a module-level singleton.
"""

from __future__ import annotations

import threading
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Any, Iterable

import structlog

from hifz.core.juz import parse_completed_juz, update_completed_juz
from hifz.core.models import (
    MAX_JUZ,
    MIN_JUZ,
    Lesson,
    LessonMistake,
    LessonProgress,
    Mistake,
    MistakeType,
    Session,
    Student,
    TeacherStudent,
    User,
    UserRole,
    utcnow,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# ERRORS
# =============================================================================


class StoreError(Exception):
    """Base class for store failures."""


class EntityNotFoundError(StoreError):
    """Raised when an insert or patch references an entity that does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class DuplicateEntityError(StoreError):
    """Raised when a unique field is already taken."""

    def __init__(self, entity: str, field_name: str, value: Any):
        self.entity = entity
        self.field_name = field_name
        self.value = value
        super().__init__(f"{entity} with {field_name} '{value}' already exists")


class IntegrityViolation(StoreError):
    """Raised when a write breaks a domain rule."""


# =============================================================================
# ID SEQUENCE
# =============================================================================


class IdSequence:
    """Monotonic integer id generator, safe to share between threads."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return the next id and advance the sequence."""
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def peek(self) -> int:
        """Return the id the next call to ``next`` will hand out."""
        with self._lock:
            return self._next


# =============================================================================
# HELPERS
# =============================================================================


def _as_utc(value: datetime | None) -> datetime:
    """Normalize a datetime to UTC; naive values are taken as UTC."""
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _mistake_type(value: MistakeType | str) -> MistakeType:
    try:
        return MistakeType(value)
    except ValueError:
        raise IntegrityViolation(f"Unknown mistake type '{value}'") from None


def _lesson_progress(value: LessonProgress | str) -> LessonProgress:
    try:
        return LessonProgress(value)
    except ValueError:
        raise IntegrityViolation(f"Unknown lesson progress '{value}'") from None


def _check_juz(juz: int) -> None:
    if not MIN_JUZ <= juz <= MAX_JUZ:
        raise IntegrityViolation(f"Juz must be between {MIN_JUZ} and {MAX_JUZ}, got {juz}")


def _check_ayah(ayah: int | None, label: str = "ayah") -> None:
    if ayah is not None and ayah < 1:
        raise IntegrityViolation(f"{label} must be >= 1, got {ayah}")


def _check_patch_fields(entity_cls: type, changes: dict[str, Any], immutable: Iterable[str]) -> None:
    allowed = {f.name for f in fields(entity_cls)} - set(immutable)
    unknown = set(changes) - allowed
    if unknown:
        raise IntegrityViolation(
            f"Cannot update {entity_cls.__name__} field(s): {', '.join(sorted(unknown))}"
        )


# =============================================================================
# STORE
# =============================================================================


class HifzStore:
    """Process-local data store with CRUD accessors.

    Lookups of unknown ids return None, deletes of unknown ids return False.
    Writes that reference missing entities raise ``EntityNotFoundError``.
    """

    def __init__(self):
        self._users: dict[int, User] = {}
        self._students: dict[int, Student] = {}
        self._teacher_students: dict[TeacherStudent, None] = {}
        self._sessions: dict[int, Session] = {}
        self._mistakes: dict[int, Mistake] = {}
        self._lessons: dict[int, Lesson] = {}
        self._lesson_mistakes: dict[int, LessonMistake] = {}

        self._user_ids = IdSequence()
        self._student_ids = IdSequence()
        self._session_ids = IdSequence()
        self._mistake_ids = IdSequence()
        self._lesson_ids = IdSequence()
        self._lesson_mistake_ids = IdSequence()

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def list_users(self, role: UserRole | str | None = None) -> list[User]:
        users = list(self._users.values())
        if role is not None:
            role = UserRole(role)
            users = [u for u in users if u.role == role]
        return users

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        """Get user by username (case-insensitive)."""
        username_lower = username.lower()
        for user in self._users.values():
            if user.username.lower() == username_lower:
                return user
        return None

    def create_user(
        self,
        username: str,
        name: str,
        role: UserRole | str = UserRole.STUDENT,
    ) -> User:
        """Create a user. Usernames are unique, ignoring case."""
        if self.get_user_by_username(username) is not None:
            raise DuplicateEntityError("User", "username", username)

        try:
            role = UserRole(role)
        except ValueError:
            raise IntegrityViolation(f"Unknown role '{role}'") from None

        user = User(id=self._user_ids.next(), username=username, name=name, role=role)
        self._users[user.id] = user
        logger.info("user_created", user_id=user.id, role=user.role.value)
        return user

    def delete_user(self, user_id: int) -> bool:
        """Delete a user, its teacher links and the lessons it taught."""
        if self._users.pop(user_id, None) is None:
            return False

        links = [link for link in self._teacher_students if link.teacher_id == user_id]
        for link in links:
            del self._teacher_students[link]

        lesson_ids = [lesson.id for lesson in self._lessons.values() if lesson.teacher_id == user_id]
        for lesson_id in lesson_ids:
            self.delete_lesson(lesson_id)

        for student in self._students.values():
            if student.user_id == user_id:
                self._students[student.id] = replace(student, user_id=None)

        logger.info(
            "user_deleted",
            user_id=user_id,
            links_removed=len(links),
            lessons_removed=len(lesson_ids),
        )
        return True

    def _require_teacher(self, teacher_id: int) -> User:
        teacher = self._users.get(teacher_id)
        if teacher is None:
            raise EntityNotFoundError("Teacher", teacher_id)
        if teacher.role != UserRole.TEACHER:
            raise IntegrityViolation(f"User {teacher_id} is not a teacher")
        return teacher

    # -------------------------------------------------------------------------
    # Students
    # -------------------------------------------------------------------------

    def list_students(self) -> list[Student]:
        return list(self._students.values())

    def get_student(self, student_id: int) -> Student | None:
        return self._students.get(student_id)

    def get_student_by_user(self, user_id: int) -> Student | None:
        """Get the student profile linked to a user account."""
        for student in self._students.values():
            if student.user_id == user_id:
                return student
        return None

    def _check_user_unlinked(self, user_id: int | None, student_id: int | None = None) -> None:
        linked = self.get_student_by_user(user_id) if user_id is not None else None
        if linked is not None and linked.id != student_id:
            raise DuplicateEntityError("Student", "user_id", user_id)

    def _require_student(self, student_id: int) -> Student:
        student = self._students.get(student_id)
        if student is None:
            raise EntityNotFoundError("Student", student_id)
        return student

    def create_student(
        self,
        name: str,
        current_juz: int,
        grade: str = "adult",
        user_id: int | None = None,
        completed_juz: list[int] | str | None = None,
        current_surah: str | None = None,
        current_ayah: int | None = None,
        notes: str | None = None,
    ) -> Student:
        """Create a student profile.

        Raises:
            IntegrityViolation: juz out of range or invalid ayah
            EntityNotFoundError: ``user_id`` given but unknown
            DuplicateEntityError: ``user_id`` already linked to another student
        """
        _check_juz(current_juz)
        _check_ayah(current_ayah, "current_ayah")
        if user_id is not None and user_id not in self._users:
            raise EntityNotFoundError("User", user_id)
        self._check_user_unlinked(user_id)

        completed = parse_completed_juz(completed_juz)
        for juz in completed:
            _check_juz(juz)

        student = Student(
            id=self._student_ids.next(),
            name=name,
            current_juz=current_juz,
            grade=grade,
            user_id=user_id,
            completed_juz=sorted(set(completed)),
            current_surah=current_surah,
            current_ayah=current_ayah,
            notes=notes,
        )
        self._students[student.id] = student
        logger.info("student_created", student_id=student.id, current_juz=current_juz)
        return student

    def update_student(self, student_id: int, changes: dict[str, Any]) -> Student | None:
        """Apply a partial patch to a student.

        Setting ``current_surah`` re-derives the completed-juz set from the new
        position. The completed-juz set is only ever extended.
        """
        student = self._students.get(student_id)
        if student is None:
            return None

        _check_patch_fields(Student, changes, immutable=("id", "created_at"))
        changes = dict(changes)

        if "current_juz" in changes:
            _check_juz(changes["current_juz"])
        if "current_ayah" in changes:
            _check_ayah(changes["current_ayah"], "current_ayah")
        if changes.get("user_id") is not None and changes["user_id"] not in self._users:
            raise EntityNotFoundError("User", changes["user_id"])
        self._check_user_unlinked(changes.get("user_id"), student_id)

        completed = set(student.completed_juz)
        if "completed_juz" in changes:
            extra = parse_completed_juz(changes["completed_juz"])
            for juz in extra:
                _check_juz(juz)
            completed.update(extra)

        surah = changes.get("current_surah")
        if surah:
            ayah = changes.get("current_ayah") or student.current_ayah or 1
            completed = set(update_completed_juz(sorted(completed), surah, ayah))

        changes["completed_juz"] = sorted(completed)

        updated = replace(student, **changes)
        self._students[student_id] = updated
        logger.debug("student_updated", student_id=student_id, fields=sorted(changes))
        return updated

    def delete_student(self, student_id: int) -> bool:
        """Delete a student and everything that references it."""
        if self._students.pop(student_id, None) is None:
            return False

        session_ids = [s.id for s in self._sessions.values() if s.involves(student_id)]
        for session_id in session_ids:
            self.delete_session(session_id)

        mistake_ids = [m.id for m in self._mistakes.values() if m.student_id == student_id]
        for mistake_id in mistake_ids:
            del self._mistakes[mistake_id]

        lesson_ids = [lesson.id for lesson in self._lessons.values() if lesson.student_id == student_id]
        for lesson_id in lesson_ids:
            self.delete_lesson(lesson_id)

        links = [link for link in self._teacher_students if link.student_id == student_id]
        for link in links:
            del self._teacher_students[link]

        logger.info(
            "cascade_delete",
            entity="student",
            entity_id=student_id,
            sessions=len(session_ids),
            mistakes=len(mistake_ids),
            lessons=len(lesson_ids),
            links=len(links),
        )
        return True

    # -------------------------------------------------------------------------
    # Teacher / student links
    # -------------------------------------------------------------------------

    def assign_student(self, teacher_id: int, student_id: int) -> TeacherStudent:
        """Link a student to a teacher. Linking twice is a no-op."""
        self._require_teacher(teacher_id)
        self._require_student(student_id)

        link = TeacherStudent(teacher_id=teacher_id, student_id=student_id)
        if link not in self._teacher_students:
            self._teacher_students[link] = None
            logger.info("student_assigned", teacher_id=teacher_id, student_id=student_id)
        return link

    def unassign_student(self, teacher_id: int, student_id: int) -> bool:
        link = TeacherStudent(teacher_id=teacher_id, student_id=student_id)
        if link not in self._teacher_students:
            return False
        del self._teacher_students[link]
        return True

    def list_teacher_links(self) -> list[TeacherStudent]:
        return list(self._teacher_students)

    def get_teacher_students(self, teacher_id: int) -> list[Student]:
        """Students explicitly linked to a teacher."""
        return [
            self._students[link.student_id]
            for link in self._teacher_students
            if link.teacher_id == teacher_id and link.student_id in self._students
        ]

    def get_student_teachers(self, student_id: int) -> list[User]:
        """Teachers a student is linked to."""
        return [
            self._users[link.teacher_id]
            for link in self._teacher_students
            if link.student_id == student_id and link.teacher_id in self._users
        ]

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def get_session(self, session_id: int) -> Session | None:
        return self._sessions.get(session_id)

    def _check_session_students(self, student1_id: int, student2_id: int) -> None:
        if student1_id == student2_id:
            raise IntegrityViolation("A session needs two different students")
        self._require_student(student1_id)
        self._require_student(student2_id)

    def create_session(
        self,
        student1_id: int,
        student2_id: int,
        surah_start: str,
        ayah_start: int,
        surah_end: str,
        ayah_end: int,
        date: datetime | None = None,
        completed: bool = False,
    ) -> Session:
        """Record a peer revision session between two existing students."""
        self._check_session_students(student1_id, student2_id)
        _check_ayah(ayah_start, "ayah_start")
        _check_ayah(ayah_end, "ayah_end")

        session = Session(
            id=self._session_ids.next(),
            student1_id=student1_id,
            student2_id=student2_id,
            surah_start=surah_start,
            ayah_start=ayah_start,
            surah_end=surah_end,
            ayah_end=ayah_end,
            date=_as_utc(date),
            completed=completed,
        )
        self._sessions[session.id] = session
        logger.info(
            "session_created",
            session_id=session.id,
            student1_id=student1_id,
            student2_id=student2_id,
        )
        return session

    def update_session(self, session_id: int, changes: dict[str, Any]) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None

        _check_patch_fields(Session, changes, immutable=("id", "created_at"))
        changes = dict(changes)
        if "date" in changes:
            changes["date"] = _as_utc(changes["date"])
        for key in ("ayah_start", "ayah_end"):
            if key in changes:
                _check_ayah(changes[key], key)

        updated = replace(session, **changes)
        if {"student1_id", "student2_id"} & set(changes):
            self._check_session_students(updated.student1_id, updated.student2_id)

        self._sessions[session_id] = updated
        return updated

    def complete_session(self, session_id: int) -> Session | None:
        return self.update_session(session_id, {"completed": True})

    def delete_session(self, session_id: int) -> bool:
        """Delete a session and its mistakes."""
        if self._sessions.pop(session_id, None) is None:
            return False

        mistake_ids = [m.id for m in self._mistakes.values() if m.session_id == session_id]
        for mistake_id in mistake_ids:
            del self._mistakes[mistake_id]

        logger.info("session_deleted", session_id=session_id, mistakes_removed=len(mistake_ids))
        return True

    def get_sessions_by_student(self, student_id: int) -> list[Session]:
        """Sessions a student took part in, newest first."""
        sessions = [s for s in self._sessions.values() if s.involves(student_id)]
        return sorted(sessions, key=lambda s: s.date, reverse=True)

    # -------------------------------------------------------------------------
    # Mistakes
    # -------------------------------------------------------------------------

    def list_mistakes(self) -> list[Mistake]:
        return list(self._mistakes.values())

    def get_mistake(self, mistake_id: int) -> Mistake | None:
        return self._mistakes.get(mistake_id)

    def create_mistake(
        self,
        session_id: int,
        student_id: int,
        type: MistakeType | str,
        surah: str,
        ayah: int,
        description: str,
        created_at: datetime | None = None,
    ) -> Mistake:
        """Record a mistake made during an existing session."""
        if session_id not in self._sessions:
            raise EntityNotFoundError("Session", session_id)
        self._require_student(student_id)
        _check_ayah(ayah)

        mistake = Mistake(
            id=self._mistake_ids.next(),
            session_id=session_id,
            student_id=student_id,
            type=_mistake_type(type),
            surah=surah,
            ayah=ayah,
            description=description,
            created_at=_as_utc(created_at),
        )
        self._mistakes[mistake.id] = mistake
        logger.debug("mistake_created", mistake_id=mistake.id, session_id=session_id)
        return mistake

    def update_mistake(self, mistake_id: int, changes: dict[str, Any]) -> Mistake | None:
        mistake = self._mistakes.get(mistake_id)
        if mistake is None:
            return None

        _check_patch_fields(Mistake, changes, immutable=("id", "created_at"))
        changes = dict(changes)
        if "type" in changes:
            changes["type"] = _mistake_type(changes["type"])
        if "ayah" in changes:
            _check_ayah(changes["ayah"])
        if "session_id" in changes and changes["session_id"] not in self._sessions:
            raise EntityNotFoundError("Session", changes["session_id"])
        if "student_id" in changes:
            self._require_student(changes["student_id"])

        updated = replace(mistake, **changes)
        self._mistakes[mistake_id] = updated
        return updated

    def delete_mistake(self, mistake_id: int) -> bool:
        return self._mistakes.pop(mistake_id, None) is not None

    def get_mistakes_by_session(self, session_id: int) -> list[Mistake]:
        return [m for m in self._mistakes.values() if m.session_id == session_id]

    def get_mistakes_by_student(self, student_id: int) -> list[Mistake]:
        return [m for m in self._mistakes.values() if m.student_id == student_id]

    # -------------------------------------------------------------------------
    # Lessons
    # -------------------------------------------------------------------------

    def list_lessons(self) -> list[Lesson]:
        return list(self._lessons.values())

    def get_lesson(self, lesson_id: int) -> Lesson | None:
        return self._lessons.get(lesson_id)

    def create_lesson(
        self,
        teacher_id: int,
        student_id: int,
        surah_start: str,
        ayah_start: int,
        surah_end: str,
        ayah_end: int,
        date: datetime | None = None,
        notes: str | None = None,
        progress: LessonProgress | str = LessonProgress.NOT_STARTED,
    ) -> Lesson:
        """Record a teacher-led lesson."""
        self._require_teacher(teacher_id)
        self._require_student(student_id)
        _check_ayah(ayah_start, "ayah_start")
        _check_ayah(ayah_end, "ayah_end")

        lesson = Lesson(
            id=self._lesson_ids.next(),
            teacher_id=teacher_id,
            student_id=student_id,
            surah_start=surah_start,
            ayah_start=ayah_start,
            surah_end=surah_end,
            ayah_end=ayah_end,
            date=_as_utc(date),
            notes=notes,
            progress=_lesson_progress(progress),
        )
        self._lessons[lesson.id] = lesson
        logger.info("lesson_created", lesson_id=lesson.id, teacher_id=teacher_id, student_id=student_id)
        return lesson

    def update_lesson(self, lesson_id: int, changes: dict[str, Any]) -> Lesson | None:
        lesson = self._lessons.get(lesson_id)
        if lesson is None:
            return None

        _check_patch_fields(Lesson, changes, immutable=("id", "created_at"))
        changes = dict(changes)
        if "progress" in changes:
            changes["progress"] = _lesson_progress(changes["progress"])
        if "date" in changes:
            changes["date"] = _as_utc(changes["date"])
        for key in ("ayah_start", "ayah_end"):
            if key in changes:
                _check_ayah(changes[key], key)
        if "teacher_id" in changes:
            self._require_teacher(changes["teacher_id"])
        if "student_id" in changes:
            self._require_student(changes["student_id"])

        updated = replace(lesson, **changes)
        self._lessons[lesson_id] = updated
        return updated

    def complete_lesson(self, lesson_id: int) -> Lesson | None:
        return self.update_lesson(lesson_id, {"progress": LessonProgress.COMPLETED})

    def delete_lesson(self, lesson_id: int) -> bool:
        """Delete a lesson and its mistakes."""
        if self._lessons.pop(lesson_id, None) is None:
            return False

        mistake_ids = [m.id for m in self._lesson_mistakes.values() if m.lesson_id == lesson_id]
        for mistake_id in mistake_ids:
            del self._lesson_mistakes[mistake_id]

        logger.info("lesson_deleted", lesson_id=lesson_id, mistakes_removed=len(mistake_ids))
        return True

    def get_lessons_by_teacher(self, teacher_id: int) -> list[Lesson]:
        """Lessons taught by a teacher, newest first."""
        lessons = [lesson for lesson in self._lessons.values() if lesson.teacher_id == teacher_id]
        return sorted(lessons, key=lambda lesson: lesson.date, reverse=True)

    def get_lessons_by_student(self, student_id: int) -> list[Lesson]:
        """Lessons a student attended, newest first."""
        lessons = [lesson for lesson in self._lessons.values() if lesson.student_id == student_id]
        return sorted(lessons, key=lambda lesson: lesson.date, reverse=True)

    # -------------------------------------------------------------------------
    # Lesson mistakes
    # -------------------------------------------------------------------------

    def list_lesson_mistakes(self) -> list[LessonMistake]:
        return list(self._lesson_mistakes.values())

    def get_lesson_mistake(self, mistake_id: int) -> LessonMistake | None:
        return self._lesson_mistakes.get(mistake_id)

    def create_lesson_mistake(
        self,
        lesson_id: int,
        student_id: int,
        type: MistakeType | str,
        surah: str,
        ayah: int,
        description: str,
        created_at: datetime | None = None,
    ) -> LessonMistake:
        """Record a mistake made during an existing lesson."""
        if lesson_id not in self._lessons:
            raise EntityNotFoundError("Lesson", lesson_id)
        self._require_student(student_id)
        _check_ayah(ayah)

        mistake = LessonMistake(
            id=self._lesson_mistake_ids.next(),
            lesson_id=lesson_id,
            student_id=student_id,
            type=_mistake_type(type),
            surah=surah,
            ayah=ayah,
            description=description,
            created_at=_as_utc(created_at),
        )
        self._lesson_mistakes[mistake.id] = mistake
        logger.debug("lesson_mistake_created", mistake_id=mistake.id, lesson_id=lesson_id)
        return mistake

    def delete_lesson_mistake(self, mistake_id: int) -> bool:
        return self._lesson_mistakes.pop(mistake_id, None) is not None

    def get_mistakes_by_lesson(self, lesson_id: int) -> list[LessonMistake]:
        return [m for m in self._lesson_mistakes.values() if m.lesson_id == lesson_id]
