"""Tests for the statistics engine."""

from datetime import datetime, time, timedelta, timezone

import pytest

from conftest import TODAY
from hifz.core.models import LessonProgress, MistakeType, UserRole
from hifz.core.stats import (
    WEEKDAYS,
    most_common_type,
    moving_average,
    round_half_up,
    weekday_abbr,
)


def _at(day_offset: int, hour: int = 10) -> datetime:
    """Timestamp ``day_offset`` days before TODAY."""
    day = TODAY - timedelta(days=day_offset)
    return datetime.combine(day, time(hour), tzinfo=timezone.utc)


@pytest.fixture
def pair(store):
    first = store.create_student(name="Ahmad", current_juz=5)
    second = store.create_student(name="Yusuf", current_juz=3)
    return first, second


def _session(store, first, second, date=None):
    return store.create_session(first.id, second.id, "Al-Baqarah", 1, "Al-Baqarah", 20, date=date)


def _mistakes(store, session, student, types, created_at=None):
    for mistake_type in types:
        store.create_mistake(session.id, student.id, mistake_type, "Al-Baqarah", 5, "", created_at=created_at)


class TestHelpers:
    """Tests for rounding, weekday and smoothing helpers."""

    def test_round_half_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(12.4) == 12
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(1.0 / 3.0, 2) == 0.33

    def test_weekday_abbr(self):
        assert weekday_abbr(datetime(2024, 3, 17, tzinfo=timezone.utc)) == "Sun"
        assert weekday_abbr(datetime(2024, 3, 15, tzinfo=timezone.utc)) == "Fri"

    def test_weekday_abbr_uses_utc_day(self):
        """23:30 on Friday at UTC-2 is already Saturday in UTC."""
        late = datetime(2024, 3, 15, 23, 30, tzinfo=timezone(timedelta(hours=-2)))
        assert weekday_abbr(late) == "Sat"

    def test_most_common_type(self):
        assert most_common_type([]) is None
        assert most_common_type([MistakeType.STUCK, MistakeType.STUCK, MistakeType.WORD]) == MistakeType.STUCK

    def test_most_common_tie_uses_canonical_order(self):
        assert most_common_type([MistakeType.STUCK, MistakeType.WORD]) == MistakeType.WORD
        assert most_common_type([MistakeType.STUCK, MistakeType.TAJWEED]) == MistakeType.TAJWEED

    def test_moving_average_constant(self):
        """A constant series smooths to itself."""
        assert moving_average([2.0] * 10) == [2.0] * 10

    def test_moving_average_keeps_early_points_raw(self):
        assert moving_average([1, 2, 3]) == [1, 2, 3]

    def test_moving_average_window(self):
        result = moving_average([0, 0, 0, 0, 0, 0, 7, 0])
        assert result[:6] == [0, 0, 0, 0, 0, 0]
        assert result[6] == 1.0
        assert result[7] == 1.0

    def test_moving_average_rounds_two_decimals(self):
        assert moving_average([0, 0, 0, 0, 0, 0, 1])[-1] == 0.14


class TestDayWindow:
    """Tests for StatsEngine.day_window."""

    def test_ends_yesterday(self, engine):
        window = engine.day_window(7)
        assert len(window) == 7
        assert window[0] == (TODAY - timedelta(days=7)).isoformat()
        assert window[-1] == (TODAY - timedelta(days=1)).isoformat()
        assert TODAY.isoformat() not in window

    def test_non_positive(self, engine):
        assert engine.day_window(0) == []
        assert engine.day_window(-3) == []


class TestStudentWithStats:
    """Tests for per-student statistics."""

    def test_two_sessions_three_mistakes(self, store, engine, pair):
        """Two sessions and three mistakes average 1.5, tajweed most common."""
        first, second = pair
        session = _session(store, first, second)
        _session(store, second, first)
        _mistakes(store, session, first, ["tajweed", "tajweed", "word"])

        stats = engine.get_student_with_stats(first.id)
        assert stats.session_count == 2
        assert stats.average_mistakes == 1.5
        assert stats.most_common_mistake_type == MistakeType.TAJWEED

    def test_no_sessions(self, engine, pair):
        first, _ = pair
        stats = engine.get_student_with_stats(first.id)
        assert stats.session_count == 0
        assert stats.average_mistakes == 0
        assert stats.most_common_mistake_type is None

    def test_juz_progress(self, store, engine):
        student = store.create_student(name="Zaynab", current_juz=11, completed_juz=[1, 2, 3])
        assert engine.get_student_with_stats(student.id).juz_progress == 10

    def test_unknown_student(self, engine):
        assert engine.get_student_with_stats(99) is None

    def test_to_dict_flattens(self, store, engine, pair):
        first, _ = pair
        data = engine.get_student_with_stats(first.id).to_dict()
        assert data["name"] == "Ahmad"
        assert data["session_count"] == 0

    def test_all_students(self, engine, pair):
        results = engine.get_all_students_with_stats()
        assert [r.student.name for r in results] == ["Ahmad", "Yusuf"]


class TestMistakeDistribution:
    """Tests for get_mistake_type_distribution."""

    def test_empty(self, engine):
        assert engine.get_mistake_type_distribution() == {"tajweed": 0, "word": 0, "stuck": 0}

    def test_forty_thirty_thirty(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["tajweed"] * 4 + ["word"] * 3 + ["stuck"] * 3)
        assert engine.get_mistake_type_distribution() == {"tajweed": 40, "word": 30, "stuck": 30}

    def test_sum_near_hundred(self, store, engine, pair):
        """Independent rounding keeps the total within 100 +/- 2."""
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["tajweed"] * 4 + ["word"] * 3 + ["stuck"] * 2)
        distribution = engine.get_mistake_type_distribution()
        assert distribution == {"tajweed": 44, "word": 33, "stuck": 22}
        assert 98 <= sum(distribution.values()) <= 102


class TestSessionAggregates:
    """Tests for weekday counts and average mistakes."""

    def test_session_count_by_day(self, store, engine, pair):
        first, second = pair
        _session(store, first, second, date=_at(0))  # Friday
        _session(store, first, second, date=_at(0, hour=15))
        _session(store, second, first, date=_at(5))  # Sunday

        counts = engine.get_session_count_by_day()
        assert list(counts) == list(WEEKDAYS)
        assert counts["Fri"] == 2
        assert counts["Sun"] == 1
        assert sum(counts.values()) == 3

    def test_average_mistakes_no_sessions(self, engine):
        assert engine.get_average_mistakes_per_session() == 0

    def test_average_mistakes_rounded(self, store, engine, pair):
        first, second = pair
        sessions = [_session(store, first, second) for _ in range(4)]
        _mistakes(store, sessions[0], first, ["word"] * 9)
        assert engine.get_average_mistakes_per_session() == 2.3


class TestMistakeTrend:
    """Tests for get_mistake_trend."""

    def test_length_and_order(self, engine):
        trend = engine.get_mistake_trend(30)
        assert len(trend) == 30
        assert [p["date"] for p in trend] == sorted(p["date"] for p in trend)
        assert all(p["count"] == 0 for p in trend)

    def test_counts_inside_window_only(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["word", "stuck"], created_at=_at(1))
        _mistakes(store, session, first, ["word"], created_at=_at(3))
        _mistakes(store, session, first, ["word"], created_at=_at(10))

        trend = engine.get_mistake_trend(7)
        by_date = {p["date"]: p["count"] for p in trend}
        assert by_date[(TODAY - timedelta(days=1)).isoformat()] == 2
        assert by_date[(TODAY - timedelta(days=3)).isoformat()] == 1
        assert sum(by_date.values()) == 3

    def test_oldest_day_counted_today_excluded(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["word"], created_at=_at(7))
        _mistakes(store, session, first, ["stuck", "stuck"], created_at=_at(0))

        trend = engine.get_mistake_trend(7)
        assert trend[0] == {"date": "2024-03-08", "count": 1}
        assert sum(p["count"] for p in trend) == 1


class TestStudentProgress:
    """Tests for get_student_progress."""

    def test_no_mistakes(self, engine, pair):
        first, _ = pair
        progress = engine.get_student_progress(first.id, 14)
        assert len(progress) == 14
        assert all(p["count"] == 0 and p["mistake_type"] is None for p in progress)

    def test_one_mistake_per_day_stays_flat(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        for offset in range(1, 11):
            _mistakes(store, session, first, ["stuck"], created_at=_at(offset))

        progress = engine.get_student_progress(first.id, 10)
        assert [p["count"] for p in progress] == [1] * 10
        assert all(p["mistake_type"] == MistakeType.STUCK for p in progress)

    def test_last_type_of_day_kept(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["tajweed", "word"], created_at=_at(1))

        progress = engine.get_student_progress(first.id, 3)
        assert progress[-1]["count"] == 2
        assert progress[-1]["mistake_type"] == MistakeType.WORD

    def test_smoothing_applies_from_seventh_day(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["word"] * 7, created_at=_at(1))

        progress = engine.get_student_progress(first.id, 7)
        assert progress[-1]["count"] == 1.0

    def test_other_students_ignored(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, second, ["word"], created_at=_at(1))
        assert all(p["count"] == 0 for p in engine.get_student_progress(first.id, 3))


class TestSessionDetails:
    """Tests for session detail views."""

    def test_with_details(self, store, engine, pair):
        first, second = pair
        session = _session(store, first, second)
        _mistakes(store, session, first, ["word", "stuck"])

        details = engine.get_session_with_details(session.id)
        assert details["student1"]["name"] == "Ahmad"
        assert details["student2"]["name"] == "Yusuf"
        assert details["mistake_count"] == 2

    def test_unknown_session(self, engine):
        assert engine.get_session_with_details(99) is None

    def test_recent_sessions(self, store, engine, pair):
        first, second = pair
        third = store.create_student(name="Ibrahim", current_juz=7)
        old = _session(store, first, second, date=_at(3))
        newest = _session(store, second, third, date=_at(0))
        middle = _session(store, third, first, date=_at(1))

        assert [s["id"] for s in engine.get_recent_sessions(2)] == [newest.id, middle.id]
        assert [s["id"] for s in engine.get_recent_sessions(5, student_id=first.id)] == [middle.id, old.id]
        assert engine.get_recent_sessions(0) == []


class TestLessonStats:
    """Tests for teacher statistics and lesson views."""

    @pytest.fixture
    def teacher(self, store):
        return store.create_user("t", "Teacher", UserRole.TEACHER)

    def _lesson(self, store, teacher, student, **kwargs):
        return store.create_lesson(teacher.id, student.id, "Yunus", 1, "Yunus", 10, **kwargs)

    def test_teacher_without_lessons(self, engine, teacher):
        stats = engine.get_teacher_stats(teacher.id)
        assert stats.total_lessons == 0
        assert stats.completed_lessons == 0
        assert stats.students_count == 0
        assert stats.average_mistakes == 0

    def test_teacher_stats(self, store, engine, teacher, pair):
        first, second = pair
        third = store.create_student(name="Ibrahim", current_juz=7)
        store.assign_student(teacher.id, third.id)
        done = self._lesson(store, teacher, first, progress=LessonProgress.COMPLETED)
        self._lesson(store, teacher, second)
        self._lesson(store, teacher, first)
        for _ in range(2):
            store.create_lesson_mistake(done.id, first.id, "word", "Yunus", 2, "")

        stats = engine.get_teacher_stats(teacher.id)
        assert stats.total_lessons == 3
        assert stats.completed_lessons == 1
        assert stats.students_count == 3
        assert stats.average_mistakes == 0.7
        assert stats.to_dict()["students_count"] == 3

    def test_student_lesson_progress(self, store, engine, teacher, pair):
        first, _ = pair
        lesson = self._lesson(store, teacher, first, date=_at(1))
        store.create_lesson_mistake(lesson.id, first.id, "stuck", "Yunus", 3, "")
        self._lesson(store, teacher, first, date=_at(20))

        progress = engine.get_student_lesson_progress(first.id, 3)
        assert [p["date"] for p in progress][-1] == (TODAY - timedelta(days=1)).isoformat()
        assert progress[2] == {
            "date": (TODAY - timedelta(days=1)).isoformat(),
            "lesson_count": 1,
            "mistake_count": 1,
        }
        assert sum(p["lesson_count"] for p in progress) == 1

    def test_lesson_with_details(self, store, engine, teacher, pair):
        first, _ = pair
        lesson = self._lesson(store, teacher, first)
        details = engine.get_lesson_with_details(lesson.id)
        assert details["student"]["name"] == "Ahmad"
        assert details["teacher"]["username"] == "t"
        assert details["mistake_count"] == 0
        assert engine.get_lesson_with_details(99) is None

    def test_recent_lessons_filters(self, store, engine, teacher, pair):
        first, second = pair
        other = store.create_user("o", "Other", UserRole.TEACHER)
        a = self._lesson(store, teacher, first, date=_at(2))
        b = self._lesson(store, teacher, second, date=_at(0))
        c = self._lesson(store, other, first, date=_at(1))

        assert [lesson["id"] for lesson in engine.get_recent_lessons(5)] == [b.id, c.id, a.id]
        assert [lesson["id"] for lesson in engine.get_recent_lessons(5, teacher_id=teacher.id)] == [b.id, a.id]
        assert [lesson["id"] for lesson in engine.get_recent_lessons(5, student_id=first.id)] == [c.id, a.id]
        assert len(engine.get_recent_lessons(1)) == 1
