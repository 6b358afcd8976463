"""Tests for endpoints of the calling student."""

from datetime import timedelta

from conftest import STUDENT_HEADERS, TEACHER_HEADERS, TODAY


def _student_account(client, username="maryam", link=True):
    """Create a student user, optionally with a linked profile, and return its headers."""
    user = client.post("/api/users", json={"username": username, "name": username.title()}).json()
    if link:
        client.post("/api/students", json={"name": username.title(), "currentJuz": 1, "userId": user["id"]})
    return {"X-User-Id": str(user["id"])}


class TestStudentAccess:
    """Tests for authentication and profile checks."""

    def test_teacher_forbidden(self, client):
        assert client.get("/api/student/teacher", headers=TEACHER_HEADERS).status_code == 403

    def test_missing_header(self, client):
        assert client.get("/api/student/lessons").status_code == 401

    def test_no_profile(self, client):
        headers = _student_account(client, link=False)
        assert client.get("/api/student/teacher", headers=headers).status_code == 404


class TestMyTeacher:
    """Tests for GET /api/student/teacher."""

    def test_linked_teacher(self, client):
        data = client.get("/api/student/teacher", headers=STUDENT_HEADERS).json()
        assert data["username"] == "ustadh.yahya"
        assert data["role"] == "teacher"

    def test_no_teacher(self, client):
        headers = _student_account(client)
        response = client.get("/api/student/teacher", headers=headers)
        assert response.status_code == 200
        assert response.json() is None


class TestMyLessonsAndSessions:
    """Tests for the student's lessons and sessions."""

    def test_lessons(self, client):
        data = client.get("/api/student/lessons", headers=STUDENT_HEADERS).json()
        assert [lesson["id"] for lesson in data] == [1]
        assert data[0]["progress"] == "Completed"
        assert data[0]["mistakeCount"] == 1

    def test_lessons_empty(self, client):
        headers = _student_account(client)
        assert client.get("/api/student/lessons", headers=headers).json() == []

    def test_recent_sessions(self, client):
        data = client.get("/api/student/sessions/recent", headers=STUDENT_HEADERS).json()
        assert [s["id"] for s in data] == [1, 3]

    def test_recent_sessions_limit(self, client):
        data = client.get("/api/student/sessions/recent", params={"limit": 1}, headers=STUDENT_HEADERS).json()
        assert [s["id"] for s in data] == [1]


class TestMyProgress:
    """Tests for the student's progress series."""

    def test_progress(self, client):
        data = client.get("/api/student/progress", params={"days": 7}, headers=STUDENT_HEADERS).json()
        assert len(data) == 7
        assert data[-1]["date"] == (TODAY - timedelta(days=1)).isoformat()

    def test_lesson_progress(self, client):
        data = client.get("/api/student/lesson-progress", params={"days": 3}, headers=STUDENT_HEADERS).json()
        assert [p["lessonCount"] for p in data] == [0, 1, 0]
        assert [p["mistakeCount"] for p in data] == [0, 1, 0]
