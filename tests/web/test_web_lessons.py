"""Tests for lesson and lesson-mistake endpoints."""

LESSON_MISTAKE = {
    "lessonId": 2,
    "studentId": 2,
    "type": "word",
    "surah": "Yunus",
    "ayah": 18,
    "description": "Swapped two words",
}


class TestGetLesson:
    """Tests for GET /api/lessons/{id}."""

    def test_with_details(self, client):
        data = client.get("/api/lessons/1").json()
        assert data["student"]["name"] == "Ahmad Hassan"
        assert data["teacher"]["name"] == "Ustadh Yahya"
        assert data["notes"] == "Focus on madd lengths"
        assert data["mistakeCount"] == 1

    def test_not_found(self, client):
        response = client.get("/api/lessons/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Lesson 999 not found"


class TestUpdateLesson:
    """Tests for PATCH /api/lessons/{id}."""

    def test_patch_notes(self, client):
        data = client.patch("/api/lessons/2", json={"notes": "Revise first"}).json()
        assert data["notes"] == "Revise first"
        assert data["progress"] == "In Progress"

    def test_patch_progress(self, client):
        assert client.patch("/api/lessons/1", json={"progress": "Not Started"}).json()["progress"] == "Not Started"

    def test_complete(self, client):
        response = client.patch("/api/lessons/2/complete")
        assert response.status_code == 200
        assert response.json()["progress"] == "Completed"

    def test_not_found(self, client):
        assert client.patch("/api/lessons/999", json={"notes": "x"}).status_code == 404
        assert client.patch("/api/lessons/999/complete").status_code == 404


class TestDeleteLesson:
    """Tests for DELETE /api/lessons/{id}."""

    def test_delete_cascades(self, client):
        assert client.delete("/api/lessons/1").status_code == 204
        assert client.get("/api/lessons/1").status_code == 404
        assert client.get("/api/lessons/1/mistakes").json() == []

    def test_delete_not_found(self, client):
        assert client.delete("/api/lessons/999").status_code == 404


class TestLessonMistakes:
    """Tests for lesson mistakes."""

    def test_list(self, client):
        data = client.get("/api/lessons/1/mistakes").json()
        assert len(data) == 1
        assert data[0]["type"] == "tajweed"

    def test_create(self, client):
        response = client.post("/api/lesson-mistakes", json=LESSON_MISTAKE)
        assert response.status_code == 201
        assert response.json()["lessonId"] == 2
        assert len(client.get("/api/lessons/2/mistakes").json()) == 1
        assert client.get("/api/lessons/2").json()["mistakeCount"] == 1

    def test_create_unknown_lesson(self, client):
        response = client.post("/api/lesson-mistakes", json={**LESSON_MISTAKE, "lessonId": 99})
        assert response.status_code == 404

    def test_delete(self, client):
        assert client.delete("/api/lesson-mistakes/1").status_code == 204
        assert client.delete("/api/lesson-mistakes/1").status_code == 404
