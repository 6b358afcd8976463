"""Tests for user and auth endpoints."""

from conftest import STUDENT_HEADERS, TEACHER_HEADERS


class TestUsers:
    """Tests for /api/users."""

    def test_list_users(self, client):
        data = client.get("/api/users").json()
        assert [u["username"] for u in data] == ["ustadh.yahya", "ahmad"]
        assert "createdAt" in data[0]

    def test_create_user(self, client):
        response = client.post("/api/users", json={"username": "maryam", "name": "Maryam"})
        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 3
        assert data["role"] == "student"

    def test_create_duplicate_username(self, client):
        response = client.post("/api/users", json={"username": "Ahmad", "name": "Another"})
        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_create_invalid_role(self, client):
        response = client.post("/api/users", json={"username": "x", "name": "X", "role": "admin"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "role"

    def test_get_user(self, client):
        assert client.get("/api/users/1").json()["name"] == "Ustadh Yahya"
        assert client.get("/api/users/999").status_code == 404

    def test_delete_user_unlinks_student(self, client):
        assert client.delete("/api/users/2").status_code == 204
        assert client.get("/api/students/1").json()["userId"] is None
        assert client.delete("/api/users/2").status_code == 404


class TestAuthUser:
    """Tests for GET /api/auth/user."""

    def test_current_user(self, client):
        assert client.get("/api/auth/user", headers=TEACHER_HEADERS).json()["role"] == "teacher"
        assert client.get("/api/auth/user", headers=STUDENT_HEADERS).json()["username"] == "ahmad"

    def test_missing_header(self, client):
        assert client.get("/api/auth/user").status_code == 401

    def test_unknown_user(self, client):
        assert client.get("/api/auth/user", headers={"X-User-Id": "99"}).status_code == 401

    def test_malformed_header(self, client):
        assert client.get("/api/auth/user", headers={"X-User-Id": "abc"}).status_code == 400
