"""Tests for mistakes endpoints."""

MISTAKE = {
    "sessionId": 2,
    "studentId": 2,
    "type": "stuck",
    "surah": "Yunus",
    "ayah": 9,
    "description": "Hesitated",
}


class TestListMistakes:
    """Tests for mistake listings."""

    def test_list(self, client):
        assert len(client.get("/api/mistakes").json()) == 9

    def test_by_session(self, client):
        data = client.get("/api/mistakes/session/1").json()
        assert [m["type"] for m in data] == ["tajweed", "word", "stuck"]

    def test_by_student(self, client):
        assert len(client.get("/api/mistakes/student/2").json()) == 2


class TestCreateMistake:
    """Tests for POST /api/mistakes."""

    def test_create(self, client):
        response = client.post("/api/mistakes", json=MISTAKE)
        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 10
        assert data["sessionId"] == 2
        assert data["type"] == "stuck"

    def test_unknown_type(self, client):
        response = client.post("/api/mistakes", json={**MISTAKE, "type": "grammar"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "type"

    def test_unknown_session(self, client):
        response = client.post("/api/mistakes", json={**MISTAKE, "sessionId": 99})
        assert response.status_code == 404

    def test_invalid_ayah(self, client):
        assert client.post("/api/mistakes", json={**MISTAKE, "ayah": 0}).status_code == 400


class TestGetUpdateDeleteMistake:
    """Tests for single-mistake endpoints."""

    def test_get(self, client):
        assert client.get("/api/mistakes/4").json()["surah"] == "Yunus"
        assert client.get("/api/mistakes/999").status_code == 404

    def test_patch_type(self, client):
        data = client.patch("/api/mistakes/1", json={"type": "stuck"}).json()
        assert data["type"] == "stuck"
        assert data["ayah"] == 7

    def test_put_description(self, client):
        data = client.put("/api/mistakes/1", json={"description": "Ghunnah"}).json()
        assert data["description"] == "Ghunnah"

    def test_update_not_found(self, client):
        assert client.patch("/api/mistakes/999", json={"ayah": 2}).status_code == 404

    def test_delete(self, client):
        assert client.delete("/api/mistakes/1").status_code == 204
        assert client.delete("/api/mistakes/1").status_code == 404
