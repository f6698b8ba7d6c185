"""
HTTP tests for the TaskStreak API.

Requests go through the real routes with the database dependency bound to
the per-test in-memory session factory.
"""
import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient

from taskstreak.main import app
from taskstreak.database import get_db
from taskstreak.middleware import auth


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        test_client.headers.update({"X-API-Key": auth.API_KEY})
        yield test_client
    app.dependency_overrides.clear()


def register(client, username="alice"):
    response = client.post("/api/users", json={"username": username, "email": f"{username}@example.com"})
    assert response.status_code == 201
    return response.json()


class TestAuth:

    def test_health_check_is_public(self, client):
        response = client.get("/", headers={"X-API-Key": ""})
        assert response.status_code == 200

    def test_missing_key_rejected(self, client):
        response = client.get("/api/users/1", headers={"X-API-Key": ""})
        assert response.status_code == 401

    def test_wrong_key_rejected(self, client):
        response = client.get("/api/users/1", headers={"X-API-Key": "wrong"})
        assert response.status_code == 401


class TestUsers:

    def test_register_and_fetch(self, client):
        user = register(client)
        assert user["total_points"] == 0
        assert user["day_start_time"] == "09:00:00"

        response = client.get(f"/api/users/{user['id']}")
        assert response.json()["username"] == "alice"

    def test_duplicate_username_conflicts(self, client):
        register(client)
        response = client.post("/api/users", json={"username": "alice", "email": "other@example.com"})
        assert response.status_code == 409

    def test_unknown_user_not_found(self, client):
        assert client.get("/api/users/999").status_code == 404

    def test_invalid_day_start_rejected(self, client):
        response = client.post(
            "/api/users",
            json={"username": "carol", "email": "carol@example.com", "day_start_time": "25:00"}
        )
        assert response.status_code == 422

    def test_suggestions_for_new_user(self, client):
        user = register(client)
        response = client.get(f"/api/users/{user['id']}/suggestions")
        assert response.status_code == 200
        assert len(response.json()["suggestions"]) == 2


class TestTaskFlow:

    def test_complete_then_delete(self, client):
        user = register(client)
        created = client.post(f"/api/users/{user['id']}/tasks", json={"title": "Read", "difficulty": "easy"})
        assert created.status_code == 201
        task_id = created.json()["id"]

        completed = client.post(
            f"/api/users/{user['id']}/tasks/{task_id}/complete",
            json={"reflection_note": "Finished chapter"}
        )
        assert completed.status_code == 200
        body = completed.json()
        assert 0 < body["points_earned"] <= 50
        assert body["task"]["status"] == "completed"
        assert body["user"]["total_points"] == body["points_earned"]
        assert body["user"]["current_streak"] == 1

        again = client.post(
            f"/api/users/{user['id']}/tasks/{task_id}/complete",
            json={"reflection_note": "Again"}
        )
        assert again.status_code == 409

        deleted = client.delete(f"/api/users/{user['id']}/tasks/{task_id}")
        assert deleted.json() == {"task_id": task_id, "points_lost": body["points_earned"]}

        profile = client.get(f"/api/users/{user['id']}").json()
        assert profile["total_points"] == 0
        assert profile["current_streak"] == 0
        assert client.get(f"/api/users/{user['id']}/tasks/{task_id}").status_code == 404

    def test_blank_reflection_rejected(self, client):
        user = register(client)
        task_id = client.post(f"/api/users/{user['id']}/tasks", json={"title": "Read"}).json()["id"]

        response = client.post(
            f"/api/users/{user['id']}/tasks/{task_id}/complete",
            json={"reflection_note": "   "}
        )
        assert response.status_code == 400

    def test_unknown_status_filter_rejected(self, client):
        user = register(client)
        response = client.get(f"/api/users/{user['id']}/tasks", params={"status_filter": "archived"})
        assert response.status_code == 400

    def test_weekly_stats_has_seven_days(self, client):
        user = register(client)
        response = client.get(f"/api/users/{user['id']}/stats/weekly")
        assert response.status_code == 200
        assert len(response.json()) == 7


class TestCompetitions:

    def test_create_and_view_leaderboard(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        start = date.today()

        created = client.post(
            f"/api/users/{alice['id']}/competitions",
            json={
                "name": "Week one",
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=6)).isoformat(),
                "member_ids": [bob["id"]]
            }
        )
        assert created.status_code == 201
        competition = created.json()
        assert competition["participant_ids"] == [alice["id"], bob["id"]]

        board = client.get(f"/api/users/{bob['id']}/competitions/{competition['id']}/leaderboard")
        assert board.status_code == 200
        assert [entry["rank"] for entry in board.json()["leaderboard"]] == [1, 2]

    def test_leaderboard_hidden_from_outsiders(self, client):
        alice = register(client, "alice")
        outsider = register(client, "outsider")
        start = date.today()
        competition = client.post(
            f"/api/users/{alice['id']}/competitions",
            json={
                "name": "Solo",
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=3)).isoformat()
            }
        ).json()

        response = client.get(f"/api/users/{outsider['id']}/competitions/{competition['id']}/leaderboard")
        assert response.status_code == 403

    def test_competition_detail(self, client):
        alice = register(client, "alice")
        bob = register(client, "bob")
        outsider = register(client, "outsider")
        start = date.today()
        competition = client.post(
            f"/api/users/{alice['id']}/competitions",
            json={
                "name": "Week one",
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=6)).isoformat(),
                "member_ids": [bob["id"]]
            }
        ).json()

        detail = client.get(f"/api/users/{bob['id']}/competitions/{competition['id']}")
        assert detail.status_code == 200
        body = detail.json()
        assert body["name"] == "Week one"
        assert body["participant_ids"] == [alice["id"], bob["id"]]
        assert [entry["user_id"] for entry in body["leaderboard"]] == [alice["id"], bob["id"]]
        assert body["winner_id"] is None

        hidden = client.get(f"/api/users/{outsider['id']}/competitions/{competition['id']}")
        assert hidden.status_code == 403
        assert client.get(f"/api/users/{alice['id']}/competitions/999").status_code == 404

    def test_ended_competition_reports_winner(self, client):
        alice = register(client, "alice")
        start = date.today()
        competition = client.post(
            f"/api/users/{alice['id']}/competitions",
            json={
                "name": "Solo",
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=3)).isoformat()
            }
        ).json()
        task_id = client.post(f"/api/users/{alice['id']}/tasks", json={"title": "Read"}).json()["id"]
        client.post(f"/api/users/{alice['id']}/tasks/{task_id}/complete", json={"reflection_note": "ok"})

        ended = client.post(f"/api/users/{alice['id']}/competitions/{competition['id']}/end")
        assert ended.json()["status"] == "completed"

        board = client.get(f"/api/users/{alice['id']}/competitions/{competition['id']}/leaderboard").json()
        assert board["winner_id"] == alice["id"]
        points = board["leaderboard"][0]["total_points"]

        client.delete(f"/api/users/{alice['id']}/tasks/{task_id}")
        after = client.get(f"/api/users/{alice['id']}/competitions/{competition['id']}/leaderboard").json()
        assert after["leaderboard"][0]["total_points"] == points

    def test_past_start_rejected(self, client):
        alice = register(client)
        yesterday = date.today() - timedelta(days=1)
        response = client.post(
            f"/api/users/{alice['id']}/competitions",
            json={
                "name": "Late",
                "start_date": yesterday.isoformat(),
                "end_date": (yesterday + timedelta(days=5)).isoformat()
            }
        )
        assert response.status_code == 400
