import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from goalsync.api.dependencies import get_db
from goalsync.core import security
from goalsync.main import app


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _auth(user):
    return {"Authorization": f"Bearer {security.create_access_token(user.id)}"}


class TestAuthRoutes:

    def test_register_and_login(self, client: TestClient):
        response = client.post(
            "/auth/register",
            json={"email": "coach@example.com", "password": "secret1", "name": "Coach Carter", "type": "trainer"},
        )
        assert response.status_code == 201
        assert response.json()["user"]["type"] == "trainer"

        response = client.post("/auth/login", json={"email": "coach@example.com", "password": "secret1"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "coach@example.com"

    def test_duplicate_registration(self, client: TestClient):
        payload = {"email": "coach@example.com", "password": "secret1", "name": "Coach Carter", "type": "trainer"}
        client.post("/auth/register", json=payload)
        response = client.post("/auth/register", json=payload)
        assert response.status_code == 400

    def test_wrong_password(self, client: TestClient):
        client.post(
            "/auth/register",
            json={"email": "coach@example.com", "password": "secret1", "name": "Coach Carter", "type": "trainer"},
        )
        response = client.post("/auth/login", json={"email": "coach@example.com", "password": "nope123"})
        assert response.status_code == 401

    def test_requires_token(self, client: TestClient):
        assert client.get("/users/me").status_code == 401

    def test_rejects_bad_or_orphaned_tokens(self, client: TestClient, make_user):
        assert client.get("/users/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 401
        orphan = {"Authorization": f"Bearer {security.create_access_token('no-such-user')}"}
        assert client.get("/users/me", headers=orphan).status_code == 401

    def test_profile_patch_with_null_name(self, client: TestClient, make_user):
        player = make_user("Alex Morgan")
        response = client.patch("/users/me", json={"name": None, "position": "FWD"}, headers=_auth(player))
        assert response.status_code == 200
        assert response.json()["name"] == "Alex Morgan"
        assert response.json()["position"] == "FWD"


class TestTeamRoutes:

    def test_team_flow(self, client: TestClient, make_user):
        coach = make_user("Coach Carter", user_type="trainer")
        player = make_user("Alex Morgan")

        response = client.post("/teams/", json={"name": "Falcons"}, headers=_auth(coach))
        assert response.status_code == 201
        team_id = response.json()["id"]

        assert client.post(f"/teams/{team_id}/join", headers=_auth(player)).status_code == 200

        members = client.get(f"/teams/{team_id}/members", headers=_auth(player)).json()
        assert [m["role"] for m in members] == ["staff", "player"]

        response = client.patch(f"/teams/{team_id}/name", json={"name": "Hawks"}, headers=_auth(player))
        assert response.status_code == 403

    def test_event_creation_and_attendance(self, client: TestClient, make_user):
        coach = make_user("Coach Carter", user_type="trainer")
        player = make_user("Alex Morgan")
        team_id = client.post("/teams/", json={"name": "Falcons"}, headers=_auth(coach)).json()["id"]
        client.post(f"/teams/{team_id}/join", headers=_auth(player))

        response = client.post(
            "/events/",
            json={
                "team_id": team_id,
                "title": "League Game",
                "type": "match",
                "start_time": "2026-03-07T15:00:00Z",
                "end_time": "2026-03-07T17:00:00Z",
                "location": "City Park",
                "opponent": "Rovers",
                "is_home_game": False,
            },
            headers=_auth(coach),
        )
        assert response.status_code == 201
        event_id = response.json()["id"]

        response = client.put(
            f"/events/{event_id}/attendance",
            json={"user_id": player.id, "is_attending": True},
            headers=_auth(player),
        )
        assert response.status_code == 200
        assert response.json()["attendees"] == [player.id]

        stats = client.get(f"/teams/{team_id}/attendance", headers=_auth(coach)).json()
        assert stats["total_events"] == 1
        assert stats["player_stats"][0]["percentage"] == 100

        messages = client.get(f"/teams/{team_id}/chat/", headers=_auth(player)).json()
        assert messages[0]["type"] == "event"
        assert "Rovers (Away)" in messages[0]["text"]

    def test_invalid_event_is_rejected(self, client: TestClient, make_user):
        coach = make_user("Coach Carter", user_type="trainer")
        team_id = client.post("/teams/", json={"name": "Falcons"}, headers=_auth(coach)).json()["id"]

        response = client.post(
            "/events/",
            json={
                "team_id": team_id,
                "title": "League Game",
                "type": "match",
                "start_time": "2026-03-07T15:00:00Z",
                "end_time": "2026-03-07T14:00:00Z",
                "location": "City Park",
                "opponent": "Rovers",
            },
            headers=_auth(coach),
        )
        assert response.status_code == 422

    def test_formations(self, client: TestClient):
        response = client.get("/events/formations")
        assert response.status_code == 200
        assert len(response.json()) == 5


class TestChatWebSocket:

    def test_subscriber_receives_updates(self, client: TestClient, make_user):
        coach = make_user("Coach Carter", user_type="trainer")
        team_id = client.post("/teams/", json={"name": "Falcons"}, headers=_auth(coach)).json()["id"]
        token = security.create_access_token(coach.id)

        with client.websocket_connect(f"/teams/{team_id}/chat/ws?token={token}") as websocket:
            snapshot = websocket.receive_json()
            assert snapshot == {"type": "messages", "messages": []}

            response = client.post(f"/teams/{team_id}/chat/", json={"text": "Kick-off at 3"}, headers=_auth(coach))
            assert response.status_code == 201

            snapshot = websocket.receive_json()
            assert [m["text"] for m in snapshot["messages"]] == ["Kick-off at 3"]

    def test_outsider_is_refused(self, client: TestClient, make_user):
        coach = make_user("Coach Carter", user_type="trainer")
        stranger = make_user("Sam Kerr")
        team_id = client.post("/teams/", json={"name": "Falcons"}, headers=_auth(coach)).json()["id"]
        token = security.create_access_token(stranger.id)

        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"/teams/{team_id}/chat/ws?token={token}") as websocket:
                websocket.receive_json()
