"""API tests: profile, sessions, achievements over an in-memory database."""
from datetime import datetime, timedelta, timezone

T = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

FIRST = {"score": 95, "duration": 600, "skills_gained": {"empathy": 90, "patience": 95}, "scenario_id": "noisy-class"}
SECOND = {"score": 60, "duration": 300}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_profile_requires_login(client):
    client.cookies.clear()
    assert client.get("/api/profile").status_code == 401
    assert client.post("/api/sessions", json=SECOND).status_code == 401


def test_new_profile_is_zeroed(client, register):
    user = register(email="Anna.Teacher@Example.com")
    assert user["email"] == "anna.teacher@example.com"
    assert user["display_name"] == "anna.teacher"

    profile = client.get("/api/profile").json()
    assert profile["role"] == "student"
    assert profile["progress"] == {
        "total_sessions": 0,
        "completed_scenarios": 0,
        "average_score": 0,
        "total_time_spent": 0,
        "streak": 0,
        "last_session_date": None,
    }
    assert profile["skills"] == {"empathy": 0, "conflict_resolution": 0, "boundary_keeping": 0, "patience": 0}
    assert profile["achievements"] == []


def test_session_flow(client, register, set_clock):
    register()

    set_clock(T)
    resp = client.post("/api/sessions", json=FIRST)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["progress"]["total_sessions"] == 1
    assert data["progress"]["average_score"] == 95
    assert data["progress"]["streak"] == 1
    assert data["progress"]["total_time_spent"] == 600
    # skills start at 0 after registration
    assert data["skills"]["empathy"] == 27
    assert data["skills"]["patience"] == 29
    assert [a["id"] for a in data["newly_unlocked"]] == ["first_session", "perfectionist"]
    assert data["newly_unlocked"][0]["title"] == "Первый шаг"

    set_clock(T + timedelta(hours=25))
    data = client.post("/api/sessions", json=SECOND).json()
    assert data["progress"]["total_sessions"] == 2
    assert data["progress"]["average_score"] == 78
    assert data["progress"]["streak"] == 2
    assert data["newly_unlocked"] == []

    set_clock(T + timedelta(hours=26))
    data = client.post("/api/sessions", json=SECOND).json()
    assert data["progress"]["streak"] == 2

    profile = client.get("/api/profile").json()
    assert profile["progress"]["total_sessions"] == 3
    assert profile["progress"]["completed_scenarios"] == 3
    assert {a["id"] for a in profile["achievements"]} == {"first_session", "perfectionist"}


def test_history_most_recent_first(client, register, set_clock):
    register()
    set_clock(T)
    client.post("/api/sessions", json=FIRST)
    set_clock(T + timedelta(hours=1))
    client.post("/api/sessions", json=SECOND)

    history = client.get("/api/sessions").json()
    assert [s["score"] for s in history] == [60, 95]
    assert history[1]["scenario_id"] == "noisy-class"
    assert history[1]["skills_gained"] == {"empathy": 90.0, "patience": 95.0}

    assert len(client.get("/api/sessions", params={"limit": 1}).json()) == 1
    assert client.get("/api/sessions", params={"limit": 0}).status_code == 422


def test_achievement_catalogue(client, register, set_clock):
    register()
    set_clock(T)
    client.post("/api/sessions", json=SECOND)

    catalogue = client.get("/api/achievements").json()
    assert [a["id"] for a in catalogue] == [
        "first_session", "empathy_master", "patient_teacher", "perfectionist", "week_streak",
    ]
    unlocked = {a["id"]: a["unlocked"] for a in catalogue}
    assert unlocked["first_session"] is True
    assert unlocked["perfectionist"] is False
    assert catalogue[1]["unlocked_at"] is None


def test_invalid_score_changes_nothing(client, register):
    register()
    resp = client.post("/api/sessions", json={"score": 150, "duration": 10})
    assert resp.status_code == 422
    assert "score" in resp.json()["detail"]

    resp = client.post("/api/sessions", json={"score": 50, "duration": 10, "skills_gained": {"charisma": 10}})
    assert resp.status_code == 422

    profile = client.get("/api/profile").json()
    assert profile["progress"]["total_sessions"] == 0
    assert client.get("/api/sessions").json() == []


def test_negative_duration_rejected(client, register):
    register()
    assert client.post("/api/sessions", json={"score": 50, "duration": -1}).status_code == 422


def test_delete_session_recomputes(client, register, set_clock):
    register()
    set_clock(T)
    first_id = client.post("/api/sessions", json=FIRST).json()["session_id"]
    set_clock(T + timedelta(hours=25))
    client.post("/api/sessions", json=SECOND)

    resp = client.delete(f"/api/sessions/{first_id}")
    assert resp.status_code == 200, resp.text
    progress = resp.json()["progress"]
    assert progress["total_sessions"] == 1
    assert progress["average_score"] == 60
    assert progress["total_time_spent"] == 300
    assert progress["streak"] == 2

    assert client.delete(f"/api/sessions/{first_id}").status_code == 404
    # unlocked achievements survive the delete
    profile = client.get("/api/profile").json()
    assert {a["id"] for a in profile["achievements"]} == {"first_session", "perfectionist"}


def test_cannot_delete_other_users_session(client, register, set_clock):
    register()
    set_clock(T)
    session_id = client.post("/api/sessions", json=SECOND).json()["session_id"]

    register()
    assert client.delete(f"/api/sessions/{session_id}").status_code == 404


def test_update_display_name(client, register):
    register(display_name="Ms Ivanova")
    assert client.get("/api/profile").json()["display_name"] == "Ms Ivanova"

    resp = client.patch("/api/profile", json={"display_name": "  Anna  "})
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "Anna"
    assert resp.json()["updated_at"] is not None

    assert client.patch("/api/profile", json={"display_name": ""}).status_code == 422
