from types import SimpleNamespace

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import Settings
from app.database import get_db
from app.main import app
from app.routers import cron as cron_module
from app.routers.missions import get_ai_service, get_mission_service
from app.services.ai_service import AIService
from app.services.mission_lock import user_transaction_lock
from tests.conftest import add_user


@pytest.fixture
def client(session_factory, make_service):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_mission_service(db: Session = Depends(get_db)):
        return make_service(session=db)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mission_service] = override_mission_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Request-ID"]


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def test_today_missions(client, catalog, user):
    response = client.get(f"/users/{user.id}/missions/today")
    assert response.status_code == 200
    body = response.json()
    assert body["day"] == "2025-03-03"
    assert [m["slot_number"] for m in body["missions"]] == [1, 2, 3]
    assert body["missions"][1]["template"]["type"] == "engagement"

    again = client.get(f"/users/{user.id}/missions/today").json()
    assert [m["id"] for m in again["missions"]] == [m["id"] for m in body["missions"]]


def test_today_missions_without_strategy(client, db, catalog):
    user = add_user(db, "vide@example.com", strategy=None)
    response = client.get(f"/users/{user.id}/missions/today")
    assert response.status_code == 200
    assert response.json()["missions"] == []


def test_unknown_user(client):
    assert client.get("/users/9999/missions/today").status_code == 404


def test_recommended_mission(client, catalog, user):
    response = client.get(f"/users/{user.id}/missions/today/recommended")
    assert response.status_code == 200
    assert response.json()["slot_number"] == 1
    assert response.json()["is_recommended"] is True


def test_complete_then_conflict(client, rewards, catalog, user):
    mission_id = client.get(f"/users/{user.id}/missions/today").json()["missions"][0]["id"]

    response = client.post(f"/users/{user.id}/missions/{mission_id}/complete")
    assert response.status_code == 200
    assert response.json()["success"] is True

    again = client.post(f"/users/{user.id}/missions/{mission_id}/complete")
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "already_processed"

    missing = client.post(f"/users/{user.id}/missions/999999/complete")
    assert missing.status_code == 404


def test_skip_and_reload(client, catalog, user):
    missions = client.get(f"/users/{user.id}/missions/today").json()["missions"]

    assert client.post(f"/users/{user.id}/missions/{missions[0]['id']}/skip").status_code == 200
    second_skip = client.post(f"/users/{user.id}/missions/{missions[0]['id']}/skip")
    assert second_skip.status_code == 409
    assert second_skip.json()["detail"]["code"] == "action_already_used"

    reload = client.post(f"/users/{user.id}/missions/{missions[1]['id']}/reload")
    assert reload.status_code == 200
    assert reload.json()["mission"]["used_reload"] is True


def test_lock_timeout_returns_503(client, db, catalog, user, settings):
    settings.mission_lock_timeout_ms = 50
    with user_transaction_lock(db, user.id, 1000):
        response = client.get(f"/users/{user.id}/missions/today")
    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json()["detail"]["code"] == "lock_timeout"


def test_history_and_planned_days(client, catalog, user):
    client.get(f"/users/{user.id}/missions/today")

    history = client.get(f"/users/{user.id}/missions/history", params={"limit": 2})
    assert history.status_code == 200
    assert len(history.json()) == 2

    planned = client.get(f"/users/{user.id}/missions/planned-days", params={"days_ahead": 7})
    assert planned.json() == {"rhythm": "three_week", "days": ["2025-03-05", "2025-03-07", "2025-03-10"]}


def test_caption_without_api_key(client, catalog, user):
    app.dependency_overrides[get_ai_service] = lambda: AIService(Settings(anthropic_api_key=""))
    mission_id = client.get(f"/users/{user.id}/missions/today").json()["missions"][0]["id"]

    response = client.post(f"/users/{user.id}/missions/{mission_id}/caption")
    assert response.status_code == 200
    assert response.json() == {"mission_id": mission_id, "caption": None}


def test_caption_with_client(client, catalog, user):
    calls = []

    class FakeMessages:
        def create(self, **kwargs):
            calls.append(kwargs)
            return SimpleNamespace(content=[SimpleNamespace(text="  POV: le plat du jour. #Lyon #Food ")])

    fake_client = SimpleNamespace(messages=FakeMessages())
    app.dependency_overrides[get_ai_service] = lambda: AIService(Settings(), client=fake_client)
    mission_id = client.get(f"/users/{user.id}/missions/today").json()["missions"][0]["id"]

    response = client.post(
        f"/users/{user.id}/missions/{mission_id}/caption",
        json={"context": "risotto aux cèpes"},
    )
    assert response.json()["caption"] == "POV: le plat du jour. #Lyon #Food"
    assert "risotto aux cèpes" in calls[0]["messages"][0]["content"]
    assert "Lyon" in calls[0]["messages"][0]["content"]


def test_complete_tutorial_endpoint(client, rewards, catalog, tutorials, user):
    missions = client.get(f"/users/{user.id}/missions/today").json()["missions"]

    response = client.post(
        f"/users/{user.id}/tutorials/{tutorials['intro'].id}/complete",
        json={"feedback": "useful"},
    )
    assert response.status_code == 200
    assert response.json()["mission_id"] == missions[2]["id"]

    assert client.post(f"/users/{user.id}/tutorials/424242/complete").status_code == 404
    bad = client.post(f"/users/{user.id}/tutorials/{tutorials['intro'].id}/complete", json={"feedback": "meh"})
    assert bad.status_code == 422


def test_progress_endpoints(client, rewards, catalog, user):
    mission_id = client.get(f"/users/{user.id}/missions/today").json()["missions"][0]["id"]
    client.post(f"/users/{user.id}/missions/{mission_id}/complete")

    streak = client.get(f"/users/{user.id}/streak").json()
    assert streak["current_streak"] == 1

    level = client.get(f"/users/{user.id}/level").json()
    assert level["xp_total"] == 12
    assert level["level_name"] == "Débutant"

    badges = client.get(f"/users/{user.id}/badges").json()
    assert len(badges) == 10
    assert not any(item["unlocked"] for item in badges)

    stats = client.get(f"/users/{user.id}/stats").json()
    assert {metric["type"]: metric["value"] for metric in stats}["missions_completed"] == 1

    notifications = client.get(f"/users/{user.id}/notifications").json()
    assert notifications["unread_count"] == 1
    notification_id = notifications["notifications"][0]["id"]
    assert notifications["notifications"][0]["is_read"] is False
    assert client.post(f"/users/{user.id}/notifications/{notification_id}/read").status_code == 200
    assert client.post(f"/users/{user.id}/notifications/999999/read").status_code == 404
    assert client.post(f"/users/{user.id}/notifications/read-all").json() == {"updated": 0}
    read = client.get(f"/users/{user.id}/notifications").json()
    assert read["unread_count"] == 0
    assert read["notifications"][0]["is_read"] is True


def test_xp_actions(client, rewards, user):
    actions = client.get(f"/users/{user.id}/xp-actions").json()
    assert len(actions) == 7
    assert actions[0] == {
        "action_type": "badge_earned",
        "xp_amount": 25,
        "description": "Badge débloqué",
        "is_active": True,
    }
    assert client.get("/users/9999/xp-actions").status_code == 404


def test_cron_secret(client, monkeypatch, catalog, user):
    monkeypatch.setattr(cron_module, "get_settings", lambda: Settings(cron_secret="s3cret"))

    assert client.post("/cron/check-streaks").status_code == 403
    response = client.post("/cron/check-streaks", headers={"X-Cron-Secret": "s3cret"})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_cron_assign_missions(client, monkeypatch, catalog, user):
    monkeypatch.setattr(cron_module, "get_settings", lambda: Settings(cron_secret=""))
    response = client.post("/cron/assign-missions")
    assert response.status_code == 200
    assert response.json()["result"]["assigned"] == 1
