from __future__ import annotations

from fastapi.testclient import TestClient

from myflex.analytics.store import clear_events, get_events
from myflex.app import app, bootstrap
from myflex.profiles.interactions import (
    MAX_LAST_INTERACTIONS,
    score_key,
    track_user_interaction,
)
from myflex.profiles.models import UserProfile
from myflex.profiles.repository import create_profile, get_profile
from myflex.store.documents import DocumentStore, get_store, reset_store

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _store_with_user() -> DocumentStore:
    store = DocumentStore()
    create_profile(store, UserProfile(id="u1", name="Test"))
    return store


def test_score_key_normalises():
    assert score_key(" Cuisine du Monde ") == "cuisine du monde"
    assert score_key("St. Lucia") == "st  lucia"
    assert score_key(None) == ""


def test_interaction_weights_accumulate():
    store = _store_with_user()
    track_user_interaction(store, "u1", "Pizza maison", "Italienne", "Pâtes", "like")
    track_user_interaction(store, "u1", "Lasagnes", "Italienne", "Pâtes", "cook_complete")
    track_user_interaction(store, "u1", "Tacos", "Mexicaine", "Cuisine du Monde", "dislike")

    vp = get_profile(store, "u1").virtual_profile
    assert vp.origin_scores == {"italienne": 13, "mexicaine": -10}
    assert vp.category_scores == {"pâtes": 13, "cuisine du monde": -10}
    assert vp.total_interactions == 3
    assert vp.last_interactions == ["Tacos", "Lasagnes", "Pizza maison"]


def test_history_is_deduplicated_and_capped():
    store = _store_with_user()
    for i in range(MAX_LAST_INTERACTIONS + 5):
        track_user_interaction(store, "u1", f"Dish {i}", "Française", "Healthy", "view")
    track_user_interaction(store, "u1", "Dish 10", "Française", "Healthy", "view")

    history = get_profile(store, "u1").virtual_profile.last_interactions
    assert len(history) == MAX_LAST_INTERACTIONS
    assert history[0] == "Dish 10"
    assert history.count("Dish 10") == 1
    assert history[1] == f"Dish {MAX_LAST_INTERACTIONS + 4}"


def test_interaction_is_logged_per_user_and_globally():
    clear_events()
    store = _store_with_user()
    track_user_interaction(store, "u1", "Mafé", "Africaine", "", "cook_start")

    logs = store.list("users/u1/analytics")
    assert len(logs) == 1
    assert logs[0]["eventType"] == "cook_start"
    assert logs[0]["dishName"] == "Mafé"

    events = get_events("interaction")
    assert events[-1]["weight"] == 3
    assert events[-1]["origin"] == "africaine"

    vp = get_profile(store, "u1").virtual_profile
    assert vp.category_scores == {}


def test_unknown_user_returns_false():
    clear_events()
    assert track_user_interaction(DocumentStore(), "ghost", "Mafé", "Africaine", "Plat", "view") is False
    assert get_events("interaction") == []


# ── Endpoints ────────────────────────────────────────────────────────────


def test_interaction_endpoint_updates_profile():
    reset_store()
    bootstrap(get_store())
    _login_user(client)

    resp = client.post("/interactions", json={
        "dishName": "Pâtes bolognaise",
        "dishOrigin": "Italienne",
        "dishCategory": "Plat Quotidien",
        "eventType": "like",
    })
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    profile = client.get("/profile").json()
    assert profile["virtualProfile"]["originScores"] == {"italienne": 8}
    assert profile["virtualProfile"]["lastInteractions"] == ["Pâtes bolognaise"]


def test_interaction_endpoint_rejects_unknown_event():
    _login_user(client)
    resp = client.post("/interactions", json={"dishName": "X", "eventType": "share"})
    assert resp.status_code == 422


def test_profile_read_and_update():
    reset_store()
    bootstrap(get_store())
    _login_user(client)

    profile = client.get("/profile").json()
    assert profile["id"] == "user"
    assert profile["origin"] == "Italienne"
    assert profile["level"] == 1

    resp = client.patch("/profile", json={"mainObjective": "Prise de masse", "allergies": "gluten"})
    assert resp.status_code == 200
    assert resp.json()["mainObjective"] == "Prise de masse"
    assert resp.json()["allergies"] == "gluten"
    assert resp.json()["origin"] == "Italienne"


def test_profile_requires_login():
    assert TestClient(app).get("/profile").status_code == 401


def test_profile_update_ignores_null_fields():
    reset_store()
    bootstrap(get_store())
    _login_user(client)

    resp = client.patch("/profile", json={"name": None, "origin": None, "tone": "complice"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Demo User"
    assert resp.json()["origin"] == "Italienne"
    assert resp.json()["tone"] == "complice"

    assert client.get("/profile").status_code == 200
    _login_admin(client)
    assert client.get("/admin/users").status_code == 200
