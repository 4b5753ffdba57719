from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from myflex.analytics.aggregator import compute_analytics
from myflex.analytics.store import clear_events, get_events, record_event
from myflex.app import app, bootstrap
from myflex.store.documents import get_store, reset_store

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_compute_analytics_aggregates_flows_and_interactions():
    events = [
        {"type": "flow", "flow": "suggest_meal_plan", "fallback": False, "response_time_ms": 100.0},
        {"type": "flow", "flow": "suggest_meal_plan", "fallback": True, "response_time_ms": 300.0},
        {"type": "flow", "flow": "generate_recipe", "fallback": False, "response_time_ms": 50.0},
        {"type": "interaction", "event_type": "like", "origin": "italienne", "category": "pâtes"},
        {"type": "interaction", "event_type": "like", "origin": "italienne", "category": ""},
        {"type": "interaction", "event_type": "view", "origin": "mexicaine", "category": "pâtes"},
    ]

    body = compute_analytics(events, [])

    assert body["total_flow_calls"] == 3
    assert body["flows"]["suggest_meal_plan"] == {
        "calls": 2, "fallbacks": 1, "fallback_rate": 50.0, "avg_response_time_ms": 200.0,
    }
    assert list(body["flows"]) == ["suggest_meal_plan", "generate_recipe"]
    assert body["total_interactions"] == 3
    assert body["interactions_by_type"] == {"like": 2, "view": 1}
    assert body["top_origins"][0] == {"name": "italienne", "count": 2}
    assert body["top_categories"] == [{"name": "pâtes", "count": 2}]
    assert body["feedback_summary"]["total"] == 0


def test_event_store_filters_by_type():
    clear_events()
    record_event("flow", {"flow": "x"})
    record_event("interaction", {"event_type": "view"})

    assert len(get_events()) == 2
    assert [e["flow"] for e in get_events("flow")] == ["x"]
    assert all("timestamp" in e for e in get_events())


def test_analytics_returns_empty_initially():
    clear_events()
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_flow_calls"] == 0
    assert body["flows"] == {}


@patch("myflex.llm.groq_client.Groq", side_effect=Exception("offline"))
def test_analytics_tracks_flows_and_interactions(mock_groq_cls):
    reset_store()
    bootstrap(get_store())
    clear_events()
    _login_user(client)
    client.post("/meal-plan", json={})
    client.post("/single-meal", json={"timeOfDay": "soir"})
    client.post("/interactions", json={
        "dishName": "Tacos", "dishOrigin": "Mexicaine", "dishCategory": "Cuisine du Monde",
        "eventType": "view",
    })

    _login_admin(client)
    body = client.get("/analytics").json()

    assert body["total_flow_calls"] == 2
    assert body["flows"]["suggest_meal_plan"]["fallbacks"] == 1
    assert body["flows"]["suggest_single_meal"]["fallback_rate"] == 100.0
    assert body["interactions_by_type"] == {"view": 1}
    assert body["top_origins"] == [{"name": "mexicaine", "count": 1}]
