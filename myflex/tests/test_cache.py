from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from myflex.app import app
from myflex.flows.cache import cache_get, cache_set, clear_cache, get_cache_stats

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_cache_miss_then_hit():
    clear_cache()
    assert cache_get("generate_recipe", {"meal": "omelette"}) is None
    cache_set("generate_recipe", {"meal": "omelette"}, "cached")
    assert cache_get("generate_recipe", {"meal": "omelette"}) == "cached"

    stats = get_cache_stats()
    assert stats == {"size": 1, "hits": 1, "misses": 1, "hit_rate": 50.0}


def test_cache_keys_are_per_flow_and_request():
    clear_cache()
    cache_set("generate_recipe", {"meal": "omelette"}, "recipe")
    assert cache_get("estimate_calories", {"meal": "omelette"}) is None
    assert cache_get("generate_recipe", {"meal": "quiche"}) is None
    assert get_cache_stats()["hits"] == 0


def test_cache_entries_expire():
    clear_cache()
    with patch("myflex.flows.cache.time.time", return_value=1000.0):
        cache_set("generate_recipe", {"meal": "omelette"}, "recipe")
    with patch("myflex.flows.cache.time.time", return_value=1301.0):
        assert cache_get("generate_recipe", {"meal": "omelette"}) is None
    assert get_cache_stats()["size"] == 0


@patch("myflex.llm.groq_client.Groq", side_effect=Exception("offline"))
def test_calorie_fallback_is_not_cached_through_api(mock_groq_cls):
    clear_cache()
    _login_user(client)
    resp = client.post("/calories/estimate", json={"mealName": "Quiche lorraine"})
    assert resp.status_code == 200
    assert resp.json()["xpGained"] == 1
    assert get_cache_stats()["size"] == 0


def test_cache_stats_endpoint():
    clear_cache()
    cache_set("generate_recipe", {"meal": "omelette"}, "recipe")
    cache_get("generate_recipe", {"meal": "omelette"})
    _login_admin(client)
    resp = client.get("/cache/stats")
    assert resp.status_code == 200
    body = resp.json()
    assert body["hits"] == 1
    assert "hit_rate" in body


def test_cache_stats_requires_admin():
    _login_user(client)
    assert client.get("/cache/stats").status_code == 403
